from .opponent import generate_opponent
from .registry import ActiveBattle, SessionRegistry
from .resolver import resolve_round
from .session import DECK_SIZE, MAX_ROUNDS, WINS_TO_CLINCH, BattleSession
from .strategy import choose_move

__all__ = (
    "DECK_SIZE",
    "MAX_ROUNDS",
    "WINS_TO_CLINCH",
    "ActiveBattle",
    "BattleSession",
    "SessionRegistry",
    "choose_move",
    "generate_opponent",
    "resolve_round",
)
