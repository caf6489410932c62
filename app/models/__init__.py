from .battle_record import BattleRecord
from .card import Card

__all__ = ("BattleRecord", "Card")
