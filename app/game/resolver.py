from app.core.enums import BattlePosition
from app.schemas.battle import BattleMove, RoundResult


def _pick_winner(move_a: BattleMove, move_b: BattleMove) -> str | None:
    card_a, card_b = move_a.card, move_b.card
    a_id, b_id = move_a.participant_id, move_b.participant_id

    match move_a.position, move_b.position:
        case BattlePosition.ATTACK, BattlePosition.ATTACK:
            if card_a.attack == card_b.attack:
                return None
            return a_id if card_a.attack > card_b.attack else b_id
        case BattlePosition.ATTACK, BattlePosition.DEFENSE:
            # Defender holds on equal stats
            return a_id if card_a.attack > card_b.defense else b_id
        case BattlePosition.DEFENSE, BattlePosition.ATTACK:
            return b_id if card_b.attack > card_a.defense else a_id
        case _:
            return None


def _describe_clash(move_a: BattleMove, move_b: BattleMove) -> str:
    card_a, card_b = move_a.card, move_b.card

    match move_a.position, move_b.position:
        case BattlePosition.ATTACK, BattlePosition.ATTACK:
            return f"ATK {card_a.attack} clashes with ATK {card_b.attack}."
        case BattlePosition.ATTACK, BattlePosition.DEFENSE:
            return f"ATK {card_a.attack} strikes at DEF {card_b.defense}."
        case BattlePosition.DEFENSE, BattlePosition.ATTACK:
            return f"ATK {card_b.attack} strikes at DEF {card_a.defense}."
        case _:
            return "Both cards hold their ground."


def resolve_round(move_a: BattleMove, move_b: BattleMove, round_number: int) -> RoundResult:
    """Resolve two simultaneous moves into a round result.

    ``move_a`` always belongs to player A and ``move_b`` to player B. The outcome only
    depends on the positions and stats, so the same moves always give the same result.
    """
    winner_id = _pick_winner(move_a, move_b)

    lines = [f"{move_a} vs {move_b}", _describe_clash(move_a, move_b)]
    if winner_id is None:
        lines.append("It's a tie! No points awarded.")
    else:
        winning_move = move_a if winner_id == move_a.participant_id else move_b
        lines.append(f"{winning_move.card.name} wins the round!")

    return RoundResult(
        round_number=round_number,
        winner_id=winner_id,
        move_a=move_a,
        move_b=move_b,
        description="\n".join(lines),
        points_awarded=0 if winner_id is None else 1,
    )
