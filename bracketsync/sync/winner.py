"""Derive a set winner from its per-game results."""

from ..errors import ValidationError
from ..models.bracket_set import BracketSet


def game_win_counts(bracket_set: BracketSet) -> tuple[int, int]:
    """Games won by entrant 1 and entrant 2"""
    entrant1_id, entrant2_id = bracket_set.entrant_ids
    winners = [game.winner_id for game in bracket_set.games if game.winner_id is not None]
    return winners.count(entrant1_id), winners.count(entrant2_id)


def derive_winner(bracket_set: BracketSet) -> str:
    """Entrant with strictly more game wins; a tie (including 0-0) is not guessed"""
    entrant1_id, entrant2_id = bracket_set.entrant_ids
    wins1, wins2 = game_win_counts(bracket_set)

    if wins1 > wins2 and entrant1_id is not None:
        return entrant1_id
    if wins2 > wins1 and entrant2_id is not None:
        return entrant2_id
    raise ValidationError(
        f"cannot determine a winner from game results ({wins1}-{wins2}), pick one explicitly",
        set_id=bracket_set.id,
    )


def resolve_winner(bracket_set: BracketSet) -> str:
    """Explicit set winner if there is one, otherwise the derived one"""
    if bracket_set.winner_id is not None:
        return bracket_set.winner_id
    return derive_winner(bracket_set)
