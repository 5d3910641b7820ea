"""In-memory collection of loaded sets and the local edit operations on them.

The edit functions are synchronous and never touch the network. Every
successful edit marks the set dirty until a load or write reconciles it.
An out of range index is a caller bug and raises IndexError; a winner that
is not one of the set's entrants, or a character missing from its videogame,
raises ValueError. Neither is caught here and neither touches the set.
"""

from typing import Iterable, Iterator

from ..errors import ValidationError
from ..models.bracket_set import BracketSet, Game


class SetStore:
    """Sets of the currently loaded event, in the order the API returned them"""

    def __init__(self) -> None:
        self._sets: dict[str, BracketSet] = {}
        self.event_id: str | None = None

    def replace_all(self, sets: Iterable[BracketSet], event_id: str | None = None) -> None:
        self._sets = {bracket_set.id: bracket_set for bracket_set in sets}
        self.event_id = event_id

    def get(self, set_id: str) -> BracketSet | None:
        return self._sets.get(set_id)

    def require(self, set_id: str) -> BracketSet:
        bracket_set = self._sets.get(set_id)
        if bracket_set is None:
            raise ValidationError("not loaded", set_id=set_id)
        return bracket_set

    def dirty_sets(self) -> list[BracketSet]:
        return [bracket_set for bracket_set in self if bracket_set.is_dirty]

    def __contains__(self, set_id: object) -> bool:
        return set_id in self._sets

    def __iter__(self) -> Iterator[BracketSet]:
        return iter(list(self._sets.values()))

    def __len__(self) -> int:
        return len(self._sets)


def add_game(bracket_set: BracketSet) -> Game:
    next_order = max((game.order_num for game in bracket_set.games), default=0) + 1
    game = Game(order_num=next_order)
    bracket_set.games.append(game)
    bracket_set.is_dirty = True
    return game


def delete_game(bracket_set: BracketSet, index: int) -> bool:
    """Remove a game; a set always keeps at least one, so the last one is refused"""
    if len(bracket_set.games) <= 1:
        return False
    del bracket_set.games[index]
    bracket_set.is_dirty = True
    return True


def set_game_winner(bracket_set: BracketSet, index: int, candidate_id: str) -> None:
    """Toggle the game winner.

    Picking the current winner again clears it and zeroes both scores, any
    other pick becomes the winner with a 1-0 score in its favor (previously
    entered scores are overwritten).
    """
    game = bracket_set.games[index]
    winner_index = bracket_set.entrant_index(candidate_id)
    if winner_index is None:
        raise ValueError(f"{candidate_id!r} is not an entrant of set {bracket_set.id}")

    if game.winner_id == candidate_id:
        game.winner_id = None
        game.scores = [0, 0]
    else:
        game.winner_id = candidate_id
        game.scores = [1, 0] if winner_index == 0 else [0, 1]
    bracket_set.is_dirty = True


def set_game_score(bracket_set: BracketSet, index: int, entrant_index: int, score: int | None) -> None:
    game = bracket_set.games[index]
    game.scores[entrant_index] = score
    bracket_set.is_dirty = True


def select_character(
    bracket_set: BracketSet, game_index: int, entrant_index: int, character_id: str
) -> None:
    """Toggle one entrant's character for a game; the other entrant is untouched"""
    game = bracket_set.games[game_index]
    characters = bracket_set.videogame.characters
    if characters and not bracket_set.videogame.has_character(character_id):
        raise ValueError(f"character {character_id!r} is not available for set {bracket_set.id}")

    if game.character_ids[entrant_index] == character_id:
        game.character_ids[entrant_index] = None
    else:
        game.character_ids[entrant_index] = character_id
    bracket_set.is_dirty = True
