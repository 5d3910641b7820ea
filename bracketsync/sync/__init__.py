"""Bracket-set synchronization engine."""

from .lookup_cache import LookupCache
from .protocol import BracketSetSync, build_game_data
from .store import (
    SetStore,
    add_game,
    delete_game,
    select_character,
    set_game_score,
    set_game_winner,
)
from .winner import derive_winner, resolve_winner

__all__ = [
    "BracketSetSync",
    "LookupCache",
    "SetStore",
    "add_game",
    "build_game_data",
    "delete_game",
    "derive_winner",
    "resolve_winner",
    "select_character",
    "set_game_score",
    "set_game_winner",
]
