"""Data models for the bracket sync engine."""

from .bracket_set import (
    BracketSet,
    Character,
    EventSummary,
    Game,
    Participant,
    PlayerInfo,
    SetState,
    Slot,
    Videogame,
)

__all__ = [
    "BracketSet",
    "Character",
    "EventSummary",
    "Game",
    "Participant",
    "PlayerInfo",
    "SetState",
    "Slot",
    "Videogame",
]
