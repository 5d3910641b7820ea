"""Local, editable bracket records and related utilities."""

import uuid
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class DictCompatibleBaseModel(BaseModel):
    """Custom BaseModel with dictionary-style access for backward compatibility"""

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access"""
        return getattr(self, key)

    def __setitem__(self, key: str, value: Any) -> None:
        """Allow dictionary-style assignment"""
        setattr(self, key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Allow .get() method like dictionaries"""
        return getattr(self, key, default)

    model_config = {"extra": "allow", "validate_assignment": True}


class SetState(IntEnum):
    """Set state enum based on start.gg API values"""

    PENDING = 1
    IN_PROGRESS = 2
    COMPLETE = 3


STATE_LABELS: dict[SetState, str] = {
    SetState.PENDING: "Pending",
    SetState.IN_PROGRESS: "In Progress",
    SetState.COMPLETE: "Complete",
}

SET_URL_TEMPLATE = "https://start.gg/set/{set_id}"


def new_game_id() -> str:
    """Temporary client-side id, replaced once the detail fetch returns the persisted game"""
    return f"game-{uuid.uuid4().hex}"


class Character(DictCompatibleBaseModel):
    """A selectable character of a videogame"""

    id: str
    name: str
    image_url: str | None = None


class Videogame(DictCompatibleBaseModel):
    """The videogame an event is played in"""

    id: str | None = None
    name: str | None = None
    characters: list[Character] = Field(default_factory=list)

    def has_character(self, character_id: str) -> bool:
        return any(character.id == character_id for character in self.characters)


class Participant(DictCompatibleBaseModel):
    """A player taking part in an entrant (more than one for teams)"""

    id: str | None = None
    player_id: str | None = None
    gamer_tag: str = "Unknown"
    prefix: str | None = None


class Slot(DictCompatibleBaseModel):
    """One of the two sides of a set"""

    entrant_id: str | None = None
    entrant_name: str | None = None
    participants: list[Participant] = Field(default_factory=list)
    score: int | None = None

    @property
    def is_resolved(self) -> bool:
        return self.entrant_id is not None

    @property
    def display_name(self) -> str:
        return self.entrant_name if self.entrant_id and self.entrant_name else "TBD"

    @property
    def players_text(self) -> str:
        if not self.participants:
            return "TBD"
        return ", ".join(participant.gamer_tag for participant in self.participants)


class Game(DictCompatibleBaseModel):
    """One game within a set. Index 0 of scores/character_ids is entrant 1."""

    id: str = Field(default_factory=new_game_id)
    order_num: int
    winner_id: str | None = None
    stage_id: int | None = None
    scores: list[int | None] = Field(default_factory=lambda: [None, None])
    character_ids: list[str | None] = Field(default_factory=lambda: [None, None])

    @field_validator("order_num")
    @classmethod
    def _positive_order(cls, value: int) -> int:
        if value < 1:
            raise ValueError("order_num must be a positive integer")
        return value

    @field_validator("scores", "character_ids")
    @classmethod
    def _two_sides(cls, value: list) -> list:
        if len(value) != 2:
            raise ValueError("expected exactly one value per entrant")
        return value

    @property
    def is_temporary(self) -> bool:
        return self.id.startswith("game-")


class BracketSet(DictCompatibleBaseModel):
    """One bracket match between two entrants, plus its local edit flags"""

    id: str
    state: int
    round: int | None = None
    winner_id: str | None = None
    total_games: int | None = None
    started_at: int | None = None
    slots: list[Slot] = Field(default_factory=lambda: [Slot(), Slot()])
    videogame: Videogame = Field(default_factory=Videogame)
    games: list[Game] = Field(default_factory=list)

    # Local edit state
    is_expanded: bool = False
    is_dirty: bool = False
    is_loading_details: bool = False

    @field_validator("slots")
    @classmethod
    def _two_slots(cls, value: list[Slot]) -> list[Slot]:
        if len(value) != 2:
            raise ValueError("a set has exactly two slots")
        return value

    @property
    def entrant_ids(self) -> tuple[str | None, str | None]:
        return self.slots[0].entrant_id, self.slots[1].entrant_id

    @property
    def has_resolved_entrants(self) -> bool:
        return all(slot.is_resolved for slot in self.slots)

    def entrant_index(self, entrant_id: str | None) -> int | None:
        """Return 0 or 1 for a known entrant id, otherwise None"""
        if entrant_id is None:
            return None
        for index, slot in enumerate(self.slots):
            if slot.entrant_id == entrant_id:
                return index
        return None

    @property
    def state_label(self) -> str:
        # Unknown values are only relabelled for display, never rewritten
        try:
            return STATE_LABELS[SetState(self.state)]
        except ValueError:
            return "Unknown"

    @property
    def is_complete(self) -> bool:
        return self.state == SetState.COMPLETE

    @property
    def winner_name(self) -> str | None:
        index = self.entrant_index(self.winner_id)
        if index is None:
            return None
        return self.slots[index].display_name

    @property
    def match_score(self) -> str:
        score1, score2 = self.slots[0].score, self.slots[1].score
        if score1 is not None and score2 is not None:
            return f"{score1} - {score2}"
        if self.state == SetState.PENDING:
            return "Upcoming"
        if self.state == SetState.IN_PROGRESS:
            return "In Progress"
        return "TBD"

    @property
    def match_name(self) -> str:
        return f"{self.slots[0].display_name} vs {self.slots[1].display_name}"

    @property
    def url(self) -> str:
        return SET_URL_TEMPLATE.format(set_id=self.id)

    def player_ids(self) -> list[str]:
        """Participant player ids of both slots, in slot order"""
        return [
            participant.player_id
            for slot in self.slots
            for participant in slot.participants
            if participant.player_id
        ]


class PlayerInfo(DictCompatibleBaseModel):
    """Player profile information cached independently of any set"""

    id: str
    gamer_tag: str
    prefix: str | None = None
    image_url: str | None = None

    @property
    def display_name(self) -> str:
        prefix = f"{self.prefix} | " if self.prefix else ""
        return f"{prefix}{self.gamer_tag}"

    @property
    def initials(self) -> str:
        parts = self.gamer_tag.split(" ")
        if len(parts) >= 2 and parts[0] and parts[1]:
            return (parts[0][0] + parts[1][0]).upper()
        return self.gamer_tag[:2].upper()


class EventSummary(DictCompatibleBaseModel):
    """An event together with the tournament it belongs to"""

    id: str
    name: str
    tournament_id: str
    tournament_name: str
