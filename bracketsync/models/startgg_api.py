"""Pydantic models for start.gg API responses."""

from typing import Any, Annotated, Dict, List, Optional

from pydantic import BeforeValidator, Field

from ..models.bracket_set import DictCompatibleBaseModel

# GraphQL IDs come back as numbers or strings depending on the field
StartGGID = Annotated[str, BeforeValidator(lambda value: str(value))]


class StartGGImage(DictCompatibleBaseModel):
    """An image attached to a tournament, videogame, character or user"""

    url: str
    type: Optional[str] = None


class StartGGCharacter(DictCompatibleBaseModel):
    """A videogame character"""

    id: StartGGID
    name: str
    images: Optional[List[StartGGImage]] = None


class StartGGVideogame(DictCompatibleBaseModel):
    """A videogame with its selectable characters"""

    id: Optional[StartGGID] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    displayName: Optional[str] = None
    images: Optional[List[StartGGImage]] = None
    characters: Optional[List[StartGGCharacter]] = None


class StartGGUser(DictCompatibleBaseModel):
    """The start.gg user account behind a player"""

    id: Optional[StartGGID] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    images: Optional[List[StartGGImage]] = None


class StartGGPlayer(DictCompatibleBaseModel):
    """A player profile"""

    id: StartGGID
    gamerTag: Optional[str] = None
    prefix: Optional[str] = None
    user: Optional[StartGGUser] = None


class StartGGParticipant(DictCompatibleBaseModel):
    """A participant in a tournament (player)"""

    id: Optional[StartGGID] = None
    gamerTag: Optional[str] = None
    player: Optional[StartGGPlayer] = None
    user: Optional[StartGGUser] = None


class StartGGEntrant(DictCompatibleBaseModel):
    """An entrant in a set (can have multiple participants for teams)"""

    id: Optional[StartGGID] = None
    name: Optional[str] = None
    participants: Optional[List[StartGGParticipant]] = None


class StartGGScore(DictCompatibleBaseModel):
    value: Optional[float] = None


class StartGGStandingStats(DictCompatibleBaseModel):
    score: Optional[StartGGScore] = None


class StartGGStanding(DictCompatibleBaseModel):
    """Standing of a slot within a set (holds the game count score)"""

    stats: Optional[StartGGStandingStats] = None


class StartGGSlot(DictCompatibleBaseModel):
    """A slot in a set (position for an entrant)"""

    id: Optional[StartGGID] = None
    entrant: Optional[StartGGEntrant] = None
    standing: Optional[StartGGStanding] = None


class StartGGSet(DictCompatibleBaseModel):
    """A set/match in a tournament"""

    id: StartGGID
    state: Optional[int] = None
    round: Optional[int] = None
    winnerId: Optional[StartGGID] = None
    totalGames: Optional[int] = None
    startedAt: Optional[int] = None
    slots: Optional[List[StartGGSlot]] = None


class StartGGSelectionEntrant(DictCompatibleBaseModel):
    id: StartGGID


class StartGGSelection(DictCompatibleBaseModel):
    """A character pick made by an entrant for one game"""

    entrant: Optional[StartGGSelectionEntrant] = None
    character: Optional[StartGGCharacter] = None


class StartGGStage(DictCompatibleBaseModel):
    id: int
    name: Optional[str] = None


class StartGGGame(DictCompatibleBaseModel):
    """A single game within a set"""

    id: StartGGID
    orderNum: int
    winnerId: Optional[StartGGID] = None
    entrant1Score: Optional[int] = None
    entrant2Score: Optional[int] = None
    stage: Optional[StartGGStage] = None
    selections: Optional[List[StartGGSelection]] = None


class StartGGSetEvent(DictCompatibleBaseModel):
    videogame: Optional[StartGGVideogame] = None


class StartGGSetDetail(DictCompatibleBaseModel):
    """A set together with its games and the event videogame"""

    id: StartGGID
    state: Optional[int] = None
    games: Optional[List[StartGGGame]] = None
    event: Optional[StartGGSetEvent] = None


class StartGGSetsContainer(DictCompatibleBaseModel):
    """Container for sets with pagination info"""

    nodes: List[StartGGSet] = Field(default_factory=list)


class StartGGEntrantsContainer(DictCompatibleBaseModel):
    nodes: List[StartGGEntrant] = Field(default_factory=list)


class StartGGTournamentRef(DictCompatibleBaseModel):
    """The tournament an event belongs to"""

    id: Optional[StartGGID] = None
    name: str
    slug: Optional[str] = None


class StartGGEvent(DictCompatibleBaseModel):
    """An event within a tournament"""

    id: Optional[StartGGID] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    tournament: Optional[StartGGTournamentRef] = None
    videogame: Optional[StartGGVideogame] = None
    sets: Optional[StartGGSetsContainer] = None
    entrants: Optional[StartGGEntrantsContainer] = None


class StartGGTournament(DictCompatibleBaseModel):
    """A tournament administered by the current user"""

    id: StartGGID
    name: str
    slug: Optional[str] = None
    images: Optional[List[StartGGImage]] = None
    startAt: Optional[int] = None
    endAt: Optional[int] = None
    events: Optional[List[StartGGEvent]] = None

    @property
    def profile_image(self) -> Optional[str]:
        for image in self.images or []:
            if image.type == "profile":
                return image.url
        return None


class StartGGError(DictCompatibleBaseModel):
    """GraphQL error from start.gg API"""

    message: str
    locations: Optional[List[dict]] = None
    path: Optional[List[Any]] = None


class StartGGAPIResponse(DictCompatibleBaseModel):
    """Complete start.gg API response envelope"""

    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[StartGGError]] = None
