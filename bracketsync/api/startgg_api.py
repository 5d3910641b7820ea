"""start.gg GraphQL API client."""

import asyncio
import json
from typing import Any, TypeVar

import aiohttp
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import AuthenticationError, NetworkError
from ..models.bracket_set import EventSummary
from ..models.startgg_api import (
    StartGGAPIResponse,
    StartGGCharacter,
    StartGGEvent,
    StartGGPlayer,
    StartGGSet,
    StartGGSetDetail,
    StartGGTournament,
    StartGGVideogame,
)
from ..utils.logging import log, mask_token
from .credentials import CredentialProvider

API_URL = "https://api.start.gg/gql/alpha"

ModelT = TypeVar("ModelT", bound=BaseModel)

# Fields returned by every set query and mutation
SET_FIELDS = """
    id
    state
    round
    winnerId
    totalGames
    startedAt
    slots {
        id
        entrant {
            id
            name
            participants {
                id
                player {
                    id
                    gamerTag
                    prefix
                }
            }
        }
        standing {
            stats {
                score {
                    value
                }
            }
        }
    }
"""

CHARACTER_FIELDS = """
    id
    name
    images {
        url
        type
    }
"""

CURRENT_USER_QUERY = """
query CurrentUser {
    currentUser {
        id
    }
}
"""

TOURNAMENTS_QUERY = """
query GetTournaments {
    currentUser {
        id
        tournaments(query: {
            perPage: 50
            filter: {
                tournamentView: "admin"
            }
        }) {
            nodes {
                id
                name
                slug
                images {
                    url
                    type
                }
                startAt
                endAt
            }
        }
    }
}
"""

TOURNAMENT_EVENTS_QUERY = """
query GetTournamentEvents($tournamentId: ID!) {
    tournament(id: $tournamentId) {
        id
        name
        events {
            id
            name
        }
    }
}
"""

EVENT_BY_SLUG_QUERY = """
query GetEvent($slug: String!) {
    event(slug: $slug) {
        id
        name
    }
}
"""

EVENT_ATTENDEES_QUERY = """
query GetEventAttendees($eventId: ID!) {
    event(id: $eventId) {
        entrants(query: {
            perPage: 100
        }) {
            nodes {
                id
                name
                participants {
                    id
                    player {
                        id
                        gamerTag
                        prefix
                    }
                    user {
                        id
                        name
                        slug
                    }
                }
            }
        }
    }
}
"""

EVENT_SETS_QUERY = f"""
query GetEventMatches($eventId: ID!) {{
    event(id: $eventId) {{
        id
        name
        tournament {{
            id
            name
        }}
        videogame {{
            id
            name
            slug
            displayName
            characters {{
                {CHARACTER_FIELDS}
            }}
        }}
        sets(filters: {{
            showByes: false
        }}, perPage: 100) {{
            nodes {{
                {SET_FIELDS}
            }}
        }}
    }}
}}
"""

SET_DETAILS_QUERY = f"""
query GetSetWithGames($setId: ID!) {{
    set(id: $setId) {{
        id
        state
        games {{
            id
            orderNum
            winnerId
            entrant1Score
            entrant2Score
            stage {{
                id
                name
            }}
            selections {{
                entrant {{
                    id
                }}
                character {{
                    {CHARACTER_FIELDS}
                }}
            }}
        }}
        event {{
            videogame {{
                id
                name
                characters {{
                    {CHARACTER_FIELDS}
                }}
            }}
        }}
    }}
}}
"""

PLAYER_QUERY = """
query GetPlayer($playerId: ID!) {
    player(id: $playerId) {
        id
        gamerTag
        prefix
        user {
            id
            images {
                url
                type
            }
        }
    }
}
"""

VIDEOGAME_CHARACTERS_QUERY = f"""
query GetVideogameCharacters($videogameId: ID!) {{
    videogame(id: $videogameId) {{
        id
        name
        characters {{
            {CHARACTER_FIELDS}
        }}
    }}
}}
"""

MARK_SET_IN_PROGRESS_MUTATION = f"""
mutation MarkSetInProgress($setId: ID!) {{
    markSetInProgress(setId: $setId) {{
        {SET_FIELDS}
    }}
}}
"""

RESET_SET_MUTATION = f"""
mutation ResetSet($setId: ID!, $resetDependentSets: Boolean) {{
    resetSet(setId: $setId, resetDependentSets: $resetDependentSets) {{
        {SET_FIELDS}
    }}
}}
"""

UPDATE_BRACKET_SET_MUTATION = f"""
mutation updateBracketSet($setId: ID!, $winnerId: ID, $isDQ: Boolean, $gameData: [BracketSetGameDataInput]) {{
    updateBracketSet(setId: $setId, winnerId: $winnerId, isDQ: $isDQ, gameData: $gameData) {{
        {SET_FIELDS}
    }}
}}
"""

REPORT_BRACKET_SET_MUTATION = f"""
mutation reportSet($setId: ID!, $winnerId: ID!, $gameData: [BracketSetGameDataInput]) {{
    reportBracketSet(setId: $setId, winnerId: $winnerId, gameData: $gameData) {{
        {SET_FIELDS}
    }}
}}
"""


class StartGGClient:
    """Handle API calls to start.gg"""

    def __init__(
        self,
        credentials: CredentialProvider,
        base_url: str = API_URL,
        timeout: float = 10.0,
    ):
        self.credentials: CredentialProvider = credentials
        self.base_url: str = base_url
        self.timeout: float = timeout

    def _headers(self, token: str | None) -> dict[str, str]:
        if not token:
            raise AuthenticationError(
                "No start.gg API token available. Provide one with --token or STARTGG_TOKEN."
            )
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def execute(
        self, query: str, variables: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Run one GraphQL query or mutation and return its ``data`` field.

        Raises NetworkError for transport failures, non-200 responses, GraphQL
        errors and malformed envelopes. Nothing is retried.
        """
        token = self.credentials()
        headers = self._headers(token)
        log(f"🔍 API Token: {mask_token(token)}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.base_url,
                    json={"query": query, "variables": variables or {}},
                    headers=headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    log(f"📡 API Response Status: {response.status}")

                    if response.status != 200:
                        error_text = await response.text()
                        log(f"❌ HTTP Error: {error_text}")
                        raise NetworkError(
                            f"HTTP {response.status}: {error_text}",
                            status=response.status,
                        )

                    raw_data = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log(f"❌ API Error: {type(e).__name__}: {e}")
            raise NetworkError(f"Request to start.gg failed: {e}") from e

        # Parse and validate the response with Pydantic
        try:
            api_response = StartGGAPIResponse.model_validate(raw_data)
        except PydanticValidationError as e:
            log(f"❌ Pydantic validation error: {e}")
            log(f"📋 Raw response: {json.dumps(raw_data, indent=2)[:500]}...")
            raise NetworkError(f"API response validation failed: {e}") from e

        if api_response.errors:
            for error in api_response.errors:
                log(f"   - {error.message}")
            raise NetworkError(api_response.errors[0].message or "GraphQL error")

        if api_response.data is None:
            log("❌ No data in response")
            raise NetworkError("No data field in API response")

        return api_response.data

    @staticmethod
    def _parse(model: type[ModelT], value: Any, what: str) -> ModelT:
        try:
            return model.model_validate(value)
        except PydanticValidationError as e:
            log(f"❌ Invalid {what} payload: {e}")
            raise NetworkError(f"Invalid {what} payload: {e}") from e

    async def get_current_user_id(self) -> str | None:
        data = await self.execute(CURRENT_USER_QUERY)
        current_user = data.get("currentUser")
        if not current_user or current_user.get("id") is None:
            return None
        return str(current_user["id"])

    async def fetch_tournaments(self) -> list[StartGGTournament]:
        """Tournaments the current user administers"""
        data = await self.execute(TOURNAMENTS_QUERY)
        current_user = data.get("currentUser") or {}
        nodes = (current_user.get("tournaments") or {}).get("nodes") or []
        tournaments = [self._parse(StartGGTournament, node, "tournament") for node in nodes]
        log(f"📊 Found {len(tournaments)} tournaments")
        return tournaments

    async def fetch_tournament_events(
        self, tournament_ids: list[str]
    ) -> list[EventSummary]:
        """Events of several tournaments, one request per tournament"""
        events: list[EventSummary] = []
        for tournament_id in tournament_ids:
            data = await self.execute(
                TOURNAMENT_EVENTS_QUERY, {"tournamentId": tournament_id}
            )
            if not data.get("tournament"):
                continue
            tournament = self._parse(StartGGTournament, data["tournament"], "tournament")
            for event in tournament.events or []:
                events.append(
                    EventSummary(
                        id=event.id or "",
                        name=event.name or "Unknown Event",
                        tournament_id=tournament.id,
                        tournament_name=tournament.name,
                    )
                )
        return events

    async def get_event_id_from_slug(self, event_slug: str) -> str | None:
        """Get event ID from event slug (e.g., 'tournament/the-c-stick-55/event/melee-singles')"""

        # Auto-fix common slug format issues
        if not event_slug.startswith("tournament/"):
            log(f"🔧 Slug missing 'tournament/' prefix, fixing: {event_slug}")
            event_slug = f"tournament/{event_slug}"

        data = await self.execute(EVENT_BY_SLUG_QUERY, {"slug": event_slug})
        if not data.get("event"):
            log(f"❌ No event found for slug: {event_slug}")
            log("💡 Slug format should be: tournament/tournament-name/event/event-name")
            return None

        event = self._parse(StartGGEvent, data["event"], "event")
        if not event.id:
            log("❌ Event found but no ID available")
            return None

        log(f"✅ Found event: {event.name} (ID: {event.id})")
        return event.id

    async def fetch_event_attendees(self, event_id: str) -> list[StartGGPlayer]:
        """Players entered in an event, de-duplicated by player id"""
        data = await self.execute(EVENT_ATTENDEES_QUERY, {"eventId": event_id})
        event = self._parse(StartGGEvent, data.get("event") or {}, "event")

        players: dict[str, StartGGPlayer] = {}
        entrants = event.entrants.nodes if event.entrants else []
        for entrant in entrants:
            for participant in entrant.participants or []:
                player = participant.player
                if player and player.id not in players:
                    if participant.user and not player.user:
                        player.user = participant.user
                    players[player.id] = player
        return list(players.values())

    async def fetch_event_sets(self, event_id: str) -> StartGGEvent:
        """Fetch an event with its videogame and (non-bye) sets"""
        log(f"🔍 Fetching sets for event ID: {event_id}")
        data = await self.execute(EVENT_SETS_QUERY, {"eventId": event_id})
        if not data.get("event"):
            raise NetworkError(f"Event not found for ID: {event_id}")

        event = self._parse(StartGGEvent, data["event"], "event")
        sets_count = len(event.sets.nodes) if event.sets else 0
        log(f"📊 Event: {event.name} - found {sets_count} sets")
        return event

    async def fetch_set_details(self, set_id: str) -> StartGGSetDetail:
        data = await self.execute(SET_DETAILS_QUERY, {"setId": set_id})
        if not data.get("set"):
            raise NetworkError(f"Set not found for ID: {set_id}")
        return self._parse(StartGGSetDetail, data["set"], "set")

    async def fetch_player(self, player_id: str) -> StartGGPlayer:
        data = await self.execute(PLAYER_QUERY, {"playerId": player_id})
        if not data.get("player"):
            raise NetworkError(f"Player not found for ID: {player_id}")
        return self._parse(StartGGPlayer, data["player"], "player")

    async def fetch_videogame_characters(
        self, videogame_id: str
    ) -> list[StartGGCharacter]:
        data = await self.execute(
            VIDEOGAME_CHARACTERS_QUERY, {"videogameId": videogame_id}
        )
        if not data.get("videogame"):
            raise NetworkError(f"Videogame not found for ID: {videogame_id}")
        videogame = self._parse(StartGGVideogame, data["videogame"], "videogame")
        return videogame.characters or []

    async def mark_set_in_progress(self, set_id: str) -> StartGGSet:
        data = await self.execute(MARK_SET_IN_PROGRESS_MUTATION, {"setId": set_id})
        return self._parse(StartGGSet, data.get("markSetInProgress"), "set")

    async def reset_set(
        self, set_id: str, reset_dependent_sets: bool = False
    ) -> StartGGSet:
        data = await self.execute(
            RESET_SET_MUTATION,
            {"setId": set_id, "resetDependentSets": reset_dependent_sets},
        )
        return self._parse(StartGGSet, data.get("resetSet"), "set")

    async def update_bracket_set(
        self,
        set_id: str,
        winner_id: str | None,
        game_data: list[dict[str, Any]],
        is_dq: bool = False,
    ) -> StartGGSet:
        """Non-terminal update of a set's games; returns the single updated set"""
        variables: dict[str, Any] = {
            "setId": set_id,
            "winnerId": winner_id,
            "isDQ": is_dq,
        }
        if game_data:
            variables["gameData"] = game_data

        data = await self.execute(UPDATE_BRACKET_SET_MUTATION, variables)
        return self._parse(StartGGSet, data.get("updateBracketSet"), "set")

    async def report_bracket_set(
        self,
        set_id: str,
        winner_id: str,
        game_data: list[dict[str, Any]],
    ) -> list[StartGGSet]:
        """Terminal report of a set; returns every set the report affected"""
        variables: dict[str, Any] = {"setId": set_id, "winnerId": winner_id}
        if game_data:
            variables["gameData"] = game_data

        data = await self.execute(REPORT_BRACKET_SET_MUTATION, variables)
        return [
            self._parse(StartGGSet, node, "set")
            for node in data.get("reportBracketSet") or []
        ]
