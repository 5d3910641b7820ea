"""Shared fixtures for the bracketsync tests"""

import asyncio
import copy
from typing import Any

import pytest

from bracketsync.api.startgg_api import API_URL
from bracketsync.errors import NetworkError
from bracketsync.models.bracket_set import BracketSet
from bracketsync.models.mock_data import MOCK_BASE_TIME, MOCK_EVENT, MOCK_SET_DETAILS
from bracketsync.models.startgg_api import (
    StartGGCharacter,
    StartGGEvent,
    StartGGImage,
    StartGGPlayer,
    StartGGSet,
    StartGGSetDetail,
    StartGGUser,
)
from bracketsync.sync.normalizer import convert_games, convert_set, convert_videogame


class FakeStartGGClient:
    """In-memory stand-in for StartGGClient.

    Records every call, and lets tests hold a request open with an
    ``asyncio.Event`` to interleave operations deterministically.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.event = StartGGEvent.model_validate(copy.deepcopy(MOCK_EVENT))
        self.details: dict[str, StartGGSetDetail] = {
            "70001": StartGGSetDetail.model_validate(copy.deepcopy(MOCK_SET_DETAILS))
        }
        # Consumed one per fetch_set_details call, when present
        self.detail_queue: list[StartGGSetDetail] = []
        self.detail_gates: list[asyncio.Event] = []
        self.write_gate: asyncio.Event | None = None
        self.fail_writes = False
        self.failing_players: set[str] = set()
        self.report_includes_set = True

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def fetch_event_sets(self, event_id: str) -> StartGGEvent:
        self.calls.append(("fetch_event_sets", event_id))
        return self.event

    async def fetch_set_details(self, set_id: str) -> StartGGSetDetail:
        self.calls.append(("fetch_set_details", set_id))
        gate = self.detail_gates.pop(0) if self.detail_gates else None
        if self.detail_queue:
            detail = self.detail_queue.pop(0)
        else:
            detail = self.details.get(set_id, StartGGSetDetail(id=set_id, games=[]))
        if gate is not None:
            await gate.wait()
        return detail

    async def _write(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        if self.write_gate is not None:
            await self.write_gate.wait()
        if self.fail_writes:
            raise NetworkError("HTTP 503: Service Unavailable", status=503)

    async def update_bracket_set(self, set_id, winner_id, game_data, is_dq=False) -> StartGGSet:
        await self._write("update_bracket_set", set_id, winner_id, game_data, is_dq)
        return StartGGSet(id=set_id, state=2, winnerId=None, startedAt=MOCK_BASE_TIME)

    async def report_bracket_set(self, set_id, winner_id, game_data) -> list[StartGGSet]:
        await self._write("report_bracket_set", set_id, winner_id, game_data)
        affected = [StartGGSet(id="79999", state=2, winnerId=None)]
        if self.report_includes_set:
            affected.append(
                StartGGSet(id=set_id, state=3, winnerId=winner_id, startedAt=MOCK_BASE_TIME)
            )
        return affected

    async def mark_set_in_progress(self, set_id) -> StartGGSet:
        await self._write("mark_set_in_progress", set_id)
        return StartGGSet(id=set_id, state=2, startedAt=MOCK_BASE_TIME + 60)

    async def reset_set(self, set_id, reset_dependent_sets=False) -> StartGGSet:
        await self._write("reset_set", set_id, reset_dependent_sets)
        return StartGGSet(id=set_id, state=1, winnerId=None, startedAt=None)

    async def fetch_player(self, player_id: str) -> StartGGPlayer:
        self.calls.append(("fetch_player", player_id))
        await asyncio.sleep(0)
        if player_id in self.failing_players:
            raise NetworkError(f"Player not found for ID: {player_id}")
        return StartGGPlayer(
            id=player_id,
            gamerTag=f"Player{player_id}",
            user=StartGGUser(
                images=[
                    StartGGImage(url=f"https://images.start.gg/banner/{player_id}.png", type="banner"),
                    StartGGImage(url=f"https://images.start.gg/profile/{player_id}.png", type="profile"),
                ]
            ),
        )

    async def fetch_videogame_characters(self, videogame_id: str) -> list[StartGGCharacter]:
        self.calls.append(("fetch_videogame_characters", videogame_id))
        return [StartGGCharacter(id=1, name="Bowser"), StartGGCharacter(id=2, name="Captain Falcon")]


@pytest.fixture
def fake_client() -> FakeStartGGClient:
    return FakeStartGGClient()


@pytest.fixture
def mock_event() -> dict[str, Any]:
    """Raw event payload, safe to modify"""
    return copy.deepcopy(MOCK_EVENT)


@pytest.fixture
def mock_set_details() -> dict[str, Any]:
    return copy.deepcopy(MOCK_SET_DETAILS)


@pytest.fixture
def loaded_set() -> BracketSet:
    """Set 70001 (Alice vs Bob) as right after loading: no games, clean"""
    event = StartGGEvent.model_validate(copy.deepcopy(MOCK_EVENT))
    return convert_set(event.sets.nodes[0], convert_videogame(event.videogame))


@pytest.fixture
def expanded_set(loaded_set: BracketSet) -> BracketSet:
    """Set 70001 with its three remote games merged in"""
    detail = StartGGSetDetail.model_validate(copy.deepcopy(MOCK_SET_DETAILS))
    loaded_set.games = convert_games(detail.games, loaded_set)
    loaded_set.is_expanded = True
    return loaded_set


def sent_payloads(mocked) -> list[dict[str, Any]]:
    """JSON bodies posted through an aioresponses mock, in order"""
    return [call.kwargs["json"] for calls in mocked.requests.values() for call in calls]


@pytest.fixture
def sent():
    return sent_payloads
