"""Load, expand and write back bracket sets.

``BracketSetSync`` is the engine facade: it owns the set store, talks to
start.gg through ``StartGGClient`` and reconciles authoritative responses.

Save and submit are two different remote operations and are kept apart:

* save (``updateBracketSet``) is non-terminal. It sends the games and always
  passes a null set winner, so it can never decide the match.
* submit (``reportBracketSet``) is terminal. It needs a winner, explicit or
  derived from the games, and may report several affected sets; only the
  submitted one is applied.

Both re-fetch the set details after a successful write because the mutation
response does not include games.
"""

import asyncio
from typing import Any

from ..api.startgg_api import StartGGClient
from ..errors import ConcurrentWriteError, NetworkError, ValidationError
from ..models.bracket_set import BracketSet, PlayerInfo
from ..models.startgg_api import StartGGSet
from ..utils.logging import log
from .lookup_cache import LookupCache
from .normalizer import (
    convert_characters,
    convert_games,
    convert_player,
    convert_set,
    convert_videogame,
)
from .store import SetStore
from .winner import resolve_winner


def _character_input(character_id: str) -> int | str:
    # characterId is an Int in the remote input type
    return int(character_id) if character_id.isdigit() else character_id


def build_game_data(bracket_set: BracketSet) -> list[dict[str, Any]]:
    """Shape the local games into ``BracketSetGameDataInput`` entries.

    Null values are left out instead of being sent as null, and
    ``selections`` is only present when at least one side picked a character.
    """
    entrant_ids = bracket_set.entrant_ids
    game_data: list[dict[str, Any]] = []

    for game in bracket_set.games:
        item: dict[str, Any] = {"gameNum": game.order_num}
        if game.winner_id is not None:
            item["winnerId"] = game.winner_id
        if game.scores[0] is not None:
            item["entrant1Score"] = game.scores[0]
        if game.scores[1] is not None:
            item["entrant2Score"] = game.scores[1]
        if game.stage_id is not None:
            item["stageId"] = game.stage_id

        selections = [
            {"entrantId": entrant_id, "characterId": _character_input(character_id)}
            for entrant_id, character_id in zip(entrant_ids, game.character_ids)
            if entrant_id is not None and character_id is not None
        ]
        if selections:
            item["selections"] = selections

        game_data.append(item)

    return game_data


class BracketSetSync:
    """Synchronization engine for the sets of one event at a time"""

    def __init__(self, client: StartGGClient, cache: LookupCache | None = None):
        self.client: StartGGClient = client
        self.cache: LookupCache = cache or LookupCache(client)
        self.store: SetStore = SetStore()

        # Detail fetches currently running, by set id
        self._loading_ids: set[str] = set()
        # Sets whose details were fetched at least once since the last load
        self._details_loaded: set[str] = set()
        self._write_locks: dict[str, asyncio.Lock] = {}
        # Latest request sequence number issued per set, for details and writes
        self._detail_sequence: dict[str, int] = {}
        self._write_sequence: dict[str, int] = {}

    # Request sequencing

    @staticmethod
    def _issue(sequences: dict[str, int], set_id: str) -> int:
        sequences[set_id] = sequences.get(set_id, 0) + 1
        return sequences[set_id]

    @staticmethod
    def _is_latest(sequences: dict[str, int], set_id: str, sequence: int) -> bool:
        return sequences.get(set_id) == sequence

    def _write_lock(self, set_id: str) -> asyncio.Lock:
        lock = self._write_locks.setdefault(set_id, asyncio.Lock())
        if lock.locked():
            raise ConcurrentWriteError(
                "a save or submit is already in progress", set_id=set_id
            )
        return lock

    # Loading

    async def load_sets(self, event_id: str, prefetch_players: bool = True) -> list[BracketSet]:
        """Replace the store with the sets of an event, all collapsed and clean"""
        event = await self.client.fetch_event_sets(event_id)
        videogame = convert_videogame(event.videogame)
        if videogame.id:
            self.cache.remember_characters(videogame.id, videogame.characters)

        nodes = event.sets.nodes if event.sets else []
        sets = [convert_set(node, videogame) for node in nodes]

        # Anything still in flight belongs to the previous load
        for bracket_set in sets:
            self._issue(self._detail_sequence, bracket_set.id)
            self._issue(self._write_sequence, bracket_set.id)
        self._loading_ids.clear()
        self._details_loaded.clear()

        self.store.replace_all(sets, event_id=event_id)
        log(f"✅ Loaded {len(sets)} sets for event {event_id}")

        if prefetch_players:
            await self.cache.prefetch_players(sets)
        return sets

    async def expand_set(self, set_id: str) -> BracketSet:
        """Expand a set, fetching its games the first time"""
        bracket_set = self.store.require(set_id)
        bracket_set.is_expanded = True

        if set_id in self._details_loaded:
            return bracket_set
        if set_id in self._loading_ids:
            log(f"⏭️  Details for set {set_id} already loading")
            return bracket_set

        await self.fetch_set_details(set_id)
        return self.store.get(set_id) or bracket_set

    def collapse_set(self, set_id: str) -> BracketSet:
        bracket_set = self.store.require(set_id)
        bracket_set.is_expanded = False
        return bracket_set

    async def fetch_set_details(self, set_id: str, force: bool = False) -> BracketSet | None:
        """Fetch games and characters of a set and merge them in.

        Without ``force`` a fetch already running for the set is not
        duplicated. Responses older than the latest fetch issued for the set
        are discarded.
        """
        bracket_set = self.store.require(set_id)
        if set_id in self._loading_ids and not force:
            log(f"⏭️  Details for set {set_id} already loading")
            return bracket_set

        sequence = self._issue(self._detail_sequence, set_id)
        self._loading_ids.add(set_id)
        bracket_set.is_loading_details = True

        try:
            detail = await self.client.fetch_set_details(set_id)
        finally:
            if self._is_latest(self._detail_sequence, set_id, sequence):
                self._loading_ids.discard(set_id)
                bracket_set.is_loading_details = False

        if not self._is_latest(self._detail_sequence, set_id, sequence):
            log(f"🗑️  Discarding stale details for set {set_id}")
            return self.store.get(set_id)

        target = self.store.get(set_id)
        if target is None:
            return None

        api_videogame = detail.event.videogame if detail.event else None
        if api_videogame is not None:
            characters = convert_characters(api_videogame.characters)
            if target.videogame.id is None:
                target.videogame = convert_videogame(api_videogame)
            elif characters:
                target.videogame.characters = characters
            if api_videogame.id:
                self.cache.remember_characters(api_videogame.id, characters)

        target.games = convert_games(detail.games, target)
        self._details_loaded.add(set_id)
        log(f"📋 Set {set_id}: {len(target.games)} games, {len(target.videogame.characters)} characters")
        return target

    # Writes

    def _require_entrants(self, bracket_set: BracketSet) -> None:
        if not bracket_set.has_resolved_entrants:
            raise ValidationError(
                "both entrant slots must be filled before reporting", set_id=bracket_set.id
            )

    def _apply_authoritative(self, set_id: str, sequence: int, api_set: StartGGSet) -> bool:
        """Overwrite state, winner and start time from a write response.

        Returns False when the response is stale or the set is gone.
        """
        if not self._is_latest(self._write_sequence, set_id, sequence):
            log(f"🗑️  Discarding stale write response for set {set_id}")
            return False

        target = self.store.get(set_id)
        if target is None:
            return False

        if api_set.state is not None:
            target.state = api_set.state
        winner_id = api_set.winnerId
        if winner_id is not None and target.entrant_index(winner_id) is None:
            log(f"⚠️  Set {set_id}: winner {winner_id} is not one of its entrants, ignoring")
            winner_id = None
        target.winner_id = winner_id
        target.started_at = api_set.startedAt
        target.is_dirty = False
        return True

    async def _refetch_after_write(self, set_id: str) -> None:
        if self.store.get(set_id) is None:
            # Dropped by a reload while the write was in flight
            log(f"⏭️  Set {set_id} is no longer loaded, not re-fetching details")
            return
        try:
            await self.fetch_set_details(set_id, force=True)
        except NetworkError as e:
            # The write itself went through; details refresh on the next expand
            self._details_loaded.discard(set_id)
            log(f"⚠️  Set {set_id} saved but re-fetching details failed: {e}")

    async def save(self, set_id: str) -> BracketSet:
        """Send the current games without deciding the set (non-terminal)"""
        bracket_set = self.store.require(set_id)
        self._require_entrants(bracket_set)

        async with self._write_lock(set_id):
            game_data = build_game_data(bracket_set)
            sequence = self._issue(self._write_sequence, set_id)
            log(f"💾 Saving set {set_id} with {len(game_data)} games")

            updated = await self.client.update_bracket_set(
                set_id, winner_id=None, game_data=game_data, is_dq=False
            )
            self._apply_authoritative(set_id, sequence, updated)

            await self._refetch_after_write(set_id)

        return self.store.get(set_id) or bracket_set

    async def submit(self, set_id: str) -> BracketSet:
        """Report the final result of a set (terminal)"""
        bracket_set = self.store.require(set_id)
        self._require_entrants(bracket_set)
        winner_id = resolve_winner(bracket_set)

        async with self._write_lock(set_id):
            game_data = build_game_data(bracket_set)
            sequence = self._issue(self._write_sequence, set_id)
            log(f"🏁 Submitting set {set_id}: winner {winner_id}, {len(game_data)} games")

            affected = await self.client.report_bracket_set(
                set_id, winner_id=winner_id, game_data=game_data
            )
            log(f"📊 Report affected {len(affected)} sets")

            # Dependent sets in the response are picked up on the next load
            reported = next((api_set for api_set in affected if api_set.id == set_id), None)
            if reported is None:
                log(f"⚠️  Report response did not include set {set_id}")
            else:
                self._apply_authoritative(set_id, sequence, reported)

            await self._refetch_after_write(set_id)

        return self.store.get(set_id) or bracket_set

    async def start_set(self, set_id: str) -> BracketSet:
        """Mark a set as in progress"""
        bracket_set = self.store.require(set_id)

        async with self._write_lock(set_id):
            sequence = self._issue(self._write_sequence, set_id)
            updated = await self.client.mark_set_in_progress(set_id)
            if self._is_latest(self._write_sequence, set_id, sequence):
                target = self.store.get(set_id)
                if target is not None:
                    # Only progress changes here, unsaved game edits stay dirty
                    if updated.state is not None:
                        target.state = updated.state
                    target.started_at = updated.startedAt
            log(f"▶️  Set {set_id} marked in progress")

        return self.store.get(set_id) or bracket_set

    async def reset_set(self, set_id: str, reset_dependent_sets: bool = False) -> BracketSet:
        """Reset a set remotely, dropping its reported games and winner"""
        bracket_set = self.store.require(set_id)

        async with self._write_lock(set_id):
            sequence = self._issue(self._write_sequence, set_id)
            updated = await self.client.reset_set(set_id, reset_dependent_sets)
            if self._apply_authoritative(set_id, sequence, updated):
                target = self.store.get(set_id)
                if target is not None:
                    target.games = []
            log(f"↩️  Set {set_id} reset (dependent sets: {reset_dependent_sets})")

            await self._refetch_after_write(set_id)

        return self.store.get(set_id) or bracket_set

    # Players

    async def load_attendees(self, event_id: str) -> list[PlayerInfo]:
        """Players entered in an event, without images"""
        players = await self.client.fetch_event_attendees(event_id)
        return [convert_player(player) for player in players]

    def player_image(self, player_id: str) -> str | None:
        """Cached image url or None for now; see ``LookupCache.peek_player_image``"""
        return self.cache.peek_player_image(player_id)
