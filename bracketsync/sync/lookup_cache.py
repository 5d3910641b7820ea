"""Process-lifetime cache for player info, player images and videogame characters."""

import asyncio
from typing import Iterable

from ..api.startgg_api import StartGGClient
from ..errors import BracketSyncError
from ..models.bracket_set import BracketSet, Character, PlayerInfo
from ..utils.logging import log
from .normalizer import convert_characters, convert_player


class LookupCache:
    """Memoized secondary lookups shared by every set.

    Entries are never evicted or refreshed; writes for the same id always
    store the same value, so concurrent fetches of one id are harmless.
    """

    def __init__(self, client: StartGGClient):
        self.client = client
        self._players: dict[str, PlayerInfo] = {}
        self._player_images: dict[str, str | None] = {}
        self._characters: dict[str, list[Character]] = {}
        # Keep references so background tasks are not garbage collected mid-flight
        self._background: set[asyncio.Task] = set()

    def remember_player(self, player: PlayerInfo) -> None:
        self._players[player.id] = player
        self._player_images[player.id] = player.image_url

    async def get_player(self, player_id: str) -> PlayerInfo:
        cached = self._players.get(player_id)
        if cached is not None:
            return cached

        api_player = await self.client.fetch_player(player_id)
        player = convert_player(api_player)
        self.remember_player(player)
        return player

    async def get_player_image(self, player_id: str) -> str | None:
        if player_id in self._player_images:
            return self._player_images[player_id]
        player = await self.get_player(player_id)
        return player.image_url

    def is_player_cached(self, player_id: str) -> bool:
        return player_id in self._player_images

    def peek_player_image(self, player_id: str) -> str | None:
        """Snapshot of the cached image url.

        Returns None when nothing is cached yet and starts a background fetch,
        so a later call may return a url. Must be called from a running loop
        for the background fetch to be scheduled.
        """
        if player_id in self._player_images:
            return self._player_images[player_id]

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log(f"⚠️  No running event loop, not fetching image for player {player_id}")
            return None

        task = loop.create_task(self._fetch_quietly(player_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return None

    async def _fetch_quietly(self, player_id: str) -> bool:
        try:
            await self.get_player(player_id)
            return True
        except BracketSyncError as e:
            log(f"❌ Could not fetch player {player_id}: {type(e).__name__}: {e}")
            return False

    async def prefetch_players(self, sets: Iterable[BracketSet]) -> int:
        """Fetch every uncached participant of the given sets concurrently.

        One failing player does not cancel the others; it just stays uncached.
        Returns how many players were newly cached.
        """
        # dict keeps first-seen order while dropping repeats
        distinct = dict.fromkeys(
            player_id for bracket_set in sets for player_id in bracket_set.player_ids()
        )
        player_ids = [player_id for player_id in distinct if not self.is_player_cached(player_id)]

        if not player_ids:
            return 0

        log(f"👥 Prefetching {len(player_ids)} players")
        results = await asyncio.gather(
            *(self._fetch_quietly(player_id) for player_id in player_ids)
        )
        fetched = sum(1 for ok in results if ok)
        if fetched < len(player_ids):
            log(f"⚠️  {len(player_ids) - fetched} of {len(player_ids)} player lookups failed")
        return fetched

    async def wait_for_background(self) -> None:
        """Wait until every scheduled background lookup has finished"""
        if self._background:
            await asyncio.gather(*list(self._background))

    def remember_characters(self, videogame_id: str, characters: list[Character]) -> None:
        if characters:
            self._characters[videogame_id] = list(characters)

    def peek_characters(self, videogame_id: str) -> list[Character] | None:
        return self._characters.get(videogame_id)

    async def get_characters(self, videogame_id: str) -> list[Character]:
        cached = self._characters.get(videogame_id)
        if cached is not None:
            return cached

        characters = convert_characters(
            await self.client.fetch_videogame_characters(videogame_id)
        )
        self.remember_characters(videogame_id, characters)
        return characters
