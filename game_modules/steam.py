import asyncio
import json
import logging
import re
from datetime import timedelta
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlencode

import aiohttp

from dto.player_summary import PlayerSummary
from game_modules.cache_store import CacheStore
from game_modules.errors import BadResponse, InvalidInput, NotFound, Timeout

API_URL = "https://api.steampowered.com"
RESPONSE_FORMAT = "json"
CACHE_KEY_PREFIX = "steam_signature:"

# alias -> steam id mappings practically never change, presence does
VANITY_URL_TTL = int(timedelta(days=15).total_seconds())
PLAYER_SUMMARY_TTL = int(timedelta(minutes=5).total_seconds())

KEY_PARAM_REGEX = re.compile(r"([?&]key=)[^&]*")

SessionFactory = Callable[[], aiohttp.ClientSession]


def is_steam_id(identifier: str) -> bool:
    """Canonical 64 bit ids are plain ASCII digits, anything else is a vanity alias."""
    return identifier.isascii() and identifier.isdigit()


class SteamWebAPI:
    """
    Talks to the Steam Web API.
    - resolves vanity aliases to 64 bit Steam ids (cached for 15 days)
    - fetches player summaries (cached for 5 minutes)
    - never retries; every failure is raised once as a SteamAPIError
    """

    def __init__(
        self,
        key: str,
        cache: Optional[CacheStore] = None,
        *,
        logger: Optional[logging.Logger] = None,
        session_factory: SessionFactory = aiohttp.ClientSession,
        use_cache: bool = True,
    ):
        self.key = key
        self.cache = cache
        self.use_cache = use_cache
        self._log = logger or logging.getLogger(__name__)
        self._session_factory = session_factory

    # ---------------- Public API ----------------

    async def resolve_steam_id(self, identifier: str, *, use_cache: Optional[bool] = None) -> str:
        """Return the 64 bit id for either a numeric id or a vanity alias."""
        identifier = identifier.strip()
        if not identifier:
            raise InvalidInput("Steam ID must not be empty")
        if is_steam_id(identifier):
            return identifier
        return await self.resolve_vanity_url(identifier, use_cache=use_cache)

    async def resolve_vanity_url(self, vanity_url: str, *, use_cache: Optional[bool] = None) -> str:
        if not vanity_url:
            raise InvalidInput("Vanity URL must not be empty")

        cache_key = f"alias:{vanity_url}"
        steam_id, found = await self._cache_get(cache_key, use_cache)
        if found:
            return steam_id

        url = self.build_request_url("ISteamUser", "ResolveVanityURL", 1, {"vanityurl": vanity_url})
        data = await self.request(url)
        if "steamid" not in data:
            if data.get("message") == "No match":
                raise NotFound(vanity_url)
            raise BadResponse(f"Steam Web API JSON response does not include a steamid field: {data!r}")
        steam_id = str(data["steamid"])

        # keyed by the alias that was asked for, not the resolved id
        await self._cache_set(cache_key, steam_id, VANITY_URL_TTL, use_cache)
        return steam_id

    async def fetch_player_summary(self, steam_id: str, *, use_cache: Optional[bool] = None) -> PlayerSummary:
        if not steam_id or not is_steam_id(steam_id):
            raise InvalidInput(f"Not a 64 bit Steam ID: {steam_id!r}")

        cache_key = f"profile:{steam_id}"
        record, found = await self._cache_get(cache_key, use_cache)
        if found:
            return self._parse_summary(record)

        url = self.build_request_url("ISteamUser", "GetPlayerSummaries", 2, {"steamids": steam_id})
        data = await self.request(url)
        players = data.get("players")
        if not players or not isinstance(players, list) or not players[0]:
            raise NotFound(steam_id, f'The specified Steam ID "{steam_id}" could not be found')

        record = players[0]
        summary = self._parse_summary(record)
        await self._cache_set(cache_key, record, PLAYER_SUMMARY_TTL, use_cache)
        return summary

    # ---------------- Transport ----------------

    def build_request_url(self, interface: str, method: str, version: int, params: Dict[str, Any]) -> str:
        return (
            f"{API_URL}/{interface}/{method}/v{version:04d}/"
            f"?format={RESPONSE_FORMAT}&key={self.key}&{urlencode(params)}"
        )

    async def request(self, url: str) -> Dict[str, Any]:
        """
        Perform one GET and return the unwrapped "response" payload.
        - no response at all -> Timeout
        - anything else wrong with the answer -> BadResponse
        """
        self._log.debug("Steam Web API request: %s", KEY_PARAM_REGEX.sub(r"\1***", url))
        try:
            async with self._session_factory() as session:
                async with session.get(url) as response:
                    status = response.status
                    body = await response.read()
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            raise Timeout("Could not connect to Steam Web API") from e
        except aiohttp.ClientError as e:
            raise BadResponse(f"Steam Web API response could not be read: {e}") from e

        if not body:
            raise BadResponse(f"Steam Web API returned HTTP status {status}")

        try:
            # UnicodeDecodeError is a ValueError
            result = json.loads(body.decode("utf-8"))
        except ValueError as e:
            raise BadResponse(f"Steam Web API JSON response could not be decoded: {body!r}") from e

        if not isinstance(result, dict) or not isinstance(result.get("response"), dict):
            raise BadResponse(f"Steam Web API JSON response does not include a response field: {result!r}")

        return result["response"]

    # ---------------- Helpers ----------------

    @staticmethod
    def _parse_summary(record: Any) -> PlayerSummary:
        try:
            return PlayerSummary.from_record(record)
        except (KeyError, TypeError, ValueError, OverflowError, OSError) as e:
            raise BadResponse(f"Malformed player summary ({type(e).__name__}: {e}): {record!r}") from e

    def _caching(self, use_cache: Optional[bool]) -> bool:
        if self.cache is None:
            return False
        return self.use_cache if use_cache is None else use_cache

    async def _cache_get(self, key: str, use_cache: Optional[bool]) -> Tuple[Any, bool]:
        if not self._caching(use_cache):
            return None, False
        value, found = await self.cache.get(CACHE_KEY_PREFIX + key)
        self._log.debug("Cache %s: %s", "hit" if found else "miss", key)
        return value, found

    async def _cache_set(self, key: str, value: Any, ttl: int, use_cache: Optional[bool]) -> bool:
        if not self._caching(use_cache):
            return True
        return await self.cache.set(CACHE_KEY_PREFIX + key, value, ttl)
