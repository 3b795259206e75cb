"""Shared fixtures: Steam player records, a fake clock and a fake aiohttp session.

No network access; every upstream answer is scripted.
"""

from __future__ import annotations

import json

import pytest

from game_modules.cache_store import MemoryCacheStore
from game_modules.steam import SteamWebAPI

STEAM_ID = "76561197963139525"


def make_record(**overrides) -> dict:
    """A GetPlayerSummaries player entry for a public, online profile."""
    record = {
        "steamid": STEAM_ID,
        "communityvisibilitystate": 3,
        "profilestate": 1,
        "personaname": "Ch'Ih-Yu",
        "commentpermission": 1,
        "profileurl": f"https://steamcommunity.com/profiles/{STEAM_ID}/",
        "avatar": "https://avatars.steamstatic.com/abc.jpg",
        "avatarmedium": "https://avatars.steamstatic.com/abc_medium.jpg",
        "avatarfull": "https://avatars.steamstatic.com/abc_full.jpg",
        "lastlogoff": 1700000000,
        "personastate": 1,
        "realname": "Jane Doe",
        "primaryclanid": "103582791429521408",
        "timecreated": 1100000000,
        "loccountrycode": "DE",
        "locstatecode": "07",
        "loccityid": 11592,
    }
    record.update(overrides)
    return {k: v for k, v in record.items() if v is not None}


def envelope(payload) -> str:
    return json.dumps({"response": payload})


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeResponse:
    def __init__(self, body: str | bytes = "", status: int = 200):
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status

    async def read(self) -> bytes:
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Answers GETs in order with scripted responses or exceptions."""

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.requested: list[str] = []

    def queue(self, *outcomes) -> None:
        self.outcomes.extend(outcomes)

    def get(self, url: str):
        self.requested.append(url)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> MemoryCacheStore:
    return MemoryCacheStore(clock=clock)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def api(cache, session) -> SteamWebAPI:
    return SteamWebAPI("SECRET", cache, session_factory=lambda: session)
