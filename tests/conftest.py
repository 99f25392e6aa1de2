"""Shared test fixtures for the favicache test suite."""

from __future__ import annotations

import json
from io import BytesIO
from typing import TYPE_CHECKING

import aiosqlite
import pytest
from PIL import Image

from favicache.cache import FaviconCache
from favicache.links import LinkSynchronizer
from favicache.resolver import FaviconResolver
from favicache.storage import LINK_GROUPS_KEY, SQLiteStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class TickingClock(FakeClock):
    """Advances by one millisecond on every read, so each write is strictly newer."""

    def __call__(self) -> int:
        self.now += 1
        return self.now


class ScriptedProber:
    """ProberProtocol stand-in: only the listed URLs are 'available'."""

    def __init__(self, available: Iterable[str] = ()) -> None:
        self.available = set(available)
        self.calls: list[str] = []

    async def probe(self, url: str) -> bool:
        self.calls.append(url)
        return url in self.available


def make_png(size: int = 16) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (size, size), (255, 0, 0, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


def make_ico(size: int = 16) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", (size, size), (0, 0, 255, 255)).save(buffer, format="ICO")
    return buffer.getvalue()


@pytest.fixture()
async def store() -> AsyncIterator[SQLiteStore]:
    """Fresh in-memory SQLite document store."""
    async with aiosqlite.connect(":memory:") as db:
        sqlite_store = SQLiteStore(db)
        await sqlite_store.init_db()
        yield sqlite_store


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(store: SQLiteStore, clock: FakeClock) -> FaviconCache:
    return FaviconCache(store, clock=clock)


@pytest.fixture()
def prober() -> ScriptedProber:
    return ScriptedProber()


@pytest.fixture()
def synchronizer(store: SQLiteStore) -> LinkSynchronizer:
    return LinkSynchronizer(store)


@pytest.fixture()
def resolver(
    cache: FaviconCache, prober: ScriptedProber, synchronizer: LinkSynchronizer
) -> FaviconResolver:
    return FaviconResolver(cache, prober, synchronizer)


@pytest.fixture()
def link_groups() -> list[dict]:
    """Two groups, three links; two of them on example.com."""
    return [
        {
            "title": "Work",
            "links": [
                {"label": "Example home", "value": "https://example.com/"},
                {"label": "Other", "value": "https://other.org/docs", "icon": None},
            ],
        },
        {
            "title": "Reading",
            "collapsed": True,
            "links": [
                {"label": "Example blog", "value": "https://example.com/blog", "icon": "old.png"},
            ],
        },
    ]


@pytest.fixture()
async def seeded_store(store: SQLiteStore, link_groups: list[dict]) -> SQLiteStore:
    await store.set(LINK_GROUPS_KEY, json.dumps(link_groups))
    return store


@pytest.fixture()
def ticking_clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture()
def ico_bytes() -> bytes:
    return make_ico()
