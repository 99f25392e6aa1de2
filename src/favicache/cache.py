"""Domain-keyed favicon cache with TTL expiry and bounded size.

The whole collection lives in memory on the ``FaviconCache`` instance and is
persisted as one JSON document after every mutation. Reads never touch the
store, so ``read()`` is synchronous.

Expiry is lazy: an entry older than the TTL reads as ``NOT_CACHED`` but stays
in the collection until the next eviction pass. Eviction is expire-then-
truncate: drop expired entries, then keep only the newest ``max_entries`` by
timestamp. A write triggers eviction once the collection has grown past
``max_entries * eviction_headroom``, so eviction cost is paid in batches.

Persistence is best-effort. A document that cannot be read or parsed loads as
an empty collection; a write that cannot be persisted is logged (and reported
through the ErrorReporter) but the in-memory result stands.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from favicache.models.cache import (
    NOT_CACHED,
    CacheMiss,
    FaviconCacheEntry,
    FaviconCollection,
    collection_adapter,
)
from favicache.notifier import ErrorMessages, ErrorReporter
from favicache.storage import FAVICON_CACHE_KEY

if TYPE_CHECKING:
    from collections.abc import Callable

    from favicache.protocols import StoreProtocol

log = structlog.get_logger()

DAY_MS = 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class FaviconCache:
    """Favicon cache keyed by domain, backed by a StoreProtocol document."""

    def __init__(
        self,
        store: StoreProtocol,
        *,
        ttl_days: int = 7,
        max_entries: int = 500,
        eviction_headroom: float = 1.2,
        clock: Callable[[], int] = _now_ms,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._store = store
        self._ttl_ms = ttl_days * DAY_MS
        self._max_entries = max_entries
        self._eviction_threshold = max_entries * eviction_headroom
        self._clock = clock
        self._reporter = reporter or ErrorReporter("favicon_cache")
        self._entries: FaviconCollection = {}

    def __len__(self) -> int:
        return len(self._entries)

    def domains(self) -> list[str]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # Load / persist
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Replace the in-memory collection with the persisted one.

        A missing, unreadable or corrupt document loads as empty.
        """
        raw = await self._store.get(FAVICON_CACHE_KEY)
        if raw is None:
            self._entries = {}
            return
        try:
            self._entries = collection_adapter.validate_json(raw)
        except ValidationError as exc:
            self._reporter.error(
                exc,
                action="load",
                notify=True,
                user_message=ErrorMessages.LOAD_FAILED,
                level="warn",
            )
            self._entries = {}
            return
        log.info("cache_loaded", entries=len(self._entries))

    async def _persist(self) -> None:
        document = collection_adapter.dump_json(self._entries).decode("utf-8")
        if not await self._store.set(FAVICON_CACHE_KEY, document):
            self._reporter.error(
                "favicon cache could not be persisted",
                action="persist",
                notify=True,
                user_message=ErrorMessages.SAVE_FAILED,
                level="warn",
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def _is_expired(self, entry: FaviconCacheEntry, now: int) -> bool:
        return now - entry.timestamp > self._ttl_ms

    def read(self, domain: str) -> str | None | CacheMiss:
        """Return the cached icon URL (possibly ``None``) or ``NOT_CACHED``.

        Stale entries read as ``NOT_CACHED`` and are left for eviction.
        """
        entry = self._entries.get(domain)
        if entry is None or self._is_expired(entry, self._clock()):
            return NOT_CACHED
        return entry.url

    async def write(self, domain: str, url: str | None) -> None:
        """Upsert the outcome for ``domain`` and persist the collection."""
        # Re-insert so dict order is write order; eviction breaks timestamp ties on it
        self._entries.pop(domain, None)
        self._entries[domain] = FaviconCacheEntry(url=url, timestamp=self._clock())

        if len(self._entries) > self._eviction_threshold:
            self._evict_in_memory()

        await self._persist()

    def _evict_in_memory(self) -> int:
        now = self._clock()
        before = len(self._entries)

        # Phase 1: expire
        valid = [
            (domain, entry)
            for domain, entry in self._entries.items()
            if now - entry.timestamp < self._ttl_ms
        ]

        # Phase 2: truncate to the newest max_entries
        if len(valid) > self._max_entries:
            ranked = sorted(
                enumerate(valid),
                key=lambda pair: (pair[1][1].timestamp, pair[0]),
                reverse=True,
            )
            kept = sorted(ranked[: self._max_entries], key=lambda pair: pair[0])
            valid = [item for _, item in kept]

        self._entries = dict(valid)
        removed = before - len(self._entries)
        log.info("cache_eviction_complete", removed=removed, remaining=len(self._entries))
        return removed

    async def evict(self) -> int:
        """Run an eviction pass and persist. Returns the number of entries removed."""
        removed = self._evict_in_memory()
        await self._persist()
        return removed

    async def clear(self) -> None:
        """Drop every entry, in memory and in the store."""
        self._entries = {}
        if not await self._store.remove(FAVICON_CACHE_KEY):
            self._reporter.error("favicon cache could not be cleared", action="clear", level="warn")
        log.info("cache_cleared")
