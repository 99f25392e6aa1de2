"""Background scheduler coroutine for favicon cache eviction."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from favicache.state import AppState

log = structlog.get_logger()


async def run_cache_eviction_scheduler(state: AppState) -> None:
    """Evict at startup, then every ``cache.eviction_interval_hours``.

    Writes only evict once the collection overflows its headroom; this pass
    also reclaims expired entries from a cache that is no longer growing.
    """
    interval_seconds = state.settings.cache.eviction_interval_hours * 3600

    while True:
        try:
            await state.cache.evict()
        except Exception:
            log.warning("cache_eviction_scheduler_error", exc_info=True)
        await asyncio.sleep(interval_seconds)
