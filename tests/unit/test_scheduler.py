"""Unit tests for the cache eviction scheduler in schedulers.py.

asyncio.sleep is patched to raise CancelledError so each test observes a
bounded number of loop iterations.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from favicache.config import Settings
from favicache.schedulers import run_cache_eviction_scheduler


def _make_state(cache: MagicMock) -> MagicMock:
    state = MagicMock()
    state.settings = Settings(cache={"eviction_interval_hours": 2})
    state.cache = cache
    return state


class TestEvictionScheduler:
    async def test_evicts_at_startup_then_sleeps_interval(self) -> None:
        cache = MagicMock()
        cache.evict = AsyncMock(return_value=0)
        sleep = AsyncMock(side_effect=asyncio.CancelledError)

        with (
            patch("favicache.schedulers.asyncio.sleep", sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_eviction_scheduler(_make_state(cache))

        cache.evict.assert_awaited_once()
        sleep.assert_awaited_once_with(2 * 3600)

    async def test_repeats_after_each_interval(self) -> None:
        cache = MagicMock()
        cache.evict = AsyncMock(return_value=0)
        sleep = AsyncMock(side_effect=[None, None, asyncio.CancelledError])

        with (
            patch("favicache.schedulers.asyncio.sleep", sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_eviction_scheduler(_make_state(cache))

        assert cache.evict.await_count == 3

    async def test_error_does_not_stop_loop(self) -> None:
        cache = MagicMock()
        cache.evict = AsyncMock(side_effect=[RuntimeError("boom"), 0])
        sleep = AsyncMock(side_effect=[None, asyncio.CancelledError])

        with (
            patch("favicache.schedulers.asyncio.sleep", sleep),
            pytest.raises(asyncio.CancelledError),
        ):
            await run_cache_eviction_scheduler(_make_state(cache))

        assert cache.evict.await_count == 2
