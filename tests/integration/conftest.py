"""Integration test fixtures.

Provides a fully wired AppState over in-memory SQLite and a real httpx client;
tests mock the network with respx.
"""

from __future__ import annotations

import aiosqlite
import pytest

from favicache.config import Settings
from favicache.server import build_state


@pytest.fixture()
async def app_state():
    """Full AppState wired exactly as the server lifespan does it."""
    settings = Settings(probe={"timeout_seconds": 1.0})
    async with aiosqlite.connect(":memory:") as db:
        state = await build_state(settings, db)
        try:
            yield state
        finally:
            assert state.http_client is not None
            await state.http_client.aclose()
