"""Integration tests for server wiring and the MCP error envelope."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import aiosqlite

from favicache.cache import FaviconCache
from favicache.config import Settings
from favicache.errors import ErrorCode, FavicacheError
from favicache.server import _serialise_tool_error, build_state, mcp
from favicache.storage import FAVICON_CACHE_KEY

if TYPE_CHECKING:
    from favicache.state import AppState


class TestBuildState:
    async def test_components_share_one_store(self, app_state: AppState) -> None:
        assert isinstance(app_state.cache, FaviconCache)
        assert app_state.cache._store is app_state.store
        assert app_state.synchronizer._store is app_state.store

    async def test_settings_reach_the_cache(self) -> None:
        settings = Settings(cache={"max_entries": 2, "eviction_headroom": 1.0, "ttl_days": 2})
        async with aiosqlite.connect(":memory:") as db:
            state = await build_state(settings, db)
            try:
                for domain in ("a.example", "b.example", "c.example"):
                    await state.cache.write(domain, None)
                assert state.cache.domains() == ["b.example", "c.example"]
            finally:
                assert state.http_client is not None
                await state.http_client.aclose()

    async def test_persisted_cache_is_loaded(self, tmp_path) -> None:
        db_path = str(tmp_path / "store.db")
        async with aiosqlite.connect(db_path) as db:
            first = await build_state(Settings(), db)
            await first.cache.write("example.com", "https://example.com/favicon.ico")
            assert first.http_client is not None
            await first.http_client.aclose()

        async with aiosqlite.connect(db_path) as db:
            second = await build_state(Settings(), db)
            try:
                assert second.resolver.get_from_cache("https://example.com/") == (
                    "https://example.com/favicon.ico"
                )
                raw = await second.store.get(FAVICON_CACHE_KEY)
                assert raw is not None
                assert "example.com" in json.loads(raw)
            finally:
                assert second.http_client is not None
                await second.http_client.aclose()


class TestErrorEnvelope:
    def test_serialised_error_is_tool_error(self) -> None:
        error = FavicacheError(
            code=ErrorCode.INVALID_URL,
            message="Not an absolute http(s) URL: x",
            suggestion="Pass the full page address.",
        )
        result = _serialise_tool_error(error)

        assert result.isError is True
        body = json.loads(result.content[0].text)
        assert body == {
            "error": {
                "code": "INVALID_URL",
                "message": "Not an absolute http(s) URL: x",
                "suggestion": "Pass the full page address.",
                "recoverable": False,
            }
        }


class TestToolRegistration:
    async def test_all_tools_registered(self) -> None:
        tools = {tool.name for tool in await mcp.list_tools()}
        assert tools == {
            "get_favicon",
            "get_favicons",
            "get_cached_favicon",
            "clear_favicon_cache",
        }
