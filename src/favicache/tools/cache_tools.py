"""Tool handlers for get_cached_favicon and clear_favicon_cache.

Neither touches the network: they only read or drop the favicon cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from favicache.domains import extract_domain
from favicache.errors import ErrorCode, FavicacheError
from favicache.models.cache import NOT_CACHED
from favicache.models.tools import CachedFaviconOutput, ClearCacheOutput, GetFaviconInput

if TYPE_CHECKING:
    from favicache.state import AppState


async def handle_lookup(url: str, state: AppState) -> dict:
    """Handle a get_cached_favicon tool call."""
    log = structlog.get_logger().bind(tool="get_cached_favicon", url=url)
    log.info("handler_called")

    try:
        validated = GetFaviconInput(url=url)
    except ValueError as exc:
        raise FavicacheError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty page URL (max 2048 chars).",
            recoverable=False,
        ) from exc

    if extract_domain(validated.url) is None:
        raise FavicacheError(
            code=ErrorCode.INVALID_URL,
            message=f"Not an absolute http(s) URL: {validated.url}",
            suggestion="Pass the full page address, e.g. 'https://example.com/page'.",
            recoverable=False,
        )

    cached = state.resolver.get_from_cache(validated.url)
    if cached is NOT_CACHED:
        output = CachedFaviconOutput(url=validated.url, cached=False, icon=None)
    else:
        output = CachedFaviconOutput(url=validated.url, cached=True, icon=cached)
    return output.model_dump(mode="json")


async def handle_clear(state: AppState) -> dict:
    """Handle a clear_favicon_cache tool call."""
    log = structlog.get_logger().bind(tool="clear_favicon_cache")
    log.info("handler_called")

    cleared = len(state.cache)
    await state.resolver.clear_cache()

    return ClearCacheOutput(cleared_entries=cleared).model_dump(mode="json")
