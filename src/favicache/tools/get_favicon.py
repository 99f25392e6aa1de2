"""Tool handlers for get_favicon and get_favicons.

Receive AppState, validate input, delegate to the FaviconResolver and return a
structured dict. No MCP or FastMCP imports: server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from favicache.domains import extract_domain
from favicache.errors import ErrorCode, FavicacheError
from favicache.models.tools import (
    GetFaviconInput,
    GetFaviconOutput,
    GetFaviconsInput,
    GetFaviconsOutput,
)

if TYPE_CHECKING:
    from favicache.state import AppState


async def handle(url: str, size: int | None, state: AppState) -> dict:
    """Handle a get_favicon tool call."""
    log = structlog.get_logger().bind(tool="get_favicon", url=url)
    log.info("handler_called")

    try:
        validated = GetFaviconInput(url=url, size=size)
    except ValueError as exc:
        raise FavicacheError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty page URL (max 2048 chars) and a size from 1 to 256.",
            recoverable=False,
        ) from exc

    domain = extract_domain(validated.url)
    if domain is None:
        raise FavicacheError(
            code=ErrorCode.INVALID_URL,
            message=f"Not an absolute http(s) URL: {validated.url}",
            suggestion="Pass the full page address, e.g. 'https://example.com/page'.",
            recoverable=False,
        )

    icon = await state.resolver.get_favicon(validated.url, validated.size)
    log.info("favicon_lookup_complete", domain=domain, found=icon is not None)

    output = GetFaviconOutput(url=validated.url, domain=domain, icon=icon)
    return output.model_dump(mode="json")


async def handle_batch(urls: list[str], size: int | None, state: AppState) -> dict:
    """Handle a get_favicons tool call. Unparseable URLs map to ``None``."""
    log = structlog.get_logger().bind(tool="get_favicons", url_count=len(urls))
    log.info("handler_called")

    try:
        validated = GetFaviconsInput(urls=urls, size=size)
    except ValueError as exc:
        raise FavicacheError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide 1 to 200 non-empty page URLs and a size between 1 and 256.",
            recoverable=False,
        ) from exc

    icons = await state.resolver.get_favicons(validated.urls, validated.size)
    log.info(
        "favicon_batch_complete",
        resolved=sum(1 for icon in icons.values() if icon is not None),
    )

    output = GetFaviconsOutput(icons=icons)
    return output.model_dump(mode="json")
