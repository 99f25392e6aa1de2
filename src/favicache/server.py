"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the stdio transport
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import favicache.tools.cache_tools as t_cache
import favicache.tools.get_favicon as t_get_favicon
from favicache import __version__
from favicache.cache import FaviconCache
from favicache.config import Settings
from favicache.errors import FavicacheError
from favicache.links import LinkSynchronizer
from favicache.notifier import ErrorReporter
from favicache.prober import ImageProber, build_http_client
from favicache.resolver import FaviconResolver
from favicache.schedulers import run_cache_eviction_scheduler
from favicache.state import AppState
from favicache.storage import SQLiteStore

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


async def build_state(settings: Settings, db: aiosqlite.Connection) -> AppState:
    """Wire every engine component around an open database connection."""
    store = SQLiteStore(db)
    await store.init_db()

    cache = FaviconCache(
        store,
        ttl_days=settings.cache.ttl_days,
        max_entries=settings.cache.max_entries,
        eviction_headroom=settings.cache.eviction_headroom,
        reporter=ErrorReporter("favicon_cache"),
    )
    await cache.load()

    http_client = build_http_client(settings.probe)
    prober = ImageProber(
        http_client,
        timeout_seconds=settings.probe.timeout_seconds,
        max_bytes=settings.probe.max_bytes,
    )
    synchronizer = LinkSynchronizer(store, ErrorReporter("link_sync"))
    resolver = FaviconResolver(
        cache,
        prober,
        synchronizer,
        default_size=settings.probe.default_size,
        reporter=ErrorReporter("favicon_resolver"),
    )

    return AppState(
        settings=settings,
        store=store,
        cache=cache,
        prober=prober,
        synchronizer=synchronizer,
        resolver=resolver,
        http_client=http_client,
    )


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__, transport=settings.server.transport)

    db_path = Path(settings.storage.db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(str(db_path))
    state = await build_state(settings, db)

    eviction_task = asyncio.create_task(run_cache_eviction_scheduler(state))

    log.info(
        "server_started",
        version=__version__,
        transport=settings.server.transport,
        cached_domains=len(state.cache),
        db_path=str(db_path),
    )

    try:
        yield state
    finally:
        eviction_task.cancel()
        with suppress(asyncio.CancelledError):
            await eviction_task
        if state.http_client is not None:
            await state.http_client.aclose()
        await db.close()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("favicache", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg; set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: FavicacheError) -> CallToolResult:
    """Convert a FavicacheError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


def _log_tool_error(tool: str, exc: FavicacheError) -> None:
    log.warning(
        "tool_error",
        tool=tool,
        code=exc.code,
        message=exc.message,
        recoverable=exc.recoverable,
    )


@mcp.tool()
async def get_favicon(url: str, ctx: Context, size: int | None = None) -> object:
    """Resolve the best favicon URL for a page.

    Tries the site's /favicon.ico, then public icon services, and caches the
    outcome per domain for 7 days. ``icon`` is null when no source served an image.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_get_favicon.handle(url, size, state)
    except FavicacheError as exc:
        _log_tool_error("get_favicon", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_favicon", exc_info=True)
        raise


@mcp.tool()
async def get_favicons(urls: list[str], ctx: Context, size: int | None = None) -> object:
    """Resolve favicons for several pages at once. Cached domains answer immediately."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_get_favicon.handle_batch(urls, size, state)
    except FavicacheError as exc:
        _log_tool_error("get_favicons", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_favicons", exc_info=True)
        raise


@mcp.tool()
async def get_cached_favicon(url: str, ctx: Context) -> object:
    """Look up a page's favicon in the cache only, without any network access.

    ``cached`` is false when the domain was never resolved or its entry expired.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_cache.handle_lookup(url, state)
    except FavicacheError as exc:
        _log_tool_error("get_cached_favicon", exc)
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_cached_favicon", exc_info=True)
        raise


@mcp.tool()
async def clear_favicon_cache(ctx: Context) -> object:
    """Drop every cached favicon so the next lookups probe again."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_cache.handle_clear(state)
    except Exception:
        log.error("tool_unexpected_error", tool="clear_favicon_cache", exc_info=True)
        raise


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    Settings()  # Fail fast on invalid configuration before starting the transport
    mcp.run()


if __name__ == "__main__":
    main()
