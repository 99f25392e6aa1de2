"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object. It
owns every stateful component; nothing in the engine keeps module-level state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from favicache.cache import FaviconCache
    from favicache.config import Settings
    from favicache.links import LinkSynchronizer
    from favicache.protocols import ProberProtocol, StoreProtocol
    from favicache.resolver import FaviconResolver


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    store: StoreProtocol
    cache: FaviconCache
    prober: ProberProtocol
    synchronizer: LinkSynchronizer
    resolver: FaviconResolver
    http_client: httpx.AsyncClient | None = None
