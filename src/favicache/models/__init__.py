from __future__ import annotations

from favicache.models.cache import NOT_CACHED, CacheMiss, FaviconCacheEntry, FaviconCollection
from favicache.models.tools import (
    CachedFaviconOutput,
    ClearCacheOutput,
    GetFaviconInput,
    GetFaviconOutput,
    GetFaviconsInput,
    GetFaviconsOutput,
)

__all__ = [
    # cache
    "FaviconCacheEntry",
    "FaviconCollection",
    "CacheMiss",
    "NOT_CACHED",
    # tools
    "GetFaviconInput",
    "GetFaviconOutput",
    "GetFaviconsInput",
    "GetFaviconsOutput",
    "CachedFaviconOutput",
    "ClearCacheOutput",
]
