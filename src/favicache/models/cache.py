from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, TypeAdapter


class FaviconCacheEntry(BaseModel):
    """Outcome of one resolution for a domain."""

    url: str | None  # Resolved icon URL; None records that every candidate failed
    timestamp: int  # Epoch milliseconds of the resolution


class CacheMiss(Enum):
    """Sentinel distinguishing "never resolved / expired" from a cached ``None``."""

    NOT_CACHED = "not cached"


NOT_CACHED = CacheMiss.NOT_CACHED

FaviconCollection = dict[str, FaviconCacheEntry]

collection_adapter: TypeAdapter[FaviconCollection] = TypeAdapter(FaviconCollection)
