"""Protocol interfaces for swappable components.

The resolver and AppState reference these protocols, not the concrete
implementations, so tests can plug in scripted probers or in-memory stores
and another storage backend can be dropped in without touching the engine.
"""

from __future__ import annotations

from typing import Protocol


class StoreProtocol(Protocol):
    """Key-value store of whole string documents."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> bool: ...

    async def remove(self, key: str) -> bool: ...


class ProberProtocol(Protocol):
    """Decides whether a candidate URL yields a loadable image."""

    async def probe(self, url: str) -> bool: ...
