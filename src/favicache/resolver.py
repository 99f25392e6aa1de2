"""Favicon resolution: cache lookup, ordered probing, caching, link sync.

Resolution of one URL:
  1. Cache hit (including a cached ``None``) → return it; no probes, no sync.
  2. No candidates (URL has no domain) → ``None``; nothing is cached because
     there is no domain to key it under.
  3. Probe candidates strictly one after another in preference order; the
     first available one wins and the rest are skipped.
  4. Cache the winner (or ``None`` when all failed), sync it into the link
     groups, return it.

Candidates are never raced in parallel: a faster but less preferred source
must not beat a slower authoritative one. Separate domains are not serialised
against each other, so a batch lookup resolves its misses concurrently.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from favicache.candidates import DEFAULT_ICON_SIZE, generate_candidates
from favicache.domains import extract_domain
from favicache.models.cache import NOT_CACHED, CacheMiss
from favicache.notifier import ErrorReporter

if TYPE_CHECKING:
    from collections.abc import Iterable

    from favicache.cache import FaviconCache
    from favicache.links import LinkSynchronizer
    from favicache.protocols import ProberProtocol

log = structlog.get_logger()


class FaviconResolver:
    def __init__(
        self,
        cache: FaviconCache,
        prober: ProberProtocol,
        synchronizer: LinkSynchronizer,
        *,
        default_size: int = DEFAULT_ICON_SIZE,
        reporter: ErrorReporter | None = None,
    ) -> None:
        self._cache = cache
        self._prober = prober
        self._synchronizer = synchronizer
        self._default_size = default_size
        self._reporter = reporter or ErrorReporter("favicon_resolver")

    def get_from_cache(self, url: str) -> str | None | CacheMiss:
        """Cached icon for ``url``'s domain, ``None`` if cached as failed, else ``NOT_CACHED``.

        A URL without a domain can never resolve, so it reports ``None``.
        """
        domain = extract_domain(url)
        if domain is None:
            return None
        return self._cache.read(domain)

    async def _first_available(self, candidates: list[str]) -> str | None:
        for candidate in candidates:
            if await self._prober.probe(candidate):
                return candidate
        return None

    async def get_favicon(self, url: str, size: int | None = None) -> str | None:
        """Resolve the best icon URL for ``url``. Never raises.

        Any unexpected failure is reported and resolves to ``None``, so one bad
        URL cannot fail a batch.
        """
        return await self._reporter.wrap_async(
            lambda: self._resolve(url, size),
            action="get_favicon",
            fallback=None,
        )

    async def _resolve(self, url: str, size: int | None) -> str | None:
        cached = self.get_from_cache(url)
        if cached is not NOT_CACHED:
            log.debug("favicon_cache_hit", url=url, icon=cached)
            return cached

        domain = extract_domain(url)
        candidates = generate_candidates(url, size or self._default_size)
        if domain is None or not candidates:
            log.debug("favicon_unresolvable_url", url=url)
            return None

        icon = await self._first_available(candidates)
        await self._cache.write(domain, icon)
        await self._synchronizer.sync(domain, icon)

        log.info("favicon_resolved", domain=domain, icon=icon, found=icon is not None)
        return icon

    async def get_favicons(
        self, urls: Iterable[str], size: int | None = None
    ) -> dict[str, str | None]:
        """Resolve many URLs: cached ones directly, the rest concurrently."""
        results: dict[str, str | None] = {}
        uncached: list[str] = []
        for url in dict.fromkeys(urls):
            cached = self.get_from_cache(url)
            if cached is NOT_CACHED:
                uncached.append(url)
            else:
                results[url] = cached

        if uncached:
            resolved = await asyncio.gather(*(self.get_favicon(url, size) for url in uncached))
            results.update(zip(uncached, resolved, strict=True))

        return results

    async def clear_cache(self) -> None:
        await self._cache.clear()
