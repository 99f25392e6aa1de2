"""Propagation of resolved icons into the user's link groups.

The ``link-groups`` document belongs to the link-management side of the
application. Its shape is a JSON list of groups::

    [{"title": "News", "links": [{"label": "HN", "value": "https://...", "icon": null}]}]

This module only rewrites the ``icon`` field of links whose ``value`` shares
the resolved domain. Everything else in the document, including keys it does
not know about, is written back untouched. Propagation is best-effort: an
absent or unparseable document is a no-op and nothing here raises.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from favicache.domains import extract_domain
from favicache.notifier import ErrorMessages, ErrorReporter
from favicache.storage import LINK_GROUPS_KEY

if TYPE_CHECKING:
    from favicache.protocols import StoreProtocol

log = structlog.get_logger()


def apply_icon(groups: list[Any], domain: str, icon: str | None) -> int:
    """Set ``icon`` on every link under ``domain`` in place. Returns the change count."""
    updated = 0
    for group in groups:
        if not isinstance(group, dict):
            continue
        links = group.get("links")
        if not isinstance(links, list):
            continue
        for link in links:
            if not isinstance(link, dict):
                continue
            value = link.get("value")
            if not isinstance(value, str) or extract_domain(value) != domain:
                continue
            if link.get("icon") != icon:
                link["icon"] = icon
                updated += 1
    return updated


class LinkSynchronizer:
    """Writes resolved favicons into the persisted link groups."""

    def __init__(self, store: StoreProtocol, reporter: ErrorReporter | None = None) -> None:
        self._store = store
        self._reporter = reporter or ErrorReporter("link_sync")

    async def _load_groups(self) -> list[Any] | None:
        raw = await self._store.get(LINK_GROUPS_KEY)
        if raw is None:
            return None
        try:
            groups = json.loads(raw)
        except ValueError:
            self._reporter.warn("link_groups_corrupt", key=LINK_GROUPS_KEY)
            return None
        if not isinstance(groups, list):
            self._reporter.warn(
                "link_groups_corrupt", key=LINK_GROUPS_KEY, type=type(groups).__name__
            )
            return None
        return groups

    async def sync(self, domain: str, icon: str | None) -> int:
        """Propagate ``icon`` to all links under ``domain``. Returns the update count."""
        groups = await self._load_groups()
        if groups is None:
            return 0

        updated = apply_icon(groups, domain, icon)
        if updated == 0:
            return 0

        if not await self._store.set(LINK_GROUPS_KEY, json.dumps(groups, ensure_ascii=False)):
            self._reporter.error(
                "link groups could not be persisted",
                action="sync",
                notify=True,
                user_message=ErrorMessages.SAVE_FAILED,
                level="warn",
            )
            return 0

        log.info("link_sync_complete", domain=domain, updated=updated)
        return updated
