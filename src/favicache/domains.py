"""Hostname extraction used as the cache and link-sync key."""

from __future__ import annotations

from urllib.parse import urlparse

_SUPPORTED_SCHEMES = frozenset({"http", "https"})


def extract_domain(url: str) -> str | None:
    """Return the hostname of an absolute http(s) URL, or ``None``.

    ``'https://Docs.Example.com:8443/a?b'`` → ``'docs.example.com'``.
    Anything that is not a string, not absolute, uses another scheme, or has
    an empty host yields ``None``. Never raises.
    """
    if not isinstance(url, str):
        return None
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
    except ValueError:
        # e.g. unbalanced IPv6 brackets: "http://[::1/"
        return None
    if parsed.scheme.lower() not in _SUPPORTED_SCHEMES or not hostname:
        return None
    return hostname
