"""Ordered icon-source candidates for a page URL.

The order is a preference policy, most authoritative first:
  1. The site's own /favicon.ico
  2. DuckDuckGo's icon directory
  3. Google's favicon service, at twice the requested size so the icon
     survives downscaling
  4. The browser-internal favicon cache (only resolvable inside a Chromium
     browser, so it always fails to probe anywhere else)
"""

from __future__ import annotations

from favicache.domains import extract_domain

DEFAULT_ICON_SIZE = 32

SITE_FAVICON_TEMPLATE = "https://{domain}/favicon.ico"
DUCKDUCKGO_TEMPLATE = "https://icons.duckduckgo.com/ip3/{domain}.ico"
GOOGLE_S2_TEMPLATE = "https://www.google.com/s2/favicons?domain={domain}&sz={size}"
BROWSER_CACHE_TEMPLATE = "chrome://favicon/size/{size}@2x/{url}"


def generate_candidates(url: str, size: int = DEFAULT_ICON_SIZE) -> list[str]:
    """Return the candidate icon URLs for ``url``, or ``[]`` if it has no domain."""
    domain = extract_domain(url)
    if domain is None:
        return []

    return [
        SITE_FAVICON_TEMPLATE.format(domain=domain),
        DUCKDUCKGO_TEMPLATE.format(domain=domain),
        GOOGLE_S2_TEMPLATE.format(domain=domain, size=size * 2),
        BROWSER_CACHE_TEMPLATE.format(size=size, url=url),
    ]
