"""Image availability probing.

A candidate counts as available only if its body decodes as an image. HTTP
status codes are deliberately ignored: several icon services answer 200 with
a placeholder or an HTML error page, and some sites serve a valid icon with an
odd status. Every probe is bounded by an explicit timeout; a timeout is just
another failed probe.
"""

from __future__ import annotations

import asyncio
from io import BytesIO
from typing import TYPE_CHECKING

import httpx
import structlog
from PIL import Image, UnidentifiedImageError

if TYPE_CHECKING:
    from favicache.config import ProbeSettings

log = structlog.get_logger()


def build_http_client(settings: ProbeSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=5,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent, "Accept": "image/*,*/*;q=0.8"},
        limits=httpx.Limits(
            max_connections=20,
            max_keepalive_connections=10,
        ),
    )


def is_decodable_image(content: bytes) -> bool:
    """Return True if Pillow recognises ``content`` as a well-formed image."""
    if not content:
        return False
    try:
        with Image.open(BytesIO(content)) as image:
            image.verify()
    except UnidentifiedImageError:
        return False
    except Exception:
        # Pillow surfaces malformed data as anything from SyntaxError to struct.error
        log.debug("favicon_decode_error", exc_info=True)
        return False
    return True


class ImageProber:
    """Probes candidate URLs through a shared httpx client."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout_seconds: float = 5.0,
        max_bytes: int = 1_048_576,
    ) -> None:
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._max_bytes = max_bytes

    async def _download(self, url: str) -> bytes | None:
        async with self._client.stream("GET", url) as response:
            declared = response.headers.get("content-length")
            if declared is not None and declared.isdigit() and int(declared) > self._max_bytes:
                log.debug("favicon_probe_oversize", url=url, content_length=int(declared))
                return None

            chunks: list[bytes] = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > self._max_bytes:
                    log.debug("favicon_probe_oversize", url=url, received=received)
                    return None
                chunks.append(chunk)
            return b"".join(chunks)

    async def probe(self, url: str) -> bool:
        """Return True if ``url`` serves a decodable image. Never raises."""
        try:
            content = await asyncio.wait_for(self._download(url), timeout=self._timeout_seconds)
        except TimeoutError:
            log.debug("favicon_probe_failed", url=url, reason="timeout")
            return False
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            # HTTPError includes UnsupportedProtocol for browser-internal schemes.
            # InvalidURL covers control characters and bad IDNA hosts.
            log.debug("favicon_probe_failed", url=url, reason=type(exc).__name__)
            return False

        if content is None:
            return False

        available = is_decodable_image(content)
        if not available:
            log.debug("favicon_probe_failed", url=url, reason="not_an_image")
        return available
