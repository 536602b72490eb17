"""Fallback extractor for links that already point at an HLS manifest."""

from __future__ import annotations

from urllib.parse import urlparse

import httpx
import structlog

from luffy.domain.entities.media import ResolvedStream
from luffy.infrastructure.common.http import DEFAULT_USER_AGENT

log = structlog.get_logger(__name__)

_HLS_CONTENT_TYPES: tuple[str, ...] = (
    "application/vnd.apple.mpegurl",
    "application/x-mpegurl",
    "audio/mpegurl",
)


def looks_like_manifest(url: str) -> bool:
    """True when the URL path ends in ``.m3u8``.

    >>> looks_like_manifest("https://cdn.example.com/v/master.m3u8?t=1")
    True
    """
    return urlparse(url).path.lower().endswith(".m3u8")


def origin_of(url: str) -> str:
    """``scheme://host/`` of *url*, used as Referer for CDN requests."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}/"


class DirectStreamExtractor:
    """Accepts embed URLs that are manifests already.

    Satisfies ``ExtractorPort``.  A URL qualifies when its path ends in
    ``.m3u8`` or a HEAD request reports an HLS content type.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
        probe_timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._user_agent = user_agent
        self._probe_timeout = probe_timeout

    @property
    def name(self) -> str:
        return "direct"

    async def extract(self, embed_url: str) -> ResolvedStream | None:
        if looks_like_manifest(embed_url) or await self._probe_is_hls(embed_url):
            return ResolvedStream(
                manifest_url=embed_url,
                referer=origin_of(embed_url),
                user_agent=self._user_agent,
            )
        return None

    async def _probe_is_hls(self, url: str) -> bool:
        if self._http is None:
            return False
        try:
            resp = await self._http.head(
                url, follow_redirects=True, timeout=self._probe_timeout
            )
        except httpx.HTTPError as exc:
            log.debug("direct_probe_failed", url=url, error=str(exc))
            return False
        if resp.status_code >= 400:
            return False
        content_type = resp.headers.get("content-type", "").lower()
        return any(ct in content_type for ct in _HLS_CONTENT_TYPES)
