"""HLS master playlist parsing and best-variant selection.

``parse_variants`` and ``select_best`` are pure functions over manifest
text: malformed input never raises, it only degrades (zeroed fields,
ignored lines, pass-through URLs).  Network failures are reserved for
the fetching helpers at the bottom of the module.

The two functions rank differently on purpose.  The enumeration is
ordered by height, then bandwidth; the selector ranks by pixel area
(width x height), then bandwidth.  The selector re-scans the manifest
instead of reusing the enumeration so the two policies stay separate.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx
import structlog

from luffy.domain.entities.media import StreamVariant
from luffy.infrastructure.common.http import DEFAULT_USER_AGENT, fetch

log = structlog.get_logger(__name__)

STREAM_INF_PREFIX = "#EXT-X-STREAM-INF:"
COMMENT_PREFIX = "#"
UNKNOWN_RESOLUTION = "Unknown"

# KEY=VALUE pairs; quoted values may contain commas (CODECS="avc1,mp4a").
_ATTRIBUTE_RE = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')
_RESOLUTION_RE = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")


@dataclass(frozen=True)
class _ScannedVariant:
    """A variant as scanned, before width is dropped for the public record."""

    url: str
    resolution: str
    bandwidth: int
    width: int
    height: int

    def to_variant(self) -> StreamVariant:
        return StreamVariant(
            url=self.url,
            resolution=self.resolution,
            bandwidth=self.bandwidth,
            height=self.height,
        )


def parse_attributes(attribute_list: str) -> dict[str, str]:
    """Parse an HLS attribute list into a dict, unquoting quoted values.

    >>> parse_attributes('BANDWIDTH=800000,CODECS="avc1,mp4a",RESOLUTION=640x360')
    {'BANDWIDTH': '800000', 'CODECS': 'avc1,mp4a', 'RESOLUTION': '640x360'}
    """
    attrs: dict[str, str] = {}
    for key, value in _ATTRIBUTE_RE.findall(attribute_list):
        value = value.strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1]
        attrs[key] = value
    return attrs


def _to_int(value: str | None) -> int:
    if not value:
        return 0
    try:
        number = int(value.strip())
    except ValueError:
        return 0
    return max(number, 0)


def _parse_resolution(value: str) -> tuple[int, int]:
    match = _RESOLUTION_RE.match(value)
    if not match:
        return 0, 0
    return int(match.group(1)), int(match.group(2))


def _scan(text: str, manifest_url: str) -> Iterator[_ScannedVariant]:
    """Yield variants in document order."""
    pending: dict[str, str] | None = None

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith(STREAM_INF_PREFIX):
            pending = parse_attributes(line[len(STREAM_INF_PREFIX) :])
            continue

        if line.startswith(COMMENT_PREFIX):
            continue

        if pending is None:
            # URI line without a preceding stream-info tag
            continue

        resolution = pending.get("RESOLUTION", "")
        width, height = _parse_resolution(resolution)
        yield _ScannedVariant(
            url=urljoin(manifest_url, line),
            resolution=resolution or UNKNOWN_RESOLUTION,
            bandwidth=_to_int(pending.get("BANDWIDTH")),
            width=width,
            height=height,
        )
        pending = None


def parse_variants(text: str, manifest_url: str) -> list[StreamVariant]:
    """Parse a master playlist into variants, best first.

    Sorted by height descending, ties broken by bandwidth descending.
    A media playlist (no ``#EXT-X-STREAM-INF`` lines) yields ``[]``.
    """
    variants = [v.to_variant() for v in _scan(text, manifest_url)]
    variants.sort(key=lambda v: (v.height, v.bandwidth), reverse=True)
    return variants


def select_best(text: str, manifest_url: str) -> str:
    """Return the URL of the best variant, or *manifest_url* if there is none.

    Ranking key is ``(width * height, bandwidth)``.  On exact ties the
    first variant seen wins.
    """
    best: _ScannedVariant | None = None
    best_key = (0, 0)
    for variant in _scan(text, manifest_url):
        key = (variant.width * variant.height, variant.bandwidth)
        if best is None or key > best_key:
            best = variant
            best_key = key

    if best is None:
        log.debug("manifest_has_no_variants", manifest_url=manifest_url)
        return manifest_url
    return best.url


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


def _manifest_headers(headers: dict[str, str] | None) -> dict[str, str]:
    out = {"User-Agent": DEFAULT_USER_AGENT}
    for key, value in (headers or {}).items():
        if value:
            out[key] = value
    return out


async def fetch_manifest(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str] | None = None,
) -> str:
    """Fetch manifest text.  Raises ``UpstreamError`` on non-2xx responses."""
    resp = await fetch(client, url, headers=_manifest_headers(headers), context="manifest")
    return resp.text


async def list_stream_variants(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str] | None = None,
) -> list[StreamVariant]:
    """Fetch a manifest and return its variants, best first."""
    text = await fetch_manifest(client, url, headers)
    variants = parse_variants(text, url)
    log.debug("manifest_variants_parsed", manifest_url=url, count=len(variants))
    return variants


async def best_variant_url(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str] | None = None,
) -> str:
    """Fetch a manifest and return the best variant URL (or *url* itself)."""
    text = await fetch_manifest(client, url, headers)
    return select_best(text, url)
