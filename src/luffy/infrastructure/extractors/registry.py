"""Registry that dispatches embed URL extraction to per-host extractors."""

from __future__ import annotations

from urllib.parse import urlparse

import httpx
import structlog

from luffy.domain.entities.media import ResolvedStream
from luffy.domain.errors import ExtractionError, LuffyError
from luffy.domain.ports.extractor import ExtractorPort

from .direct import DirectStreamExtractor

log = structlog.get_logger(__name__)


def extract_domain(url: str) -> str:
    """Extract the second-level domain from a URL.

    Returns the second-to-last segment of the hostname (e.g.
    ``"megacloud"`` from ``"https://megacloud.tv/embed-2/e-1/abc"``).

    Returns ``""`` when the URL cannot be parsed or has fewer than
    two hostname segments.
    """
    try:
        hostname = urlparse(url).hostname or ""
    except ValueError:
        return ""
    parts = hostname.split(".")
    return parts[-2] if len(parts) >= 2 else ""


class ExtractorRegistry:
    """Dispatches extraction to the extractor registered for the embed host.

    Falls back to ``DirectStreamExtractor`` when no host-specific
    extractor is registered or the registered one gives up.
    Satisfies ``StreamExtractorPort``: ``extract()`` raises
    ``ExtractionError`` instead of returning None.
    """

    def __init__(
        self,
        extractors: list[ExtractorPort] | None = None,
        http_client: httpx.AsyncClient | None = None,
        fallback: ExtractorPort | None = None,
    ) -> None:
        self._extractors: dict[str, ExtractorPort] = {}
        self._domain_map: dict[str, ExtractorPort] = {}
        self._fallback = fallback or DirectStreamExtractor(http_client)
        for extractor in extractors or []:
            self.register(extractor)

    @property
    def name(self) -> str:
        return "registry"

    def register(self, extractor: ExtractorPort) -> None:
        """Register an extractor under its name.

        If the extractor exposes a ``supported_domains`` property, each
        domain is mapped as well, for embed hosts that rotate domains.
        """
        self._extractors[extractor.name] = extractor
        domains: frozenset[str] | None = getattr(extractor, "supported_domains", None)
        if domains:
            for domain in domains:
                self._domain_map[domain] = extractor
        log.debug("extractor_registered", extractor=extractor.name)

    @property
    def supported_hosts(self) -> list[str]:
        return list(self._extractors.keys())

    async def extract(self, embed_url: str) -> ResolvedStream:
        """Resolve *embed_url* to a manifest URL.

        Raises ``ExtractionError`` when neither the host-specific
        extractor nor the fallback can handle the URL.
        """
        host = extract_domain(embed_url)
        extractor = self._extractors.get(host) or self._domain_map.get(host)
        if extractor is not None:
            result = await self._try_extractor(extractor, embed_url)
            if result is not None:
                return result

        result = await self._try_extractor(self._fallback, embed_url)
        if result is not None:
            return result

        log.warning("extraction_failed", host=host, url=embed_url)
        raise ExtractionError(f"no extractor could handle {embed_url}")

    async def _try_extractor(
        self, extractor: ExtractorPort, url: str
    ) -> ResolvedStream | None:
        try:
            result = await extractor.extract(url)
        except LuffyError:
            raise
        except httpx.TimeoutException:
            log.warning("extractor_timeout", extractor=extractor.name, url=url)
            return None
        except httpx.HTTPError as exc:
            log.warning(
                "extractor_http_error",
                extractor=extractor.name,
                url=url,
                error=str(exc),
            )
            return None
        if result is not None:
            log.info(
                "extractor_success",
                extractor=extractor.name,
                subtitles=len(result.subtitles),
            )
        return result
