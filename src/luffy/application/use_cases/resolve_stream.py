"""Stream resolution use case.

query -> search -> media -> (seasons -> episodes) -> servers -> embed link
-> extractor -> manifest -> best variant -> PlaybackHandoff.

The caller drives the pipeline one stage at a time and feeds each
stage's opaque identifiers back into the next.  Stages run strictly in
sequence; nothing here fans out.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

import httpx
import structlog

from luffy.domain.entities.media import (
    Episode,
    PlaybackHandoff,
    ResolvedStream,
    SearchResult,
    Season,
    Server,
    StreamVariant,
)
from luffy.domain.errors import LuffyError
from luffy.domain.ports.extractor import StreamExtractorPort
from luffy.domain.ports.provider import ProviderPort
from luffy.infrastructure.hls.manifest import best_variant_url, list_stream_variants

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _stream_headers(stream: ResolvedStream) -> dict[str, str]:
    headers: dict[str, str] = {}
    if stream.referer:
        headers["Referer"] = stream.referer
    if stream.user_agent:
        headers["User-Agent"] = stream.user_agent
    return headers


class ResolveStreamUseCase:
    """Stage-by-stage facade over one provider and one extractor.

    Any ``LuffyError`` raised inside a stage is tagged with the stage
    name before it propagates, so the caller can report where the chain
    broke.
    """

    def __init__(
        self,
        provider: ProviderPort,
        extractor: StreamExtractorPort,
        http_client: httpx.AsyncClient,
    ) -> None:
        self._provider = provider
        self._extractor = extractor
        self._http = http_client

    @property
    def provider_name(self) -> str:
        return self._provider.name

    @asynccontextmanager
    async def _stage(self, stage: str, **context: object) -> AsyncIterator[None]:
        start = time.perf_counter_ns()
        log.debug("stage_started", stage=stage, provider=self._provider.name, **context)
        try:
            yield
        except LuffyError as exc:
            if exc.stage is None:
                exc.stage = stage
            log.warning(
                "stage_failed",
                stage=stage,
                provider=self._provider.name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise
        duration_ms = (time.perf_counter_ns() - start) // 1_000_000
        log.debug("stage_finished", stage=stage, duration_ms=duration_ms)

    async def _run(self, stage: str, call: Awaitable[T], **context: object) -> T:
        async with self._stage(stage, **context):
            return await call

    # ------------------------------------------------------------------
    # Provider stages
    # ------------------------------------------------------------------

    async def search(self, query: str) -> list[SearchResult]:
        return await self._run("search", self._provider.search(query), query=query)

    async def resolve_media(self, result_url: str) -> str:
        return await self._run(
            "resolve_media", self._provider.resolve_media(result_url), url=result_url
        )

    async def list_seasons(self, media_ref: str) -> list[Season]:
        return await self._run("list_seasons", self._provider.list_seasons(media_ref))

    async def list_episodes(self, container_ref: str, is_season: bool) -> list[Episode]:
        return await self._run(
            "list_episodes",
            self._provider.list_episodes(container_ref, is_season),
            is_season=is_season,
        )

    async def list_servers(self, episode_ref: str) -> list[Server]:
        return await self._run("list_servers", self._provider.list_servers(episode_ref))

    async def resolve_link(self, server_id: str) -> str:
        return await self._run("resolve_link", self._provider.resolve_link(server_id))

    # ------------------------------------------------------------------
    # Extraction and quality selection
    # ------------------------------------------------------------------

    async def extract(self, embed_url: str) -> ResolvedStream:
        return await self._run("extract", self._extractor.extract(embed_url))

    async def resolve_stream(self, server_id: str) -> ResolvedStream:
        """Resolve a server to its extracted stream (link + extractor)."""
        embed_url = await self.resolve_link(server_id)
        return await self.extract(embed_url)

    async def list_qualities(self, stream: ResolvedStream) -> list[StreamVariant]:
        """All variants of the stream's manifest, best first."""
        return await self._run(
            "fetch_manifest",
            list_stream_variants(self._http, stream.manifest_url, _stream_headers(stream)),
        )

    async def select_stream(self, stream: ResolvedStream) -> PlaybackHandoff:
        """Pick the best variant of an extracted stream.

        A manifest without variants is itself the playable URL.
        """
        url = await self._run(
            "fetch_manifest",
            best_variant_url(self._http, stream.manifest_url, _stream_headers(stream)),
        )
        log.info(
            "stream_selected",
            provider=self._provider.name,
            manifest_url=stream.manifest_url,
            url=url,
        )
        return PlaybackHandoff(
            url=url,
            manifest_url=stream.manifest_url,
            referer=stream.referer,
            user_agent=stream.user_agent,
            subtitles=stream.subtitles,
        )

    async def resolve_playback(self, server_id: str) -> PlaybackHandoff:
        """Run the tail of the pipeline: link, extraction, best variant."""
        stream = await self.resolve_stream(server_id)
        return await self.select_stream(stream)
