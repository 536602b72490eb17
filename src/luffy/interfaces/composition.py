"""Composition root: builds the resolution pipeline from configuration."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog

from luffy.application.use_cases.resolve_stream import ResolveStreamUseCase
from luffy.domain.ports.extractor import ExtractorPort
from luffy.infrastructure.common.http import build_http_client
from luffy.infrastructure.config.schema import AppConfig
from luffy.infrastructure.extractors import DirectStreamExtractor, ExtractorRegistry
from luffy.infrastructure.providers import ProviderRegistry

log = structlog.get_logger(__name__)


@asynccontextmanager
async def build_pipeline(
    config: AppConfig,
    *,
    providers: ProviderRegistry | None = None,
    extractors: list[ExtractorPort] | None = None,
) -> AsyncIterator[ResolveStreamUseCase]:
    """Yield a ready pipeline; closes the shared HTTP client on exit.

    The provider is chosen by ``config.provider_name``.  Extra
    host-specific *extractors* are tried before the direct-stream
    fallback.
    """
    registry = providers or ProviderRegistry.with_builtin_sites()
    http_client = build_http_client(
        timeout=config.http_timeout_seconds,
        user_agent=config.http_user_agent,
        follow_redirects=config.http_follow_redirects,
    )
    try:
        provider = registry.create(
            config.provider_name, http_client, max_results=config.max_results
        )
        extractor = ExtractorRegistry(
            extractors,
            fallback=DirectStreamExtractor(
                http_client,
                user_agent=config.http_user_agent,
                probe_timeout=config.http_timeout_seconds,
            ),
        )
        log.info("pipeline_ready", provider=provider.name)
        try:
            yield ResolveStreamUseCase(provider, extractor, http_client)
        finally:
            await provider.cleanup()
    finally:
        await http_client.aclose()
