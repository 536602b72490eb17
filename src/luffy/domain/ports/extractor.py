"""Port for turning embed page URLs into HLS manifest URLs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from luffy.domain.entities.media import ResolvedStream


@runtime_checkable
class ExtractorPort(Protocol):
    """Resolves an embed page URL to a manifest URL plus side-channel data.

    Implementations handle site-specific extraction logic (payload
    decryption, token generation, API calls, etc.).
    """

    @property
    def name(self) -> str:
        """Embed host this extractor handles (e.g. 'megacloud')."""
        ...

    async def extract(self, embed_url: str) -> ResolvedStream | None:
        """Extract the manifest URL, subtitles and required headers.

        Returns None if this extractor cannot handle the URL.
        """
        ...


@runtime_checkable
class StreamExtractorPort(Protocol):
    """Extraction as the resolution pipeline consumes it.

    Unlike ``ExtractorPort`` there is no "cannot handle" result: every
    failure raises ``ExtractionError`` (or another ``LuffyError``).
    """

    async def extract(self, embed_url: str) -> ResolvedStream:
        ...
