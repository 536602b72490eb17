"""Port for content providers (one implementation per supported site)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from luffy.domain.entities.media import Episode, SearchResult, Season, Server


@runtime_checkable
class ProviderPort(Protocol):
    """Six-stage resolution pipeline against one external content site.

    Every identifier a stage returns is an opaque token that the caller
    feeds verbatim into the next stage.  Stages raise ``NotFoundError``,
    ``ParseError`` or ``UpstreamError`` (see ``luffy.domain.errors``).
    """

    @property
    def name(self) -> str:
        """Provider name used for selection (e.g. 'sflix')."""
        ...

    async def search(self, query: str) -> list[SearchResult]:
        """Search the site.  Never returns an empty list."""
        ...

    async def resolve_media(self, result_url: str) -> str:
        """Turn a ``SearchResult.url`` into a media reference token."""
        ...

    async def list_seasons(self, media_ref: str) -> list[Season]:
        """List the seasons of a series (empty for movies)."""
        ...

    async def list_episodes(
        self, container_ref: str, is_season: bool
    ) -> list[Episode]:
        """List episodes of a season, or server entries of a movie.

        With ``is_season=False`` the container is a movie's media
        reference and the entries are its servers, shaped like
        ``list_servers()`` output.
        """
        ...

    async def list_servers(self, episode_ref: str) -> list[Server]:
        """List the servers an episode can be streamed from."""
        ...

    async def resolve_link(self, server_id: str) -> str:
        """Return the raw embed URL for a server."""
        ...

    async def cleanup(self) -> None:
        """Release resources held by the provider."""
        ...
