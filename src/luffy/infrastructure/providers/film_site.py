"""Generic provider for the "film site" streaming template.

sflix, flixhq and their mirrors run the same site template: server-
rendered search cards, ajax HTML fragments for seasons, episodes and
servers, and a JSON ``{type, link}`` endpoint for the embed link.  They
differ only in base URL and ajax paths, so each site is described by a
``FilmSiteConfig`` and the scraping logic lives once in
``FilmSiteProvider``.

Adding a site = adding a ``FilmSiteConfig`` constant + appending it to
``ALL_SITE_CONFIGS``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import quote, urljoin

import httpx
from bs4 import Tag

from luffy.domain.entities.media import Episode, MediaKind, SearchResult, Season, Server
from luffy.domain.errors import DecodeError, NotFoundError, ParseError, UpstreamError
from luffy.domain.identifiers import StageRef
from luffy.infrastructure.common.html_selectors import (
    extract_attr,
    extract_text,
    probe_attr,
    select_items,
)

from .base import HttpxProviderBase

_YEAR_RE = re.compile(r"^\d{4}$")
_WHITESPACE_RE = re.compile(r"\s+")

# Page-structure fallbacks, tried in order.
_RESULT_CARD_SELECTORS = ("div.flw-item", ".film_list-wrap .flw-item")
_MEDIA_ID_PROBES: tuple[tuple[str, str], ...] = (
    ("#watch-block", "data-id"),
    ("div.detail_page-watch", "data-id"),
    ("#movie_id", "value"),
)
_SEASON_SELECTORS = (".ss-item", ".dropdown-item")
_EPISODE_SELECTORS = (".eps-item",)
_MOVIE_SERVER_SELECTORS = (".link-item",)
_SERVER_SELECTORS = (".link-item", ".ulclear > li")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilmSiteConfig:
    """Immutable description of one film-site deployment.

    Path templates are relative to ``base_url`` and take a single
    ``{id}`` placeholder (``{query}`` for search).
    """

    name: str
    base_url: str
    search_path: str
    seasons_path: str
    season_episodes_path: str
    movie_servers_path: str
    episode_servers_path: str
    sources_path: str


SFLIX = FilmSiteConfig(
    name="sflix",
    base_url="https://sflix.is",
    search_path="/search/{query}",
    seasons_path="/ajax/season/list/{id}",
    season_episodes_path="/ajax/season/episodes/{id}",
    movie_servers_path="/ajax/episode/list/{id}",
    episode_servers_path="/ajax/episode/servers/{id}",
    sources_path="/ajax/episode/sources/{id}",
)

FLIXHQ = FilmSiteConfig(
    name="flixhq",
    base_url="https://flixhq.to",
    search_path="/search/{query}",
    seasons_path="/ajax/v2/tv/seasons/{id}",
    season_episodes_path="/ajax/v2/season/episodes/{id}",
    movie_servers_path="/ajax/movie/episodes/{id}",
    episode_servers_path="/ajax/v2/episode/servers/{id}",
    sources_path="/ajax/episode/sources/{id}",
)

ALL_SITE_CONFIGS: tuple[FilmSiteConfig, ...] = (SFLIX, FLIXHQ)


# ---------------------------------------------------------------------------
# Stateless helpers (testable)
# ---------------------------------------------------------------------------


def normalize_query(query: str) -> str:
    """Collapse whitespace to hyphens and URL-quote the result.

    >>> normalize_query("  the  dark knight ")
    'the-dark-knight'
    """
    slug = _WHITESPACE_RE.sub("-", query.strip())
    return quote(slug, safe="-")


def kind_from_url(url: str) -> MediaKind | None:
    """Infer the media kind from a detail page path (``/tv/``, ``/movie/``)."""
    if "/tv/" in url:
        return MediaKind.SERIES
    if "/movie/" in url:
        return MediaKind.MOVIE
    return None


def is_movie(ref: StageRef) -> bool:
    """Decide the server endpoint family for a decoded reference.

    Uses the encoded kind when present.  When the kind was lost, falls
    back to the media id itself: movie unless it looks like a TV id.
    """
    if ref.kind is not None:
        return ref.kind is MediaKind.MOVIE
    media_id = ref.media_id
    return "movie" in media_id or "tv" not in media_id


def _card_kind(card: Tag, href: str) -> MediaKind:
    label = extract_text(card, "span.fdi-item strong", "span.fdi-type")
    kind = MediaKind.MOVIE
    if label:
        try:
            kind = MediaKind.parse(label)
        except DecodeError:
            kind = MediaKind.MOVIE
    return kind_from_url(href) or kind


def _card_year(card: Tag) -> str | None:
    for span in card.select("span.fdi-item"):
        text = span.get_text(strip=True)
        if _YEAR_RE.match(text):
            return text
    return None


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class FilmSiteProvider(HttpxProviderBase):
    """Provider for film-site deployments.  Satisfies ``ProviderPort``."""

    def __init__(
        self,
        config: FilmSiteConfig,
        http_client: httpx.AsyncClient | None = None,
        *,
        max_results: int | None = None,
    ) -> None:
        self._config = config
        self.name = config.name
        self.base_url = config.base_url
        super().__init__(http_client, max_results=max_results)

    @property
    def config(self) -> FilmSiteConfig:
        return self._config

    def _url(self, template: str, **params: str) -> str:
        return self.base_url + template.format(**params)

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------

    async def search(self, query: str) -> list[SearchResult]:
        url = self._url(self._config.search_path, query=normalize_query(query))
        soup = await self._get_html(url, context="search")

        cards = select_items(soup, *_RESULT_CARD_SELECTORS)[: self._max_results]
        results: list[SearchResult] = []
        for card in cards:
            href = extract_attr(card, "div.film-poster a", "href", "h2.film-name a")
            if not href:
                continue
            title = extract_attr(card, "h2.film-name a", "title") or extract_text(
                card, "h2.film-name a", default="Unknown"
            )
            poster = extract_attr(card, "img.film-poster-img", "data-src") or extract_attr(
                card, "img.film-poster-img", "src"
            )
            results.append(
                SearchResult(
                    title=title,
                    url=urljoin(self.base_url, href),
                    kind=_card_kind(card, href),
                    poster=poster or None,
                    year=_card_year(card),
                )
            )

        if not results:
            self._log.info(f"{self.name}_search_empty", query=query)
            raise NotFoundError(f"no results for {query!r} on {self.name}")

        self._log.info(f"{self.name}_search_done", query=query, count=len(results))
        return results

    # ------------------------------------------------------------------
    # resolve_media
    # ------------------------------------------------------------------

    async def resolve_media(self, result_url: str) -> str:
        soup = await self._get_html(result_url, context="resolve_media")
        media_id = probe_attr(soup, _MEDIA_ID_PROBES)
        if not media_id:
            raise ParseError(f"could not find media ID on {result_url}")

        ref = StageRef.for_media(media_id, kind_from_url(result_url))
        self._log.debug(
            f"{self.name}_media_resolved",
            media_id=media_id,
            kind=ref.kind.value if ref.kind else None,
        )
        return ref.media_token()

    # ------------------------------------------------------------------
    # list_seasons
    # ------------------------------------------------------------------

    async def list_seasons(self, media_ref: str) -> list[Season]:
        ref = StageRef.from_token(media_ref)
        if ref.kind is MediaKind.MOVIE:
            return []

        media = StageRef.for_media(ref.media_id or ref.item_id, ref.kind)
        url = self._url(self._config.seasons_path, id=media.media_id)
        soup = await self._get_html(url, context="seasons")

        seasons: list[Season] = []
        for item in select_items(soup, *_SEASON_SELECTORS):
            season_id = extract_attr(item, "", "data-id")
            if not season_id:
                continue
            seasons.append(
                Season(id=media.child(season_id).token(), name=extract_text(item, ""))
            )

        if not seasons:
            raise ParseError(f"no seasons found for media {media.media_id}")
        return seasons

    # ------------------------------------------------------------------
    # list_episodes
    # ------------------------------------------------------------------

    async def list_episodes(self, container_ref: str, is_season: bool) -> list[Episode]:
        ref = StageRef.from_token(container_ref)

        if is_season:
            url = self._url(self._config.season_episodes_path, id=ref.item_id)
            soup = await self._get_html(url, context="episodes")
            items = select_items(soup, *_EPISODE_SELECTORS)
        else:
            url = self._url(self._config.movie_servers_path, id=ref.item_id)
            soup = await self._get_html(url, context="movie_servers")
            items = select_items(soup, *_MOVIE_SERVER_SELECTORS)

        episodes: list[Episode] = []
        for item in items:
            entry_id = extract_attr(item, "", "data-id")
            if not entry_id:
                continue
            if is_season:
                name = (
                    extract_attr(item, "img.film-poster-img", "title")
                    or extract_attr(item, "", "title")
                    or extract_text(item, "")
                )
            else:
                name = extract_text(item, "span")
            episodes.append(Episode(id=ref.child(entry_id).token(), name=name))

        if not episodes:
            what = "episodes" if is_season else "servers"
            raise ParseError(f"no {what} found for {ref.item_id}")
        return episodes

    # ------------------------------------------------------------------
    # list_servers
    # ------------------------------------------------------------------

    async def list_servers(self, episode_ref: str) -> list[Server]:
        ref = StageRef.from_token(episode_ref)
        if is_movie(ref):
            template = self._config.movie_servers_path
        else:
            template = self._config.episode_servers_path
        soup = await self._get_html(
            self._url(template, id=ref.item_id), context="servers"
        )

        servers: list[Server] = []
        for item in select_items(soup, *_SERVER_SELECTORS):
            server_id = extract_attr(item, "", "data-id") or extract_attr(
                item, "a", "data-id"
            )
            name = extract_text(item, "span", "a span") or extract_text(item, "")
            if server_id and name:
                servers.append(Server(id=ref.child(server_id).token(), name=name))

        if not servers:
            raise ParseError(f"no servers found for episode {ref.item_id}")
        return servers

    # ------------------------------------------------------------------
    # resolve_link
    # ------------------------------------------------------------------

    async def resolve_link(self, server_id: str) -> str:
        ref = StageRef.from_token(server_id)
        data = await self._get_json(
            self._url(self._config.sources_path, id=ref.item_id), context="sources"
        )
        link = data.get("link") if isinstance(data, dict) else None
        if not isinstance(link, str) or not link:
            raise UpstreamError(f"no embed link in sources response for {ref.item_id}")

        self._log.debug(
            f"{self.name}_link_resolved",
            server_id=ref.item_id,
            link_type=data.get("type"),
        )
        return link
