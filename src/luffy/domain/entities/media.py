"""Domain entities for media resolution.

Pure value objects, no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from luffy.domain.errors import DecodeError

_KIND_ALIASES: dict[str, str] = {
    "movie": "movie",
    "film": "movie",
    "tv": "series",
    "series": "series",
    "show": "series",
}


class MediaKind(str, Enum):
    """Kind of a media title."""

    MOVIE = "movie"
    SERIES = "series"

    @classmethod
    def parse(cls, value: str) -> MediaKind:
        """Parse a kind label as found on provider pages or in identifiers.

        Raises ``DecodeError`` for unknown labels.
        """
        normalized = _KIND_ALIASES.get(value.strip().lower())
        if normalized is None:
            raise DecodeError(f"unknown media kind: {value!r}")
        return cls(normalized)


@dataclass(frozen=True)
class SearchResult:
    """One search hit, as listed by a provider."""

    title: str
    url: str
    kind: MediaKind
    poster: str | None = None
    year: str | None = None


@dataclass(frozen=True)
class Season:
    id: str  # opaque token, see luffy.domain.identifiers
    name: str


@dataclass(frozen=True)
class Episode:
    id: str
    name: str


@dataclass(frozen=True)
class Server:
    id: str
    name: str


@dataclass(frozen=True)
class StreamVariant:
    """One quality-specific entry of an HLS master playlist."""

    url: str  # absolute
    resolution: str = "Unknown"  # raw "WxH" label
    bandwidth: int = 0  # bits per second
    height: int = 0  # pixels


@dataclass(frozen=True)
class ResolvedStream:
    """Result of extracting a manifest URL from an embed page.

    Returned by ExtractorPort implementations.
    """

    manifest_url: str
    subtitles: tuple[str, ...] = ()
    referer: str = ""
    user_agent: str = ""


@dataclass(frozen=True)
class PlaybackHandoff:
    """Final parameters handed to a download/playback collaborator."""

    url: str  # selected variant, or the manifest itself
    manifest_url: str
    referer: str = ""
    user_agent: str = ""
    subtitles: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "url": self.url,
            "manifest_url": self.manifest_url,
            "referer": self.referer,
            "user_agent": self.user_agent,
            "subtitles": list(self.subtitles),
        }
