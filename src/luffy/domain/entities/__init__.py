from .media import (
    Episode,
    MediaKind,
    PlaybackHandoff,
    ResolvedStream,
    SearchResult,
    Season,
    Server,
    StreamVariant,
)

__all__ = [
    "Episode",
    "MediaKind",
    "PlaybackHandoff",
    "ResolvedStream",
    "SearchResult",
    "Season",
    "Server",
    "StreamVariant",
]
