"""Shared test fixtures for the luffy test suite."""

from __future__ import annotations

import os

import pytest

from luffy.domain.entities import ResolvedStream

# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _clean_luffy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop LUFFY_* variables so host settings never leak into config tests."""
    for key in list(os.environ):
        if key.upper().startswith("LUFFY_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# HLS fixtures
# ---------------------------------------------------------------------------

MANIFEST_URL = "https://cdn.example.com/hls/abc/master.m3u8"

MASTER_PLAYLIST = """\
#EXTM3U
#EXT-X-VERSION:3
#EXT-X-STREAM-INF:BANDWIDTH=800000,RESOLUTION=640x360
360p/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=2800000,CODECS="avc1.4d401f,mp4a.40.2",RESOLUTION=1280x720
720p/index.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=5000000,RESOLUTION=1920x1080
https://cdn2.example.com/hls/abc/1080p/index.m3u8
"""

MEDIA_PLAYLIST = """\
#EXTM3U
#EXT-X-TARGETDURATION:10
#EXTINF:10.0,
seg-0.ts
#EXTINF:10.0,
seg-1.ts
#EXT-X-ENDLIST
"""


@pytest.fixture()
def master_playlist() -> str:
    return MASTER_PLAYLIST


@pytest.fixture()
def media_playlist() -> str:
    return MEDIA_PLAYLIST


@pytest.fixture()
def resolved_stream() -> ResolvedStream:
    """Stream as returned by an extractor, with CDN headers and one subtitle."""
    return ResolvedStream(
        manifest_url=MANIFEST_URL,
        subtitles=("https://cdn.example.com/subs/en.vtt",),
        referer="https://embed.example.com/",
        user_agent="TestAgent/1.0",
    )
