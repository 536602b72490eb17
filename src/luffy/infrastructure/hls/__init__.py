"""HLS master playlist handling."""

from __future__ import annotations

from .manifest import best_variant_url, fetch_manifest, list_stream_variants, parse_variants, select_best

__all__ = [
    "best_variant_url",
    "fetch_manifest",
    "list_stream_variants",
    "parse_variants",
    "select_best",
]
