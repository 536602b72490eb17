"""Extractors turning embed page URLs into HLS manifest URLs."""

from __future__ import annotations

from .direct import DirectStreamExtractor
from .registry import ExtractorRegistry, extract_domain

__all__ = ["DirectStreamExtractor", "ExtractorRegistry", "extract_domain"]
