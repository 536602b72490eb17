"""Provider implementations for the supported content sites."""

from __future__ import annotations

from .film_site import ALL_SITE_CONFIGS, FLIXHQ, SFLIX, FilmSiteConfig, FilmSiteProvider
from .registry import ProviderRegistry

__all__ = [
    "ALL_SITE_CONFIGS",
    "FLIXHQ",
    "SFLIX",
    "FilmSiteConfig",
    "FilmSiteProvider",
    "ProviderRegistry",
]
