"""Name-based provider selection."""

from __future__ import annotations

from collections.abc import Callable, Iterable

import httpx
import structlog

from luffy.domain.errors import ProviderNotFoundError
from luffy.domain.ports.provider import ProviderPort

from .film_site import ALL_SITE_CONFIGS, FilmSiteConfig, FilmSiteProvider

log = structlog.get_logger(__name__)

ProviderFactory = Callable[..., ProviderPort]


def _film_site_factory(config: FilmSiteConfig) -> ProviderFactory:
    def factory(
        http_client: httpx.AsyncClient | None = None,
        *,
        max_results: int | None = None,
    ) -> ProviderPort:
        return FilmSiteProvider(config, http_client, max_results=max_results)

    return factory


class ProviderRegistry:
    """Maps provider names to factories.

    Providers are chosen once, at pipeline construction time; nothing
    downstream inspects the concrete provider type.
    """

    def __init__(self, factories: dict[str, ProviderFactory] | None = None) -> None:
        self._factories: dict[str, ProviderFactory] = {}
        for name, factory in (factories or {}).items():
            self.register(name, factory)

    @classmethod
    def with_builtin_sites(
        cls, configs: Iterable[FilmSiteConfig] = ALL_SITE_CONFIGS
    ) -> ProviderRegistry:
        registry = cls()
        for config in configs:
            registry.register(config.name, _film_site_factory(config))
        return registry

    def register(self, name: str, factory: ProviderFactory) -> None:
        self._factories[name.lower()] = factory
        log.debug("provider_registered", provider=name)

    def list_names(self) -> list[str]:
        return sorted(self._factories)

    def create(
        self,
        name: str,
        http_client: httpx.AsyncClient | None = None,
        *,
        max_results: int | None = None,
    ) -> ProviderPort:
        """Instantiate the provider registered under *name* (case-insensitive).

        Raises ``ProviderNotFoundError`` for unknown names.
        """
        factory = self._factories.get(name.strip().lower())
        if factory is None:
            raise ProviderNotFoundError(
                f"unknown provider {name!r} (available: {', '.join(self.list_names())})"
            )
        return factory(http_client, max_results=max_results)
