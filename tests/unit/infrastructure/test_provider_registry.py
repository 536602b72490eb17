"""Tests for name-based provider selection."""

from __future__ import annotations

from unittest.mock import MagicMock

import httpx
import pytest

from luffy.domain.errors import ProviderNotFoundError
from luffy.infrastructure.providers import FLIXHQ, FilmSiteProvider, ProviderRegistry


class TestBuiltinSites:
    def test_lists_builtin_names(self) -> None:
        assert ProviderRegistry.with_builtin_sites().list_names() == ["flixhq", "sflix"]

    def test_create_film_site(self) -> None:
        provider = ProviderRegistry.with_builtin_sites().create("sflix")
        assert isinstance(provider, FilmSiteProvider)
        assert provider.name == "sflix"

    def test_name_is_case_insensitive(self) -> None:
        provider = ProviderRegistry.with_builtin_sites().create("  FlixHQ ")
        assert provider.name == "flixhq"

    @pytest.mark.asyncio()
    async def test_passes_client_and_max_results(self) -> None:
        async with httpx.AsyncClient() as client:
            provider = ProviderRegistry.with_builtin_sites().create(
                "flixhq", client, max_results=3
            )
            assert isinstance(provider, FilmSiteProvider)
            assert provider._client is client
            assert provider._max_results == 3

    def test_subset_of_configs(self) -> None:
        registry = ProviderRegistry.with_builtin_sites([FLIXHQ])
        assert registry.list_names() == ["flixhq"]


class TestRegistration:
    def test_unknown_name_lists_available(self) -> None:
        registry = ProviderRegistry.with_builtin_sites()
        with pytest.raises(ProviderNotFoundError, match="flixhq, sflix"):
            registry.create("nope")

    def test_custom_factory(self) -> None:
        fake = MagicMock()
        factory = MagicMock(return_value=fake)
        registry = ProviderRegistry({"Custom": factory})

        assert registry.list_names() == ["custom"]
        assert registry.create("custom", max_results=2) is fake
        factory.assert_called_once_with(None, max_results=2)

    def test_register_overrides(self) -> None:
        registry = ProviderRegistry.with_builtin_sites()
        fake = MagicMock()
        registry.register("sflix", MagicMock(return_value=fake))
        assert registry.create("sflix") is fake
