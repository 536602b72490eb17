"""Shared base class for httpx-based providers.

Handles the plumbing every provider repeats: client lifecycle, the
site's ``Referer`` header, and fetch helpers that turn upstream
failures into domain errors.

This base class lives in the *infrastructure* layer because it depends
on ``httpx`` and ``structlog``.  The *domain* layer only knows
``ProviderPort``; providers inheriting from ``HttpxProviderBase``
structurally satisfy that Protocol.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from bs4 import BeautifulSoup

from luffy.infrastructure.common.html_selectors import parse_html
from luffy.infrastructure.common.http import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    build_http_client,
    fetch,
    parse_json,
)

DEFAULT_MAX_RESULTS = 10


class HttpxProviderBase:
    """Shared base for httpx-based providers.

    Subclasses **must** set ``name`` and ``base_url`` (class attribute or
    in ``__init__`` before calling ``super().__init__()``).

    A client passed to the constructor is shared and never closed here;
    without one the provider creates its own on first use and closes it
    in ``cleanup()``.
    """

    name: str = ""
    base_url: str = ""

    _max_results: int = DEFAULT_MAX_RESULTS
    _timeout: float = DEFAULT_TIMEOUT
    _user_agent: str = DEFAULT_USER_AGENT

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        *,
        max_results: int | None = None,
    ) -> None:
        self._client = http_client
        self._owns_client = http_client is None
        if max_results is not None:
            self._max_results = max_results
        self._log = structlog.get_logger(self.name or __name__)

    # ------------------------------------------------------------------
    # Client lifecycle
    # ------------------------------------------------------------------

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_http_client(
                timeout=self._timeout, user_agent=self._user_agent
            )
            self._owns_client = True
        return self._client

    async def cleanup(self) -> None:
        """Close the httpx client if this provider created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Fetch helpers (fail fast)
    # ------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        return {"Referer": f"{self.base_url}/"}

    async def _get(self, url: str, *, context: str = "", **kwargs: Any) -> httpx.Response:
        return await fetch(
            self._ensure_client(),
            url,
            headers=self._headers(),
            context=f"{self.name}:{context}" if context else self.name,
            **kwargs,
        )

    async def _get_html(self, url: str, *, context: str = "") -> BeautifulSoup:
        resp = await self._get(url, context=context)
        return parse_html(resp.text)

    async def _get_json(self, url: str, *, context: str = "") -> Any:
        resp = await self._get(url, context=context)
        return parse_json(resp, context=context)
