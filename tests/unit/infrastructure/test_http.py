"""Tests for the shared httpx helpers."""

from __future__ import annotations

import httpx
import pytest
import respx

from luffy.domain.errors import UpstreamError, UpstreamTimeoutError
from luffy.infrastructure.common.http import (
    DEFAULT_USER_AGENT,
    build_http_client,
    fetch,
    parse_json,
)

_URL = "https://flixhq.to/ajax/episode/sources/1"


class TestBuildHttpClient:
    @pytest.mark.asyncio()
    async def test_defaults(self) -> None:
        client = build_http_client()
        try:
            assert client.headers["User-Agent"] == DEFAULT_USER_AGENT
            assert client.follow_redirects is True
            assert client.timeout.read == 15.0
        finally:
            await client.aclose()

    @pytest.mark.asyncio()
    async def test_overrides(self) -> None:
        client = build_http_client(timeout=3.0, user_agent="Agent/1", follow_redirects=False)
        try:
            assert client.headers["User-Agent"] == "Agent/1"
            assert client.follow_redirects is False
            assert client.timeout.connect == 3.0
        finally:
            await client.aclose()


class TestFetch:
    @respx.mock
    @pytest.mark.asyncio()
    async def test_success(self) -> None:
        respx.get(_URL).respond(200, json={"link": "x"})
        async with httpx.AsyncClient() as client:
            resp = await fetch(client, _URL)
        assert resp.status_code == 200

    @respx.mock
    @pytest.mark.asyncio()
    async def test_method_and_headers(self) -> None:
        route = respx.head(_URL).respond(204)
        async with httpx.AsyncClient() as client:
            await fetch(client, _URL, method="HEAD", headers={"Referer": "https://flixhq.to/"})
        assert route.calls.last.request.headers["Referer"] == "https://flixhq.to/"

    @respx.mock
    @pytest.mark.asyncio()
    async def test_status_error(self) -> None:
        respx.get(_URL).respond(503)
        async with httpx.AsyncClient() as client:
            with pytest.raises(UpstreamError) as exc_info:
                await fetch(client, _URL)
        assert exc_info.value.status_code == 503
        assert not isinstance(exc_info.value, UpstreamTimeoutError)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_timeout(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectTimeout("slow"))
        async with httpx.AsyncClient() as client:
            with pytest.raises(UpstreamTimeoutError):
                await fetch(client, _URL)

    @respx.mock
    @pytest.mark.asyncio()
    async def test_transport_error(self) -> None:
        respx.get(_URL).mock(side_effect=httpx.ConnectError("refused"))
        async with httpx.AsyncClient() as client:
            with pytest.raises(UpstreamError) as exc_info:
                await fetch(client, _URL)
        assert exc_info.value.status_code is None


class TestParseJson:
    def test_valid(self) -> None:
        resp = httpx.Response(200, json={"type": "iframe"}, request=httpx.Request("GET", _URL))
        assert parse_json(resp) == {"type": "iframe"}

    def test_invalid(self) -> None:
        resp = httpx.Response(200, text="<html>", request=httpx.Request("GET", _URL))
        with pytest.raises(UpstreamError, match="invalid JSON"):
            parse_json(resp)
