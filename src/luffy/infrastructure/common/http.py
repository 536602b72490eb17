"""Shared httpx helpers: client construction and fail-fast fetching.

Provider stages and the manifest fetcher all go through ``fetch()`` so
that transport failures surface as the same domain errors everywhere:
``UpstreamTimeoutError`` when the per-call deadline expires and
``UpstreamError`` for everything else (non-2xx status, connection
errors, protocol errors).
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from luffy.domain.errors import UpstreamError, UpstreamTimeoutError

log = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_TIMEOUT = 15.0


def build_http_client(
    *,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    follow_redirects: bool = True,
) -> httpx.AsyncClient:
    """Create the client shared by every pipeline stage.

    The client is configured once and never mutated afterwards, so
    concurrent pipelines may share it.
    """
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=follow_redirects,
        headers={"User-Agent": user_agent},
    )


async def fetch(
    client: httpx.AsyncClient,
    url: str,
    *,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    context: str = "",
    **kwargs: Any,
) -> httpx.Response:
    """Send a request and require a 2xx response.

    Raises ``UpstreamTimeoutError`` / ``UpstreamError`` instead of
    leaking httpx exceptions.
    """
    try:
        resp = await client.request(method, url, headers=headers, **kwargs)
        resp.raise_for_status()
    except httpx.TimeoutException as exc:
        log.warning("upstream_timeout", url=url, context=context)
        raise UpstreamTimeoutError(f"timed out fetching {url}") from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        log.warning("upstream_http_error", url=url, status=status, context=context)
        raise UpstreamError(
            f"HTTP {status} from {url}", status_code=status
        ) from exc
    except httpx.HTTPError as exc:
        log.warning("upstream_fetch_error", url=url, error=str(exc), context=context)
        raise UpstreamError(f"request to {url} failed: {exc}") from exc
    return resp


def parse_json(response: httpx.Response, context: str = "") -> Any:
    """Decode a JSON body, raising ``UpstreamError`` when it is not JSON."""
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        log.warning("upstream_invalid_json", url=str(response.url), context=context)
        raise UpstreamError(f"invalid JSON from {response.url}") from exc
