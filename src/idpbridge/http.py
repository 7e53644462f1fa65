"""Outbound HTTP helpers shared by all providers."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

import httpx

from .contracts import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def create_http_client(
    headers: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    """Create the AsyncClient used for every token and profile request."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(timeout or DEFAULT_TIMEOUT),
        headers=dict(headers) if headers else None,
    )


@asynccontextmanager
async def open_http_client(client: httpx.AsyncClient | None = None) -> AsyncIterator[Any]:
    """Yield ``client`` when the caller supplied one, otherwise a fresh client.

    Fresh clients are closed on exit; caller-owned clients are left open.
    """
    if client is not None:
        yield client
        return
    async with create_http_client() as fresh:
        yield fresh


async def send(
    method: str,
    url: str,
    *,
    provider: str,
    endpoint: str,
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> Any:
    """Issue a request, mapping transport failures to ``ProviderError``."""
    async with open_http_client(client) as http:
        try:
            if method == "GET":
                return await http.get(url, **kwargs)
            return await http.post(url, **kwargs)
        except httpx.RequestError as exc:
            logger.warning(
                "Provider request failed",
                extra={
                    "provider": provider,
                    "endpoint": endpoint,
                    "error_type": exc.__class__.__name__,
                },
            )
            raise ProviderError(
                "temporarily_unavailable",
                f"{provider} {endpoint} request failed",
                status_code=503,
            ) from exc


def read_json(
    resp: Any,
    *,
    provider: str,
    endpoint: str,
    error: str = "invalid_token",
) -> dict[str, Any]:
    """Validate a profile response and return its JSON object body."""
    if resp.status_code != 200:
        logger.warning(
            "Provider endpoint returned non-200",
            extra={
                "provider": provider,
                "endpoint": endpoint,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            error,
            f"{provider} responded with a {resp.status_code} trying to fetch user information",
            status_code=resp.status_code,
        )

    try:
        payload = resp.json()
    except Exception as exc:
        logger.warning(
            "Provider endpoint returned invalid JSON",
            extra={
                "provider": provider,
                "endpoint": endpoint,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            error,
            f"{provider} {endpoint} response was invalid",
            status_code=resp.status_code,
        ) from exc

    if not isinstance(payload, dict):
        logger.warning(
            "Provider endpoint returned non-object JSON",
            extra={
                "provider": provider,
                "endpoint": endpoint,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            error,
            f"{provider} {endpoint} response was invalid",
            status_code=resp.status_code,
        )
    return payload


def read_json_array(
    resp: Any,
    *,
    provider: str,
    endpoint: str,
    error: str = "invalid_token",
) -> list[Any]:
    """Validate a response whose body is a JSON array (e.g. email listings)."""
    if resp.status_code != 200:
        logger.warning(
            "Provider endpoint returned non-200",
            extra={
                "provider": provider,
                "endpoint": endpoint,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            error,
            f"{provider} responded with a {resp.status_code} trying to fetch user information",
            status_code=resp.status_code,
        )
    try:
        payload = resp.json()
    except Exception as exc:
        raise ProviderError(
            error, f"{provider} {endpoint} response was invalid", status_code=resp.status_code
        ) from exc
    if not isinstance(payload, list):
        logger.warning(
            "Provider endpoint returned non-array JSON",
            extra={
                "provider": provider,
                "endpoint": endpoint,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            error, f"{provider} {endpoint} response was invalid", status_code=resp.status_code
        )
    return payload
