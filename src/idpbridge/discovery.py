"""OpenID Connect discovery (``/.well-known/openid-configuration``)."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from .contracts import ProviderError
from .http import read_json, send
from .models import ResponseModel

logger = logging.getLogger(__name__)


class OIDCDiscoveryDocument(ResponseModel):
    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    userinfo_endpoint: str | None = None
    jwks_uri: str | None = None
    end_session_endpoint: str | None = None
    scopes_supported: list[str] | None = None


async def fetch_oidc_discovery(
    config_url: str,
    client: httpx.AsyncClient | None = None,
    *,
    provider: str = "openid-connect",
) -> OIDCDiscoveryDocument:
    """Load the issuer's endpoints.

    Transport and status failures surface from ``send``/``read_json``; a
    document without the authorization or token endpoint is a ``server_error``.
    """
    resp = await send("GET", config_url, provider=provider, endpoint="discovery", client=client)
    payload = read_json(resp, provider=provider, endpoint="discovery", error="server_error")
    try:
        return OIDCDiscoveryDocument.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "Discovery document lacks required endpoints",
            extra={"provider": provider, "url": config_url},
        )
        raise ProviderError(
            "server_error", f"{provider} discovery document is missing required endpoints"
        ) from exc
