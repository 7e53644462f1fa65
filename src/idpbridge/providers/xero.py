"""Xero provider (OAuth 1.0a).

Xero distinguishes three application types:

- ``public``: HMAC-SHA1 signed with the consumer secret (default)
- ``private``: RSA-SHA1 signed with the application's private key
- ``partner``: RSA-SHA1, and access tokens can be renewed with
  :meth:`XeroProvider.refresh_oauth1_token`

The user profile is the first organisation of the connected Xero tenant.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from authlib.oauth1 import SIGNATURE_RSA_SHA1
from pydantic import Field

from ..contracts import ProviderError, Token
from ..http import send
from ..models import ResponseModel
from ..oauth1 import OAuth1Provider, OAuth1Session, read_form

logger = logging.getLogger(__name__)

METHOD_PUBLIC = "public"
METHOD_PRIVATE = "private"
METHOD_PARTNER = "partner"

# Renewed partner tokens are valid for thirty minutes.
PARTNER_TOKEN_LIFETIME = timedelta(minutes=30)


class _Organisation(ResponseModel):
    name: str | None = Field(default=None, alias="Name")
    legal_name: str | None = Field(default=None, alias="LegalName")
    organisation_type: str | None = Field(default=None, alias="OrganisationType")
    country_code: str | None = Field(default=None, alias="CountryCode")
    short_code: str | None = Field(default=None, alias="ShortCode")


class _OrganisationResponse(ResponseModel):
    organisations: list[_Organisation] = Field(default_factory=list, alias="Organisations")


class XeroProvider(OAuth1Provider):
    provider_name = "xero"
    request_token_url = "https://api.xero.com/oauth/RequestToken"
    authorize_url = "https://api.xero.com/oauth/Authorize"
    access_token_url = "https://api.xero.com/oauth/AccessToken"
    profile_url = "https://api.xero.com/api.xro/2.0/Organisation"

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *,
        method: str = METHOD_PUBLIC,
        private_key: str | None = None,
        private_key_path: str | None = None,
        user_agent: str = "",
        **kwargs: Any,
    ):
        super().__init__(client_key, secret, callback_url, **kwargs)
        if method not in (METHOD_PUBLIC, METHOD_PRIVATE, METHOD_PARTNER):
            raise ValueError(f"Unknown Xero method: {method}")
        self.method = method
        self.user_agent = f"{user_agent} (idpbridge-xero)".strip()
        if method != METHOD_PUBLIC:
            if private_key is None and private_key_path:
                private_key = Path(private_key_path).read_text()
            if not private_key:
                raise ValueError(f"Xero {method} applications require an RSA private key")
            self.signature_method = SIGNATURE_RSA_SHA1
            self.rsa_key = private_key

    def request_headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "User-Agent": self.user_agent}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        organisations = _OrganisationResponse.model_validate(profile).organisations
        if not organisations:
            raise ProviderError("invalid_token", f"{self.name} returned no organisation")
        org = organisations[0]
        return {
            "user_id": org.short_code,
            "name": org.name,
            "nick_name": org.legal_name,
            "description": org.organisation_type,
            "location": org.country_code,
        }

    async def refresh_oauth1_token(self, session: OAuth1Session) -> None:
        """Renew a partner application's access token in place."""
        if self.method != METHOD_PARTNER:
            raise ProviderError(
                "refresh_not_supported",
                "Refresh token is only provided by Xero for Partner Applications",
            )
        if not session.access_token or not session.session_handle:
            raise ProviderError("invalid_session", f"{self.name} session cannot be renewed")
        resp = await send(
            "POST",
            self.access_token_url,
            provider=self.name,
            endpoint="access_token",
            client=self.http_client,
            headers=self.request_headers(),
            data={"oauth_session_handle": session.session_handle},
            auth=self.signer(
                token=session.access_token, token_secret=session.access_token_secret
            ),
        )
        values = read_form(resp, provider=self.name, endpoint="access_token")
        session.apply_access_token(values)
        session.access_token_expires = datetime.now(timezone.utc) + PARTNER_TOKEN_LIFETIME
        logger.info("Renewed Xero partner access token", extra={"provider": self.name})

    async def refresh_token(self, refresh_token: str) -> Token:
        raise ProviderError(
            "refresh_not_supported",
            "Refresh token is only provided by Xero for Partner Applications",
        )
