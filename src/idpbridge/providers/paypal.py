"""PayPal (Log in with PayPal) provider.

The sandbox endpoints are used when ``environment="sandbox"`` is passed or,
failing that, when the ``PAYPAL_ENV`` environment variable says so.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

SANDBOX_BASE_URL = "https://www.sandbox.paypal.com/webapps/auth/protocol/openidconnect/v1"
PRODUCTION_BASE_URL = "https://www.paypal.com/webapps/auth/protocol/openidconnect/v1"


class _PayPalAddress(ResponseModel):
    locality: str | None = None
    country: str | None = None


class _PayPalUser(ResponseModel):
    user_id: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    email: str | None = None
    picture: str | None = None
    address: _PayPalAddress = Field(default_factory=_PayPalAddress)


class PayPalProvider(OAuth2Provider):
    provider_name = "paypal"
    default_scopes = ("profile", "email")

    def __init__(self, *args: Any, environment: str | None = None, **kwargs: Any):
        self.environment = environment or os.environ.get("PAYPAL_ENV", "production")
        base = SANDBOX_BASE_URL if self.environment == "sandbox" else PRODUCTION_BASE_URL
        kwargs.setdefault("auth_url", f"{base}/authorize")
        kwargs.setdefault("token_url", f"{base}/tokenservice")
        kwargs.setdefault("profile_url", f"{base}/userinfo")
        super().__init__(*args, **kwargs)

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        return await self.get_json(
            self.profile_url, access_token=session.access_token, params={"schema": "openid"}
        )

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _PayPalUser.model_validate(profile)
        return {
            "user_id": parsed.user_id,
            "name": parsed.name,
            "first_name": parsed.given_name,
            "last_name": parsed.family_name,
            "email": parsed.email,
            "avatar_url": parsed.picture,
            "location": parsed.address.locality,
        }
