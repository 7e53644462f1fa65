"""Okta org authorization server provider."""

from __future__ import annotations

from typing import Any

from ..oauth2 import OAuth2Provider
from ._claims import user_fields_from_claims


class OktaProvider(OAuth2Provider):
    provider_name = "okta"
    default_scopes = ("openid", "profile", "email")

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *scopes: str,
        org_url: str,
        **kwargs: Any,
    ):
        self.org_url = org_url.rstrip("/")
        kwargs.setdefault("auth_url", f"{self.org_url}/oauth2/v1/authorize")
        kwargs.setdefault("token_url", f"{self.org_url}/oauth2/v1/token")
        kwargs.setdefault("profile_url", f"{self.org_url}/oauth2/v1/userinfo")
        super().__init__(client_key, secret, callback_url, *scopes, **kwargs)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        return user_fields_from_claims(profile)
