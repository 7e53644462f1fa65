"""Amazon Cognito user pool provider (hosted UI domain)."""

from __future__ import annotations

from typing import Any

from ..oauth2 import OAuth2Provider
from ._claims import user_fields_from_claims


class CognitoProvider(OAuth2Provider):
    provider_name = "cognito"
    default_scopes = ("openid", "email", "profile")

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *scopes: str,
        base_url: str,
        **kwargs: Any,
    ):
        self.base_url = base_url.rstrip("/")
        kwargs.setdefault("auth_url", f"{self.base_url}/oauth2/authorize")
        kwargs.setdefault("token_url", f"{self.base_url}/oauth2/token")
        kwargs.setdefault("profile_url", f"{self.base_url}/oauth2/userInfo")
        super().__init__(client_key, secret, callback_url, *scopes, **kwargs)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        return user_fields_from_claims(profile)
