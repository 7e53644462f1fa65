"""Auth0 tenant provider; endpoints are derived from the tenant domain."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _Auth0Profile(ResponseModel):
    user_id: str | None = None
    sub: str | None = None
    email: str | None = None
    name: str | None = None
    nickname: str | None = None
    picture: str | None = None


class Auth0Provider(OAuth2Provider):
    provider_name = "auth0"
    default_scopes = ("profile", "openid")

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *scopes: str,
        domain: str,
        **kwargs: Any,
    ):
        self.domain = domain.removeprefix("https://").rstrip("/")
        base = f"https://{self.domain}"
        kwargs.setdefault("auth_url", f"{base}/oauth/authorize")
        kwargs.setdefault("token_url", f"{base}/oauth/token")
        kwargs.setdefault("profile_url", f"{base}/userinfo")
        super().__init__(client_key, secret, callback_url, *scopes, **kwargs)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _Auth0Profile.model_validate(profile)
        return {
            "user_id": parsed.user_id or parsed.sub,
            "email": parsed.email,
            "name": parsed.name,
            "nick_name": parsed.nickname,
            "avatar_url": parsed.picture,
        }
