"""Google provider.

Google only issues a refresh token when ``access_type=offline`` is requested,
so the authorization URL always carries it. ``prompt``, ``hd`` (hosted domain)
and ``login_hint`` are optional.
"""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _GoogleUser(ResponseModel):
    sub: str | None = None
    id: str | None = None
    email: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None
    hd: str | None = None

    @property
    def resolved_user_id(self) -> str | None:
        # The OpenID userinfo endpoint returns "sub"; the legacy v2 endpoint "id".
        return self.sub or self.id


class GoogleProvider(OAuth2Provider):
    provider_name = "google"
    auth_url = "https://accounts.google.com/o/oauth2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    profile_url = "https://openidconnect.googleapis.com/v1/userinfo"
    default_scopes = ("openid", "email", "profile")

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.prompt: str | None = None
        self.hosted_domain: str | None = None
        self.login_hint: str | None = None

    def set_prompt(self, *prompts: str) -> None:
        """Set ``prompt`` (e.g. ``consent``, ``select_account``); values are space separated."""
        self.prompt = " ".join(prompts) if prompts else None

    def set_hosted_domain(self, domain: str) -> None:
        self.hosted_domain = domain or None

    def set_login_hint(self, login_hint: str) -> None:
        self.login_hint = login_hint or None

    def authorize_params(self) -> dict[str, str]:
        params = {"access_type": "offline"}
        if self.prompt:
            params["prompt"] = self.prompt
        if self.hosted_domain:
            params["hd"] = self.hosted_domain
        if self.login_hint:
            params["login_hint"] = self.login_hint
        return params

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _GoogleUser.model_validate(profile)
        return {
            "user_id": parsed.resolved_user_id,
            "email": parsed.email,
            "name": parsed.name,
            "first_name": parsed.given_name,
            "last_name": parsed.family_name,
            "nick_name": parsed.name,
            "avatar_url": parsed.picture,
        }
