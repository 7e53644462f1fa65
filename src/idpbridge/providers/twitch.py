"""Twitch provider (Helix API)."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..contracts import ProviderError
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider

SCOPE_USER_READ_EMAIL = "user:read:email"


class _TwitchUser(ResponseModel):
    id: str | None = None
    login: str | None = None
    display_name: str | None = None
    description: str | None = None
    profile_image_url: str | None = None
    email: str | None = None


class _TwitchUsers(ResponseModel):
    data: list[_TwitchUser] = Field(default_factory=list)


class TwitchProvider(OAuth2Provider):
    provider_name = "twitch"
    auth_url = "https://id.twitch.tv/oauth2/authorize"
    token_url = "https://id.twitch.tv/oauth2/token"
    profile_url = "https://api.twitch.tv/helix/users"
    default_scopes = (SCOPE_USER_READ_EMAIL,)

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Client-Id": self.client_key,
            "Accept": "application/json",
        }

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        users = _TwitchUsers.model_validate(profile).data
        if not users:
            raise ProviderError("invalid_token", f"{self.name} returned no user")
        user = users[0]
        return {
            "user_id": user.id,
            "name": user.login,
            "nick_name": user.display_name,
            "email": user.email,
            "description": user.description,
            "avatar_url": user.profile_image_url,
        }
