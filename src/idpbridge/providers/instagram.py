"""Instagram Basic Display provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

PROFILE_FIELDS = "id,username,account_type,media_count"


class _InstagramUser(ResponseModel):
    id: str | None = None
    username: str | None = None
    name: str | None = None
    account_type: str | None = None
    media_count: int | None = None
    biography: str | None = None
    profile_picture_url: str | None = None


class InstagramProvider(OAuth2Provider):
    provider_name = "instagram"
    auth_url = "https://api.instagram.com/oauth/authorize/"
    token_url = "https://api.instagram.com/oauth/access_token"
    profile_url = "https://graph.instagram.com/me"
    default_scopes = ("user_profile",)
    scope_separator = ","

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        return await self.get_json(
            self.profile_url,
            params={"fields": PROFILE_FIELDS, "access_token": session.access_token or ""},
        )

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _InstagramUser.model_validate(profile)
        return {
            "user_id": parsed.id,
            "nick_name": parsed.username,
            "name": parsed.name,
            "description": parsed.biography,
            "avatar_url": parsed.profile_picture_url,
        }
