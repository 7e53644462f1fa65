"""Dailymotion provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

_PROFILE_FIELDS = (
    "id,username,screenname,fullname,first_name,last_name,description,"
    "avatar_720_url,email,city"
)


class _DailymotionProfile(ResponseModel):
    id: str | None = None
    email: str | None = None
    fullname: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None
    description: str | None = None
    avatar_720_url: str | None = None
    city: str | None = None


class DailymotionProvider(OAuth2Provider):
    provider_name = "dailymotion"
    auth_url = "https://www.dailymotion.com/oauth/authorize"
    token_url = "https://www.dailymotion.com/oauth/token"
    profile_url = "https://api.dailymotion.com/me"
    base_scopes = ("email",)

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        return await self.get_json(
            self.profile_url,
            params={"access_token": session.access_token or "", "fields": _PROFILE_FIELDS},
        )

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _DailymotionProfile.model_validate(profile)
        return {
            "user_id": parsed.id,
            "email": parsed.email,
            "name": parsed.fullname,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "nick_name": parsed.username,
            "description": parsed.description,
            "avatar_url": parsed.avatar_720_url,
            "location": parsed.city,
        }
