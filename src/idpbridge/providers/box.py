"""Box provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, stringify


class _BoxProfile(ResponseModel):
    id: str | int | None = None
    name: str | None = None
    login: str | None = None
    address: str | None = None
    avatar_url: str | None = None


class BoxProvider(OAuth2Provider):
    provider_name = "box"
    auth_url = "https://app.box.com/api/oauth2/authorize"
    token_url = "https://app.box.com/api/oauth2/token"
    profile_url = "https://api.box.com/2.0/users/me"

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _BoxProfile.model_validate(profile)
        return {
            "user_id": stringify(parsed.id),
            "email": parsed.login,
            "name": parsed.name,
            "nick_name": parsed.name,
            "location": parsed.address,
            "avatar_url": parsed.avatar_url,
        }
