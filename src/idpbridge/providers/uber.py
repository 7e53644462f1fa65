"""Uber provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _UberUser(ResponseModel):
    uuid: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    picture: str | None = None


class UberProvider(OAuth2Provider):
    provider_name = "uber"
    auth_url = "https://login.uber.com/oauth/authorize"
    token_url = "https://login.uber.com/oauth/token"
    profile_url = "https://api.uber.com/v1/me"
    default_scopes = ("profile",)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _UberUser.model_validate(profile)
        return {
            "user_id": parsed.uuid,
            "name": parsed.first_name,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "email": parsed.email,
            "avatar_url": parsed.picture,
        }
