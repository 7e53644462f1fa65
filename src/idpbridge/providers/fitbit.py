"""Fitbit provider."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import AuthStyle, OAuth2Provider


class _FitbitUser(ResponseModel):
    encoded_id: str | None = Field(default=None, alias="encodedId")
    full_name: str | None = Field(default=None, alias="fullName")
    display_name: str | None = Field(default=None, alias="displayName")
    avatar: str | None = None
    country: str | None = None
    about_me: str | None = Field(default=None, alias="aboutMe")


class _FitbitProfile(ResponseModel):
    user: _FitbitUser = Field(default_factory=_FitbitUser)


class FitbitProvider(OAuth2Provider):
    provider_name = "fitbit"
    auth_url = "https://www.fitbit.com/oauth2/authorize"
    token_url = "https://api.fitbit.com/oauth2/token"
    profile_url = "https://api.fitbit.com/1/user/-/profile.json"
    base_scopes = ("profile",)
    auth_style = AuthStyle.IN_HEADER

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        user = _FitbitProfile.model_validate(profile).user
        return {
            "user_id": user.encoded_id,
            "name": user.full_name,
            "nick_name": user.display_name,
            "description": user.about_me,
            "avatar_url": user.avatar,
            "location": user.country,
        }
