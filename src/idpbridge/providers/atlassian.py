"""Atlassian (Jira/Confluence cloud) account provider."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _ExtendedProfile(ResponseModel):
    location: str | None = None
    job_title: str | None = None


class _AtlassianProfile(ResponseModel):
    account_id: str | None = None
    name: str | None = None
    nickname: str | None = None
    email: str | None = None
    picture: str | None = None
    extended_profile: _ExtendedProfile = Field(default_factory=_ExtendedProfile)


class AtlassianProvider(OAuth2Provider):
    provider_name = "atlassian"
    auth_url = "https://auth.atlassian.com/authorize"
    token_url = "https://auth.atlassian.com/oauth/token"
    profile_url = "https://api.atlassian.com/me"
    default_scopes = ("read:me",)

    def authorize_params(self) -> dict[str, str]:
        # Atlassian 3LO requires the API audience and an explicit consent prompt.
        return {"audience": "api.atlassian.com", "prompt": "consent"}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _AtlassianProfile.model_validate(profile)
        return {
            "user_id": parsed.account_id,
            "name": parsed.name,
            "nick_name": parsed.nickname,
            "email": parsed.email,
            "avatar_url": parsed.picture,
            "location": parsed.extended_profile.location,
            "description": parsed.extended_profile.job_title,
        }
