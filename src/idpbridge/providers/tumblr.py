"""Tumblr provider (OAuth 1.0a)."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth1 import OAuth1Provider


class _TumblrUser(ResponseModel):
    name: str | None = None


class _TumblrResponse(ResponseModel):
    user: _TumblrUser = Field(default_factory=_TumblrUser)


class _TumblrInfo(ResponseModel):
    response: _TumblrResponse = Field(default_factory=_TumblrResponse)


class TumblrProvider(OAuth1Provider):
    provider_name = "tumblr"
    request_token_url = "https://www.tumblr.com/oauth/request_token"
    authorize_url = "https://www.tumblr.com/oauth/authorize"
    access_token_url = "https://www.tumblr.com/oauth/access_token"
    profile_url = "https://api.tumblr.com/v2/user/info"

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        user = _TumblrInfo.model_validate(profile).response.user
        return {"user_id": user.name, "name": user.name, "nick_name": user.name}
