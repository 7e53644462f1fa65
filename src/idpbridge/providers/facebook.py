"""Facebook Login provider (Graph API)."""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Sequence
from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

DEFAULT_FIELDS = (
    "email",
    "first_name",
    "last_name",
    "link",
    "bio",
    "id",
    "name",
    "picture",
    "location",
)


class _PictureData(ResponseModel):
    url: str | None = None


class _Picture(ResponseModel):
    data: _PictureData = Field(default_factory=_PictureData)


class _Location(ResponseModel):
    name: str | None = None


class _FacebookProfile(ResponseModel):
    id: str | None = None
    email: str | None = None
    bio: str | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    link: str | None = None
    picture: _Picture = Field(default_factory=_Picture)
    location: _Location = Field(default_factory=_Location)


class FacebookProvider(OAuth2Provider):
    provider_name = "facebook"
    auth_url = "https://www.facebook.com/dialog/oauth"
    token_url = "https://graph.facebook.com/oauth/access_token"
    profile_url = "https://graph.facebook.com/me"
    base_scopes = ("email",)

    def __init__(self, *args: Any, fields: Sequence[str] | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.fields = list(fields or DEFAULT_FIELDS)

    def set_custom_fields(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        token = session.access_token or ""
        # appsecret_proof binds the call to this app's secret.
        proof = hmac.new(self.secret.encode(), token.encode(), hashlib.sha256).hexdigest()
        return await self.get_json(
            self.profile_url,
            params={
                "access_token": token,
                "appsecret_proof": proof,
                "fields": ",".join(self.fields),
            },
        )

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _FacebookProfile.model_validate(profile)
        return {
            "user_id": parsed.id,
            "email": parsed.email,
            "name": parsed.name,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "nick_name": parsed.name,
            "description": parsed.bio,
            "avatar_url": parsed.picture.data.url,
            "location": parsed.location.name,
        }
