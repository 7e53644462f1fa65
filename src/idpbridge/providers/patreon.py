"""Patreon provider (API v2 identity endpoint)."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

SCOPE_IDENTITY = "identity"
SCOPE_IDENTITY_EMAIL = "identity[email]"
SCOPE_IDENTITY_MEMBERSHIPS = "identity.memberships"
SCOPE_CAMPAIGNS = "campaigns"

USER_FIELDS = "about,email,first_name,full_name,image_url,last_name,vanity"


class _PatreonAttributes(ResponseModel):
    email: str | None = None
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    vanity: str | None = None
    about: str | None = None
    image_url: str | None = None


class _PatreonData(ResponseModel):
    id: str | None = None
    attributes: _PatreonAttributes = Field(default_factory=_PatreonAttributes)


class _PatreonIdentity(ResponseModel):
    data: _PatreonData = Field(default_factory=_PatreonData)


class PatreonProvider(OAuth2Provider):
    provider_name = "patreon"
    auth_url = "https://www.patreon.com/oauth2/authorize"
    token_url = "https://www.patreon.com/api/oauth2/token"
    profile_url = "https://www.patreon.com/api/oauth2/v2/identity"
    base_scopes = (SCOPE_IDENTITY, SCOPE_IDENTITY_EMAIL)

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        return await self.get_json(
            self.profile_url,
            access_token=session.access_token,
            params={"fields[user]": USER_FIELDS},
        )

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        data = _PatreonIdentity.model_validate(profile).data
        return {
            "user_id": data.id,
            "name": data.attributes.full_name,
            "first_name": data.attributes.first_name,
            "last_name": data.attributes.last_name,
            "nick_name": data.attributes.vanity,
            "email": data.attributes.email,
            "description": data.attributes.about,
            "avatar_url": data.attributes.image_url,
        }
