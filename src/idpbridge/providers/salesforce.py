"""Salesforce provider.

The token response carries an ``id`` field with the caller's identity URL;
the profile is read from there rather than from a fixed endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..contracts import ProviderError, Token
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session


class SalesforceSession(OAuth2Session):
    identity_url: str | None = None
    instance_url: str | None = None

    def apply_token(self, token: Token) -> None:
        super().apply_token(token)
        self.identity_url = token.extra("id")
        self.instance_url = token.extra("instance_url")


class _Photos(ResponseModel):
    picture: str | None = None
    thumbnail: str | None = None


class _SalesforceIdentity(ResponseModel):
    user_id: str | None = None
    display_name: str | None = None
    nick_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    addr_country: str | None = None
    photos: _Photos = Field(default_factory=_Photos)


class SalesforceProvider(OAuth2Provider):
    provider_name = "salesforce"
    auth_url = "https://login.salesforce.com/services/oauth2/authorize"
    token_url = "https://login.salesforce.com/services/oauth2/token"
    session_class = SalesforceSession

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        identity_url = getattr(session, "identity_url", None)
        if not identity_url:
            raise ProviderError(
                "invalid_session", f"{self.name} session has no identity URL"
            )
        return await self.get_json(identity_url, access_token=session.access_token)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _SalesforceIdentity.model_validate(profile)
        return {
            "user_id": parsed.user_id,
            "name": parsed.display_name,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "nick_name": parsed.nick_name,
            "email": parsed.email,
            "location": parsed.addr_country,
            "avatar_url": parsed.photos.picture,
        }
