"""Bitbucket Cloud provider.

The ``/2.0/user`` endpoint never includes an address, so the primary confirmed
email is looked up separately.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session


class _Link(ResponseModel):
    href: str | None = None


class _Links(ResponseModel):
    avatar: _Link = Field(default_factory=_Link)


class _BitbucketProfile(ResponseModel):
    uuid: str | None = None
    username: str | None = None
    nickname: str | None = None
    display_name: str | None = None
    location: str | None = None
    links: _Links = Field(default_factory=_Links)


class _BitbucketEmail(ResponseModel):
    email: str
    is_primary: bool = False
    is_confirmed: bool = False


class _BitbucketEmails(ResponseModel):
    values: list[_BitbucketEmail] = Field(default_factory=list)


class BitbucketProvider(OAuth2Provider):
    provider_name = "bitbucket"
    auth_url = "https://bitbucket.org/site/oauth2/authorize"
    token_url = "https://bitbucket.org/site/oauth2/access_token"
    profile_url = "https://api.bitbucket.org/2.0/user"
    email_url = "https://api.bitbucket.org/2.0/user/emails"

    async def extra_user_fields(
        self, session: OAuth2Session, profile: dict[str, Any]
    ) -> dict[str, Any]:
        emails = await self.get_json(
            self.email_url, access_token=session.access_token, endpoint="emails"
        )
        for entry in _BitbucketEmails.model_validate(emails).values:
            if entry.is_primary and entry.is_confirmed:
                return {"email": entry.email}
        return {}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _BitbucketProfile.model_validate(profile)
        return {
            "user_id": parsed.uuid,
            "name": parsed.display_name,
            "nick_name": parsed.username or parsed.nickname,
            "avatar_url": parsed.links.avatar.href,
            "location": parsed.location,
        }
