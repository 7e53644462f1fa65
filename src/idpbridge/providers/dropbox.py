"""Dropbox provider (API v2)."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..http import read_json, send
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session


class _DropboxName(ResponseModel):
    display_name: str | None = None
    familiar_name: str | None = None
    given_name: str | None = None
    surname: str | None = None


class _DropboxAccount(ResponseModel):
    account_id: str | None = None
    email: str | None = None
    country: str | None = None
    profile_photo_url: str | None = None
    name: _DropboxName = Field(default_factory=_DropboxName)


class DropboxProvider(OAuth2Provider):
    provider_name = "dropbox"
    auth_url = "https://www.dropbox.com/oauth2/authorize"
    token_url = "https://api.dropboxapi.com/oauth2/token"
    profile_url = "https://api.dropboxapi.com/2/users/get_current_account"

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        # RPC-style endpoint: POST with no body.
        resp = await send(
            "POST",
            self.profile_url,
            provider=self.name,
            endpoint="profile",
            client=self.http_client,
            headers={"Authorization": f"Bearer {session.access_token}"},
        )
        return read_json(resp, provider=self.name, endpoint="profile")

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _DropboxAccount.model_validate(profile)
        return {
            "user_id": parsed.account_id,
            "email": parsed.email,
            "name": parsed.name.display_name,
            "first_name": parsed.name.given_name,
            "last_name": parsed.name.surname,
            "nick_name": parsed.name.familiar_name,
            "avatar_url": parsed.profile_photo_url,
            "location": parsed.country,
        }
