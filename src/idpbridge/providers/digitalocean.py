"""DigitalOcean provider."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _Account(ResponseModel):
    email: str | None = None
    uuid: str | None = None
    email_verified: bool = False
    status: str | None = None


class _DigitalOceanProfile(ResponseModel):
    account: _Account = Field(default_factory=_Account)


class DigitalOceanProvider(OAuth2Provider):
    provider_name = "digitalocean"
    auth_url = "https://cloud.digitalocean.com/v1/oauth/authorize"
    token_url = "https://cloud.digitalocean.com/v1/oauth/token"
    profile_url = "https://api.digitalocean.com/v2/account"
    default_scopes = ("read",)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        account = _DigitalOceanProfile.model_validate(profile).account
        return {"user_id": account.uuid, "email": account.email}
