"""Nextcloud provider for a self-hosted server."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _NextcloudData(ResponseModel):
    id: str | None = None
    email: str | None = None
    display_name: str | None = Field(default=None, alias="display-name")
    address: str | None = None


class _NextcloudOcs(ResponseModel):
    data: _NextcloudData = Field(default_factory=_NextcloudData)


class _NextcloudProfile(ResponseModel):
    ocs: _NextcloudOcs = Field(default_factory=_NextcloudOcs)


class NextcloudProvider(OAuth2Provider):
    provider_name = "nextcloud"

    def __init__(self, *args: Any, server_url: str, **kwargs: Any):
        self.server_url = server_url.rstrip("/")
        kwargs.setdefault("auth_url", f"{self.server_url}/apps/oauth2/authorize")
        kwargs.setdefault("token_url", f"{self.server_url}/apps/oauth2/api/v1/token")
        kwargs.setdefault("profile_url", f"{self.server_url}/ocs/v2.php/cloud/user?format=json")
        super().__init__(*args, **kwargs)

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "OCS-APIRequest": "true",
        }

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        data = _NextcloudProfile.model_validate(profile).ocs.data
        return {
            "user_id": data.id,
            "email": data.email,
            "name": data.display_name,
            "nick_name": data.id,
            "location": data.address,
        }
