"""Microsoft identity platform (v2.0 endpoint) with Microsoft Graph profile."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _GraphUser(ResponseModel):
    id: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    given_name: str | None = Field(default=None, alias="givenName")
    surname: str | None = None
    mail: str | None = None
    user_principal_name: str | None = Field(default=None, alias="userPrincipalName")
    office_location: str | None = Field(default=None, alias="officeLocation")
    job_title: str | None = Field(default=None, alias="jobTitle")


class MicrosoftOnlineProvider(OAuth2Provider):
    provider_name = "microsoftonline"
    profile_url = "https://graph.microsoft.com/v1.0/me"
    default_scopes = ("openid", "offline_access", "user.read")

    def __init__(self, *args: Any, tenant: str = "common", **kwargs: Any):
        self.tenant = tenant
        base = f"https://login.microsoftonline.com/{tenant}/oauth2/v2.0"
        kwargs.setdefault("auth_url", f"{base}/authorize")
        kwargs.setdefault("token_url", f"{base}/token")
        super().__init__(*args, **kwargs)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _GraphUser.model_validate(profile)
        return {
            "user_id": parsed.id,
            "name": parsed.display_name,
            "first_name": parsed.given_name,
            "last_name": parsed.surname,
            "nick_name": parsed.user_principal_name,
            # Personal accounts often leave "mail" empty.
            "email": parsed.mail or parsed.user_principal_name,
            "description": parsed.job_title,
            "location": parsed.office_location,
        }
