"""LinkedIn provider.

The profile endpoint needs the ``r_basicprofile`` and ``r_emailaddress``
scopes to be granted to the application.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider

PROFILE_URL = (
    "https://api.linkedin.com/v1/people/"
    "~:(id,first-name,last-name,headline,location:(name),picture-url,email-address)"
)


class _Location(ResponseModel):
    name: str | None = None


class _LinkedInProfile(ResponseModel):
    id: str | None = None
    email: str | None = Field(default=None, alias="emailAddress")
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    headline: str | None = None
    picture_url: str | None = Field(default=None, alias="pictureUrl")
    location: _Location = Field(default_factory=_Location)


class LinkedInProvider(OAuth2Provider):
    provider_name = "linkedin"
    auth_url = "https://www.linkedin.com/uas/oauth2/authorization"
    token_url = "https://www.linkedin.com/uas/oauth2/accessToken"
    profile_url = PROFILE_URL
    default_scopes = ("r_basicprofile", "r_emailaddress")

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "x-li-format": "json"}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _LinkedInProfile.model_validate(profile)
        full_name = " ".join(part for part in (parsed.first_name, parsed.last_name) if part)
        return {
            "user_id": parsed.id,
            "name": full_name or None,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "nick_name": parsed.first_name,
            "email": parsed.email,
            "description": parsed.headline,
            "avatar_url": parsed.picture_url,
            "location": parsed.location.name,
        }
