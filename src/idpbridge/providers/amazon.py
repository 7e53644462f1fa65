"""Login with Amazon."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider


class _AmazonProfile(ResponseModel):
    user_id: str | None = None
    name: str | None = None
    email: str | None = None
    postal_code: str | None = None


class AmazonProvider(OAuth2Provider):
    provider_name = "amazon"
    auth_url = "https://www.amazon.com/ap/oa"
    token_url = "https://api.amazon.com/auth/o2/token"
    profile_url = "https://api.amazon.com/user/profile"
    token_in_query = True
    default_scopes = ("profile", "postal_code")

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _AmazonProfile.model_validate(profile)
        return {
            "user_id": parsed.user_id,
            "name": parsed.name,
            "email": parsed.email,
            "location": parsed.postal_code,
        }
