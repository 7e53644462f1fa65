"""Zoom provider.

Zoom authenticates the client with HTTP Basic at the token endpoint and
accepts a PKCE ``code_verifier`` passed through the callback params.
"""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import AuthStyle, OAuth2Provider


class _ZoomUser(ResponseModel):
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    pic_url: str | None = None
    location: str | None = None


class ZoomProvider(OAuth2Provider):
    provider_name = "zoom"
    auth_url = "https://zoom.us/oauth/authorize"
    token_url = "https://zoom.us/oauth/token"
    profile_url = "https://zoom.us/v2/users/me"
    auth_style = AuthStyle.IN_HEADER

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _ZoomUser.model_validate(profile)
        return {
            "user_id": parsed.id,
            "name": f"{parsed.first_name or ''} {parsed.last_name or ''}".strip() or None,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "email": parsed.email,
            "avatar_url": parsed.pic_url,
            "location": parsed.location,
        }
