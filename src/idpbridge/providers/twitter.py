"""Twitter provider (OAuth 1.0a).

Pass ``authenticate=True`` to use the "Sign in with Twitter" URL, which skips
the authorization prompt for users who already approved the app.
"""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth1 import OAuth1Provider, OAuth1Session


class _TwitterUser(ResponseModel):
    id_str: str | None = None
    name: str | None = None
    screen_name: str | None = None
    description: str | None = None
    profile_image_url: str | None = None
    location: str | None = None
    email: str | None = None


class TwitterProvider(OAuth1Provider):
    provider_name = "twitter"
    request_token_url = "https://api.twitter.com/oauth/request_token"
    authorize_url = "https://api.twitter.com/oauth/authorize"
    authenticate_url = "https://api.twitter.com/oauth/authenticate"
    access_token_url = "https://api.twitter.com/oauth/access_token"
    profile_url = "https://api.twitter.com/1.1/account/verify_credentials.json"

    async def fetch_profile(self, session: OAuth1Session) -> dict[str, Any]:
        return await self.signed_get_json(
            self.profile_url, session, params={"include_email": "true"}
        )

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _TwitterUser.model_validate(profile)
        return {
            "user_id": parsed.id_str,
            "name": parsed.name,
            "nick_name": parsed.screen_name,
            "email": parsed.email,
            "description": parsed.description,
            "avatar_url": parsed.profile_image_url,
            "location": parsed.location,
        }
