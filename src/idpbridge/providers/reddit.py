"""Reddit provider.

Reddit throttles or rejects API calls without a descriptive User-Agent. Pass
``user_agent`` in the ``<platform>:<app id>:<version> (by /u/<user>)`` form;
the default only identifies the library.
"""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import AuthStyle, OAuth2Provider

DEFAULT_USER_AGENT = "idpbridge:reddit-login:v0.1.0"


class _RedditUser(ResponseModel):
    id: str | None = None
    name: str | None = None
    icon_img: str | None = None


class RedditProvider(OAuth2Provider):
    provider_name = "reddit"
    auth_url = "https://www.reddit.com/api/v1/authorize"
    token_url = "https://www.reddit.com/api/v1/access_token"
    profile_url = "https://oauth.reddit.com/api/v1/me"
    default_scopes = ("identity",)
    auth_style = AuthStyle.IN_HEADER

    def __init__(
        self,
        *args: Any,
        user_agent: str = DEFAULT_USER_AGENT,
        duration: str = "permanent",
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.user_agent = user_agent
        self.duration = duration

    def authorize_params(self) -> dict[str, str]:
        return {"duration": self.duration}

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _RedditUser.model_validate(profile)
        return {
            "user_id": parsed.id,
            "name": parsed.name,
            "nick_name": parsed.name,
            "avatar_url": parsed.icon_img,
        }
