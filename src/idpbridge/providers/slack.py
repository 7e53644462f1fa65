"""Slack provider.

``auth.test`` identifies the user; with the ``users:read`` scope the full
profile is then read from ``users.info``. Slack answers API errors with HTTP
200 and ``"ok": false``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field

from ..contracts import ProviderError
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

logger = logging.getLogger(__name__)

SCOPE_USER_READ = "users:read"


class _AuthTest(ResponseModel):
    ok: bool = False
    error: str | None = None
    user_id: str | None = None
    user: str | None = None
    team_id: str | None = None


class _SlackUserProfile(ResponseModel):
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    real_name: str | None = None
    title: str | None = None
    image_192: str | None = None


class _SlackUser(ResponseModel):
    id: str | None = None
    name: str | None = None
    real_name: str | None = None
    tz: str | None = None
    profile: _SlackUserProfile = Field(default_factory=_SlackUserProfile)


class _UsersInfo(ResponseModel):
    ok: bool = False
    error: str | None = None
    user: _SlackUser = Field(default_factory=_SlackUser)


class SlackProvider(OAuth2Provider):
    provider_name = "slack"
    auth_url = "https://slack.com/oauth/authorize"
    token_url = "https://slack.com/api/oauth.access"
    profile_url = "https://slack.com/api/auth.test"
    users_info_url = "https://slack.com/api/users.info"
    default_scopes = (SCOPE_USER_READ,)

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        identity = await self.get_json(self.profile_url, access_token=session.access_token)
        auth_test = _AuthTest.model_validate(identity)
        self._raise_for_slack_error(auth_test.ok, auth_test.error, "auth.test")
        if SCOPE_USER_READ not in self.config.scopes:
            return identity

        info = await self.get_json(
            self.users_info_url,
            access_token=session.access_token,
            params={"user": auth_test.user_id or ""},
            endpoint="users.info",
        )
        users_info = _UsersInfo.model_validate(info)
        self._raise_for_slack_error(users_info.ok, users_info.error, "users.info")
        return info

    def _raise_for_slack_error(self, ok: bool, error: str | None, endpoint: str) -> None:
        if ok:
            return
        logger.warning(
            "Slack API call returned ok=false",
            extra={"provider": self.name, "endpoint": endpoint, "provider_error": error},
        )
        raise ProviderError(error or "invalid_token", f"{self.name} {endpoint} failed: {error}")

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        if "user" in profile and isinstance(profile["user"], dict):
            user = _UsersInfo.model_validate(profile).user
            return {
                "user_id": user.id,
                "nick_name": user.name,
                "name": user.real_name or user.profile.real_name,
                "first_name": user.profile.first_name,
                "last_name": user.profile.last_name,
                "email": user.profile.email,
                "description": user.profile.title,
                "avatar_url": user.profile.image_192,
                "location": user.tz,
            }
        identity = _AuthTest.model_validate(profile)
        return {"user_id": identity.user_id, "nick_name": identity.user}
