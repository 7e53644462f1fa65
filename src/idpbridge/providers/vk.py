"""VK (VKontakte) provider.

VK returns the user's email in the token response, not in the profile, so the
session keeps it.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..contracts import ProviderError, Token, User
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session, stringify

API_VERSION = "5.131"
PROFILE_FIELDS = "photo_200,nickname"


class VKSession(OAuth2Session):
    email: str | None = None
    user_id: str | None = None

    def apply_token(self, token: Token) -> None:
        super().apply_token(token)
        self.email = token.extra("email")
        self.user_id = stringify(token.extra("user_id"))


class _VKUser(ResponseModel):
    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    nickname: str | None = None
    photo_200: str | None = None


class _VKUsers(ResponseModel):
    response: list[_VKUser] = Field(default_factory=list)


class VKProvider(OAuth2Provider):
    provider_name = "vk"
    auth_url = "https://oauth.vk.com/authorize"
    token_url = "https://oauth.vk.com/access_token"
    profile_url = "https://api.vk.com/method/users.get"
    base_scopes = ("email",)
    session_class = VKSession

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        return await self.get_json(
            self.profile_url,
            params={
                "fields": PROFILE_FIELDS,
                "access_token": session.access_token or "",
                "v": API_VERSION,
            },
        )

    def build_user(self, session: OAuth2Session, profile: dict[str, Any]) -> User:
        user = super().build_user(session, profile)
        if isinstance(session, VKSession) and session.email:
            return user.model_copy(update={"email": session.email})
        return user

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        users = _VKUsers.model_validate(profile).response
        if not users:
            raise ProviderError("invalid_token", f"{self.name} returned no user")
        user = users[0]
        full_name = " ".join(part for part in (user.first_name, user.last_name) if part)
        return {
            "user_id": stringify(user.id),
            "name": full_name or None,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "nick_name": user.nickname,
            "avatar_url": user.photo_200,
        }
