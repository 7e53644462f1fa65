"""Yandex ID provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider

AVATAR_URL_TEMPLATE = "https://avatars.yandex.net/get-yapic/{avatar_id}/islands-200"


class _YandexUser(ResponseModel):
    id: str | None = None
    login: str | None = None
    default_email: str | None = None
    real_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    default_avatar_id: str | None = None
    is_avatar_empty: bool = False


class YandexProvider(OAuth2Provider):
    provider_name = "yandex"
    auth_url = "https://oauth.yandex.ru/authorize"
    token_url = "https://oauth.yandex.ru/token"
    profile_url = "https://login.yandex.ru/info?format=json"
    default_scopes = ("login:email", "login:info", "login:avatar")

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {"Authorization": f"OAuth {access_token}", "Accept": "application/json"}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _YandexUser.model_validate(profile)
        avatar_url = None
        if parsed.default_avatar_id and not parsed.is_avatar_empty:
            avatar_url = AVATAR_URL_TEMPLATE.format(avatar_id=parsed.default_avatar_id)
        return {
            "user_id": parsed.id,
            "nick_name": parsed.login,
            "email": parsed.default_email,
            "name": parsed.real_name,
            "first_name": parsed.first_name,
            "last_name": parsed.last_name,
            "avatar_url": avatar_url,
        }
