"""Discord provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider

AVATAR_BASE_URL = "https://media.discordapp.net/avatars"


class _DiscordProfile(ResponseModel):
    id: str | None = None
    username: str | None = None
    email: str | None = None
    avatar: str | None = None
    verified: bool = False


class DiscordProvider(OAuth2Provider):
    provider_name = "discord"
    auth_url = "https://discord.com/api/oauth2/authorize"
    token_url = "https://discord.com/api/oauth2/token"
    profile_url = "https://discord.com/api/users/@me"
    default_scopes = ("identify",)

    def __init__(self, *args: Any, permissions: str | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.permissions = permissions

    def set_permissions(self, permissions: str) -> None:
        """Bot permissions requested alongside the ``bot`` scope."""
        self.permissions = permissions

    def authorize_params(self) -> dict[str, str]:
        params = {"prompt": "none"}
        if self.permissions:
            params["permissions"] = self.permissions
        return params

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _DiscordProfile.model_validate(profile)
        avatar_url = None
        if parsed.avatar:
            # Animated avatars are served as gifs.
            extension = ".gif" if parsed.avatar.startswith("a_") else ".jpg"
            avatar_url = f"{AVATAR_BASE_URL}/{parsed.id}/{parsed.avatar}{extension}"
        return {
            "user_id": parsed.id,
            "name": parsed.username,
            "email": parsed.email,
            "avatar_url": avatar_url,
        }
