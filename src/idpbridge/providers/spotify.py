"""Spotify provider."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider

SCOPE_USER_READ_EMAIL = "user-read-email"
SCOPE_USER_READ_PRIVATE = "user-read-private"
SCOPE_PLAYLIST_READ_PRIVATE = "playlist-read-private"
SCOPE_USER_LIBRARY_READ = "user-library-read"


class _SpotifyImage(ResponseModel):
    url: str | None = None


class _SpotifyUser(ResponseModel):
    id: str | None = None
    display_name: str | None = None
    email: str | None = None
    country: str | None = None
    images: list[_SpotifyImage] = Field(default_factory=list)


class SpotifyProvider(OAuth2Provider):
    provider_name = "spotify"
    auth_url = "https://accounts.spotify.com/authorize"
    token_url = "https://accounts.spotify.com/api/token"
    profile_url = "https://api.spotify.com/v1/me"
    base_scopes = (SCOPE_USER_READ_EMAIL, SCOPE_USER_READ_PRIVATE)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _SpotifyUser.model_validate(profile)
        return {
            "user_id": parsed.id,
            "name": parsed.display_name,
            "nick_name": parsed.display_name,
            "email": parsed.email,
            "location": parsed.country,
            "avatar_url": parsed.images[0].url if parsed.images else None,
        }
