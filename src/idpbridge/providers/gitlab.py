"""GitLab provider; self-managed instances use ``GitLabProvider.with_urls``."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, stringify


class _GitLabUser(ResponseModel):
    id: int | str | None = None
    username: str | None = None
    name: str | None = None
    email: str | None = None
    avatar_url: str | None = None
    location: str | None = None
    bio: str | None = None


class GitLabProvider(OAuth2Provider):
    provider_name = "gitlab"
    auth_url = "https://gitlab.com/oauth/authorize"
    token_url = "https://gitlab.com/oauth/token"
    profile_url = "https://gitlab.com/api/v4/user"
    default_scopes = ("read_user",)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _GitLabUser.model_validate(profile)
        return {
            "user_id": stringify(parsed.id),
            "nick_name": parsed.username,
            "name": parsed.name,
            "email": parsed.email,
            "avatar_url": parsed.avatar_url,
            "location": parsed.location,
            "description": parsed.bio,
        }
