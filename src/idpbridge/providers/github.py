"""GitHub OAuth App provider.

GitHub Enterprise installations can be targeted with
``GitHubProvider.with_urls(...)``; the emails endpoint is derived from the
profile URL.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter

from ..http import read_json_array, send
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session, stringify

EMAIL_SCOPES = {"user", "user:email"}


class _GitHubUserResponse(ResponseModel):
    """Minimal ``/user`` response used to normalize the profile."""

    id: int | str | None = None
    login: str | None = None
    email: str | None = None
    name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    location: str | None = None


class _GitHubEmail(ResponseModel):
    email: str
    primary: bool = False
    verified: bool = False


_EMAILS = TypeAdapter(list[_GitHubEmail])


class GitHubProvider(OAuth2Provider):
    provider_name = "github"
    auth_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    profile_url = "https://api.github.com/user"
    # GitHub OAuth App tokens do not expire and carry no refresh token.
    refresh_supported = False

    @property
    def email_url(self) -> str:
        return f"{self.profile_url.rstrip('/')}/emails"

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github+json",
        }

    async def extra_user_fields(
        self, session: OAuth2Session, profile: dict[str, Any]
    ) -> dict[str, Any]:
        if profile.get("email") or not EMAIL_SCOPES.intersection(self.config.scopes):
            return {}
        email = await self._primary_email(session.access_token or "")
        return {"email": email} if email else {}

    async def _primary_email(self, access_token: str) -> str | None:
        for entry in await self._get_emails(access_token):
            if entry.primary and entry.verified:
                return entry.email
        return None

    async def _get_emails(self, access_token: str) -> list[_GitHubEmail]:
        resp = await send(
            "GET",
            self.email_url,
            provider=self.name,
            endpoint="emails",
            client=self.http_client,
            headers=self.profile_headers(access_token),
        )
        payload = read_json_array(resp, provider=self.name, endpoint="emails")
        return _EMAILS.validate_python(payload)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _GitHubUserResponse.model_validate(profile)
        return {
            "user_id": stringify(parsed.id),
            "nick_name": parsed.login,
            "name": parsed.name,
            "email": parsed.email,
            "description": parsed.bio,
            "avatar_url": parsed.avatar_url,
            "location": parsed.location,
        }
