"""Gitee provider."""

from __future__ import annotations

from typing import Any

from pydantic import Field, TypeAdapter

from ..http import read_json_array, send
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session, stringify

EMAIL_SCOPES = {"user", "emails"}


class _GiteeUser(ResponseModel):
    id: int | str | None = None
    login: str | None = None
    name: str | None = None
    email: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    blog: str | None = None


class _GiteeEmail(ResponseModel):
    email: str
    state: str | None = None
    scope: list[str] = Field(default_factory=list)


_EMAILS = TypeAdapter(list[_GiteeEmail])


class GiteeProvider(OAuth2Provider):
    provider_name = "gitee"
    auth_url = "https://gitee.com/oauth/authorize"
    token_url = "https://gitee.com/oauth/token"
    profile_url = "https://gitee.com/api/v5/user"
    email_url = "https://gitee.com/api/v5/emails"
    default_scopes = ("user_info",)

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        return await self.get_json(
            self.profile_url, params={"access_token": session.access_token or ""}
        )

    async def extra_user_fields(
        self, session: OAuth2Session, profile: dict[str, Any]
    ) -> dict[str, Any]:
        if profile.get("email") or not EMAIL_SCOPES.intersection(self.config.scopes):
            return {}
        resp = await send(
            "GET",
            self.email_url,
            provider=self.name,
            endpoint="emails",
            client=self.http_client,
            params={"access_token": session.access_token or ""},
        )
        emails = _EMAILS.validate_python(
            read_json_array(resp, provider=self.name, endpoint="emails")
        )
        for entry in emails:
            if "primary" in entry.scope:
                return {"email": entry.email}
        return {}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _GiteeUser.model_validate(profile)
        return {
            "user_id": stringify(parsed.id),
            "nick_name": parsed.login,
            "name": parsed.name,
            "email": parsed.email,
            "description": parsed.bio,
            "avatar_url": parsed.avatar_url,
        }
