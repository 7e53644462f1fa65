"""Standard OpenID Connect userinfo claims shared by OIDC-style providers."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel


class StandardClaims(ResponseModel):
    sub: str | None = None
    email: str | None = None
    name: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    nickname: str | None = None
    preferred_username: str | None = None
    picture: str | None = None
    address: str | dict[str, Any] | None = None
    locale: str | None = None


def user_fields_from_claims(claims: dict[str, Any]) -> dict[str, Any]:
    parsed = StandardClaims.model_validate(claims)
    location = parsed.address
    if isinstance(location, dict):
        location = location.get("locality") or location.get("formatted")
    return {
        "user_id": parsed.sub,
        "email": parsed.email,
        "name": parsed.name,
        "first_name": parsed.given_name,
        "last_name": parsed.family_name,
        "nick_name": parsed.nickname or parsed.preferred_username,
        "avatar_url": parsed.picture,
        "location": location,
    }
