"""Strava provider."""

from __future__ import annotations

import json
from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, stringify


class _StravaAthlete(ResponseModel):
    id: int | None = None
    username: str | None = None
    firstname: str | None = None
    lastname: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    sex: str | None = None
    profile: str | None = None


class StravaProvider(OAuth2Provider):
    provider_name = "strava"
    auth_url = "https://www.strava.com/oauth/authorize"
    token_url = "https://www.strava.com/oauth/token"
    profile_url = "https://www.strava.com/api/v3/athlete"
    default_scopes = ("read",)
    scope_separator = ","
    token_in_query = True

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _StravaAthlete.model_validate(profile)
        full_name = " ".join(part for part in (parsed.firstname, parsed.lastname) if part)
        return {
            "user_id": stringify(parsed.id),
            "name": full_name or None,
            "first_name": parsed.firstname,
            "last_name": parsed.lastname,
            "nick_name": parsed.username,
            "avatar_url": parsed.profile,
            # Strava has no free-text bio or location; both are serialized as JSON.
            "description": json.dumps({"gender": parsed.sex or ""}),
            "location": json.dumps(
                {
                    "city": parsed.city or "",
                    "region": parsed.state or "",
                    "country": parsed.country or "",
                }
            ),
        }
