"""EVE Online SSO provider."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, stringify


class _EveCharacter(ResponseModel):
    character_id: int | None = Field(default=None, alias="CharacterID")
    character_name: str | None = Field(default=None, alias="CharacterName")
    owner_hash: str | None = Field(default=None, alias="CharacterOwnerHash")


class EveOnlineProvider(OAuth2Provider):
    provider_name = "eveonline"
    auth_url = "https://login.eveonline.com/oauth/authorize/"
    token_url = "https://login.eveonline.com/oauth/token"
    profile_url = "https://login.eveonline.com/oauth/verify"

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _EveCharacter.model_validate(profile)
        return {
            "user_id": stringify(parsed.character_id),
            "name": parsed.character_name,
            "nick_name": parsed.character_name,
        }
