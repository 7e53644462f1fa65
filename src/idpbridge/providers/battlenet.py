"""Blizzard Battle.net provider."""

from __future__ import annotations

from typing import Any

from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, stringify


class _BattlenetProfile(ResponseModel):
    id: int | str | None = None
    battletag: str | None = None


class BattlenetProvider(OAuth2Provider):
    provider_name = "battlenet"
    auth_url = "https://us.battle.net/oauth/authorize"
    token_url = "https://us.battle.net/oauth/token"
    profile_url = "https://us.api.battle.net/account/user"
    token_in_query = True

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        parsed = _BattlenetProfile.model_validate(profile)
        return {"user_id": stringify(parsed.id), "nick_name": parsed.battletag}
