"""Generic OpenID Connect provider.

Endpoints are resolved lazily from the issuer's discovery document; the
first ``begin_auth``/``authorize``/``refresh_token`` call triggers it, or call
``ensure_ready()`` at startup. The user is built from the ``id_token`` claims,
merged with the userinfo response when the issuer publishes that endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

import jwt

from ..contracts import ProviderError, Token, User
from ..discovery import OIDCDiscoveryDocument, fetch_oidc_discovery
from ..oauth2 import OAuth2Provider, OAuth2Session

logger = logging.getLogger(__name__)

CLOCK_SKEW_SECONDS = 10

SUBJECT_CLAIM = "sub"
PREFERRED_USERNAME_CLAIM = "preferred_username"
EMAIL_CLAIM = "email"
NAME_CLAIM = "name"
NICKNAME_CLAIM = "nickname"
PICTURE_CLAIM = "picture"
GIVEN_NAME_CLAIM = "given_name"
FAMILY_NAME_CLAIM = "family_name"
ADDRESS_CLAIM = "address"


def _first_claim(claims: Mapping[str, Any], names: Sequence[str]) -> str | None:
    for name in names:
        value = claims.get(name)
        if isinstance(value, str) and value:
            return value
    return None


class OpenIDConnectProvider(OAuth2Provider):
    provider_name = "openid-connect"
    base_scopes = ("openid",)

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *scopes: str,
        discovery_url: str,
        id_claims: Sequence[str] = (SUBJECT_CLAIM,),
        preferred_username_claims: Sequence[str] = (PREFERRED_USERNAME_CLAIM,),
        email_claims: Sequence[str] = (EMAIL_CLAIM,),
        name_claims: Sequence[str] = (NAME_CLAIM,),
        **kwargs: Any,
    ):
        super().__init__(client_key, secret, callback_url, *scopes, **kwargs)
        self.discovery_url = discovery_url
        self.id_claims = list(id_claims)
        self.preferred_username_claims = list(preferred_username_claims)
        self.email_claims = list(email_claims)
        self.name_claims = list(name_claims)
        self.discovery: OIDCDiscoveryDocument | None = None
        if not self.id_claims:
            raise ValueError("id_claims must name at least one claim")

    async def ensure_ready(self) -> None:
        """Fetch the discovery document and populate endpoints. Repeated calls are no-ops."""
        if self.discovery is not None:
            return
        discovery = await fetch_oidc_discovery(
            self.discovery_url, client=self.http_client, provider=self.name
        )
        self.discovery = discovery
        self.auth_url = discovery.authorization_endpoint
        self.token_url = discovery.token_endpoint
        self.profile_url = discovery.userinfo_endpoint or ""
        self.config = self._new_config(self.config.scopes)
        logger.info("OIDC discovery completed for issuer %s", discovery.issuer)

    async def begin_auth(self, state: str) -> OAuth2Session:
        await self.ensure_ready()
        return await super().begin_auth(state)

    async def exchange(self, session: OAuth2Session, params: Mapping[str, str]) -> Token:
        await self.ensure_ready()
        return await super().exchange(session, params)

    async def refresh_token(self, refresh_token: str) -> Token:
        await self.ensure_ready()
        return await super().refresh_token(refresh_token)

    def decode_id_token(self, id_token: str) -> dict[str, Any]:
        """Decode the id_token payload, rejecting tokens past their ``exp``."""
        try:
            return jwt.decode(
                id_token,
                options={"verify_signature": False, "verify_exp": True},
                leeway=CLOCK_SKEW_SECONDS,
            )
        except jwt.ExpiredSignatureError as exc:
            raise ProviderError("invalid_token", "user info JWT token is expired") from exc
        except jwt.InvalidTokenError as exc:
            raise ProviderError("invalid_token", f"{self.name} id_token is invalid") from exc

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        if not session.id_token:
            raise ProviderError("invalid_token", f"{self.name} session has no id_token")
        claims = self.decode_id_token(session.id_token)
        if not self.profile_url:
            return claims

        userinfo = await self.get_json(
            self.profile_url, access_token=session.access_token, endpoint="userinfo"
        )
        # The userinfo "sub" must match the id_token "sub".
        if userinfo.get(SUBJECT_CLAIM) != claims.get(SUBJECT_CLAIM):
            logger.warning(
                "OIDC userinfo subject does not match id_token",
                extra={"provider": self.name, "endpoint": "userinfo"},
            )
            raise ProviderError("invalid_token", "userinfo subject does not match id_token")
        return {**claims, **userinfo}

    def build_user(self, session: OAuth2Session, profile: dict[str, Any]) -> User:
        user = super().build_user(session, profile)
        exp = profile.get("exp")
        if isinstance(exp, (int, float)):
            expiry = datetime.fromtimestamp(exp, tz=timezone.utc)
            if user.expires_at is None or expiry < user.expires_at:
                return user.model_copy(update={"expires_at": expiry})
        return user

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        user_id = _first_claim(profile, self.id_claims)
        if not user_id:
            raise ProviderError(
                "invalid_token", f"could not retrieve id claim for {self.id_claims}"
            )
        address = profile.get(ADDRESS_CLAIM)
        location = address.get("locality") if isinstance(address, dict) else None
        return {
            "user_id": user_id,
            "nick_name": _first_claim(profile, self.preferred_username_claims)
            or _first_claim(profile, (NICKNAME_CLAIM,)),
            "email": _first_claim(profile, self.email_claims),
            "name": _first_claim(profile, self.name_claims),
            "first_name": _first_claim(profile, (GIVEN_NAME_CLAIM,)),
            "last_name": _first_claim(profile, (FAMILY_NAME_CLAIM,)),
            "avatar_url": _first_claim(profile, (PICTURE_CLAIM,)),
            "location": location,
        }
