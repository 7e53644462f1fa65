"""Sign in with Apple.

Apple's client secret is a short-lived ES256 JWT signed with the team's
private key; build it with :func:`make_secret`. Apple has no profile
endpoint: the user is read from the verified ``id_token`` returned by the
token endpoint, plus the ``user`` JSON Apple posts back on first login.
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from collections.abc import Mapping
from typing import Any, cast

import jwt
from pydantic import Field, field_validator

from ..contracts import Provider, ProviderError, Session, User
from ..models import BridgeBaseModel, ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

logger = logging.getLogger(__name__)

APPLE_AUD_OR_ISS = "https://appleid.apple.com"
KEYS_URL = "https://appleid.apple.com/auth/keys"

SCOPE_EMAIL = "email"
SCOPE_NAME = "name"


class SecretParams(BridgeBaseModel):
    """Inputs for the client secret JWT."""

    private_key: str
    team_id: str
    key_id: str
    client_id: str
    iat: int
    exp: int


def make_secret(params: SecretParams) -> str:
    """Sign the Apple client secret (ES256, ``kid`` header set to the key id)."""
    claims = {
        "iss": params.team_id,
        "iat": params.iat,
        "exp": params.exp,
        "aud": APPLE_AUD_OR_ISS,
        "sub": params.client_id,
    }
    try:
        return jwt.encode(
            claims,
            params.private_key.strip(),
            algorithm="ES256",
            headers={"kid": params.key_id},
        )
    except (ValueError, TypeError, jwt.InvalidKeyError) as exc:
        raise ValueError("invalid private key") from exc


class _IDTokenClaims(ResponseModel):
    sub: str
    email: str | None = None
    is_private_email: bool = False
    at_hash: str | None = None

    @field_validator("is_private_email", mode="before")
    @classmethod
    def _bool_or_string(cls, value: Any) -> bool:
        # Apple sends either a JSON boolean or the strings "true"/"false".
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value == "true"
        return False


class _AppleName(ResponseModel):
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")


class _AppleUserParam(ResponseModel):
    name: _AppleName = Field(default_factory=_AppleName)
    email: str | None = None


def access_token_hash(access_token: str) -> str:
    """Compute the OIDC ``at_hash`` for an RS256-signed id_token."""
    digest = hashlib.sha256(access_token.encode()).digest()
    return base64.urlsafe_b64encode(digest[: len(digest) // 2]).rstrip(b"=").decode()


class AppleSession(OAuth2Session):
    user_id: str | None = None
    email: str | None = None
    is_private_email: bool = False
    first_name: str | None = None
    last_name: str | None = None

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        if not isinstance(provider, AppleProvider):
            raise ProviderError(
                "invalid_provider", f"{provider.name} cannot authorize an Apple session"
            )
        access_token = await super().authorize(provider, params)
        if self.id_token:
            claims = await provider.verify_id_token(self.id_token, access_token)
            self.user_id = claims.sub
            self.email = claims.email
            self.is_private_email = claims.is_private_email

        raw_user = params.get("user")
        if raw_user:
            try:
                user = _AppleUserParam.model_validate(json.loads(raw_user))
            except ValueError as exc:
                raise ProviderError("invalid_request", "Apple user payload was invalid") from exc
            self.first_name = user.name.first_name
            self.last_name = user.name.last_name
            self.email = self.email or user.email
        return access_token


class AppleProvider(OAuth2Provider):
    provider_name = "apple"
    auth_url = "https://appleid.apple.com/auth/authorize"
    token_url = "https://appleid.apple.com/auth/token"
    keys_url = KEYS_URL
    session_class = AppleSession

    def __init__(
        self, client_key: str, secret: str, callback_url: str, *scopes: str, **kwargs: Any
    ):
        super().__init__(client_key, secret, callback_url, *scopes, **kwargs)
        # Apple posts name/email back only with response_mode=form_post.
        self.form_post_response_mode = any(s in (SCOPE_NAME, SCOPE_EMAIL) for s in scopes)

    def authorize_params(self) -> dict[str, str]:
        if self.form_post_response_mode:
            return {"response_mode": "form_post"}
        return {}

    async def verify_id_token(self, id_token: str, access_token: str) -> _IDTokenClaims:
        """Verify signature, audience, issuer and ``at_hash`` of an Apple id_token."""
        try:
            kid = jwt.get_unverified_header(id_token).get("kid")
        except jwt.InvalidTokenError as exc:
            raise ProviderError("invalid_token", "identity token invalid") from exc

        jwks = await self.get_json(self.keys_url, endpoint="keys")
        try:
            key_set = jwt.PyJWKSet.from_dict(jwks)
        except jwt.PyJWTError as exc:
            raise ProviderError("invalid_token", "Apple key set was invalid") from exc
        signing_key = next((k for k in key_set.keys if k.key_id == kid), None)
        if signing_key is None:
            raise ProviderError("invalid_token", "could not find matching public key")

        try:
            payload = jwt.decode(
                id_token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_key,
                issuer=APPLE_AUD_OR_ISS,
            )
        except jwt.InvalidAudienceError as exc:
            raise ProviderError("invalid_token", "audience is incorrect") from exc
        except jwt.InvalidIssuerError as exc:
            raise ProviderError("invalid_token", "issuer is incorrect") from exc
        except jwt.InvalidTokenError as exc:
            logger.warning(
                "Apple id_token failed verification",
                extra={"provider": self.name, "error_type": exc.__class__.__name__},
            )
            raise ProviderError("invalid_token", "identity token invalid") from exc

        claims = _IDTokenClaims.model_validate(payload)
        if claims.at_hash != access_token_hash(access_token):
            raise ProviderError("invalid_token", "identity token invalid")
        return claims

    async def fetch_user(self, session: Session) -> User:
        sess = cast(AppleSession, self.check_session(session))
        if not sess.access_token:
            raise ProviderError(
                "missing_access_token",
                f"{self.name} cannot get user information without accessToken",
            )
        profile = {
            "sub": sess.user_id,
            "email": sess.email,
            "is_private_email": sess.is_private_email,
            "first_name": sess.first_name,
            "last_name": sess.last_name,
        }
        return self.build_user(sess, profile)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        first_name = profile.get("first_name")
        last_name = profile.get("last_name")
        full_name = " ".join(part for part in (first_name, last_name) if part)
        return {
            "user_id": profile.get("sub"),
            "email": profile.get("email"),
            "first_name": first_name,
            "last_name": last_name,
            "name": full_name or None,
        }
