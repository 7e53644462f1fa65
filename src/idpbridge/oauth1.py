"""OAuth 1.0a session and provider base class.

Request signing is delegated to authlib's ``OAuth1Auth`` (HMAC-SHA1 by default,
RSA-SHA1 for providers that configure an RSA key).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar
from urllib.parse import parse_qsl, urlencode

import httpx
from authlib.integrations.httpx_client import OAuth1Auth
from authlib.oauth1 import SIGNATURE_HMAC_SHA1
from pydantic import BaseModel, ConfigDict, ValidationError

from .contracts import (
    NO_AUTH_URL_ERROR_MESSAGE,
    Provider,
    ProviderError,
    Session,
    Token,
    User,
    expires_at_from,
)
from .http import read_json, send

logger = logging.getLogger(__name__)


def read_form(resp: Any, *, provider: str, endpoint: str) -> dict[str, str]:
    """Parse a form-encoded OAuth1 token response."""
    if resp.status_code != 200:
        logger.warning(
            "OAuth1 endpoint returned non-200",
            extra={
                "provider": provider,
                "endpoint": endpoint,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            "invalid_grant",
            f"{provider} {endpoint} request failed",
            status_code=resp.status_code,
        )
    values = dict(parse_qsl(resp.text or ""))
    if not values.get("oauth_token"):
        logger.warning(
            "OAuth1 endpoint response missing oauth_token",
            extra={"provider": provider, "endpoint": endpoint},
        )
        raise ProviderError("invalid_grant", f"{provider} {endpoint} response was invalid")
    return values


class OAuth1Session(BaseModel):
    """Login state for OAuth1 providers."""

    model_config = ConfigDict(extra="ignore")

    auth_url: str | None = None
    request_token: str | None = None
    request_token_secret: str | None = None
    access_token: str | None = None
    access_token_secret: str | None = None
    access_token_expires: datetime | None = None
    session_handle: str | None = None

    def get_auth_url(self) -> str:
        if not self.auth_url:
            raise ProviderError("no_auth_url", NO_AUTH_URL_ERROR_MESSAGE)
        return self.auth_url

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        if not isinstance(provider, OAuth1Provider):
            raise ProviderError(
                "invalid_provider", f"{provider.name} cannot authorize an OAuth1 session"
            )
        values = await provider.fetch_access_token(self, params.get("oauth_verifier", ""))
        self.apply_access_token(values)
        return self.access_token or ""

    def apply_access_token(self, values: Mapping[str, str]) -> None:
        self.access_token = values["oauth_token"]
        self.access_token_secret = values.get("oauth_token_secret")
        self.access_token_expires = expires_at_from(values.get("oauth_expires_in"))
        if values.get("oauth_session_handle"):
            self.session_handle = values["oauth_session_handle"]

    def marshal(self) -> str:
        return self.model_dump_json()

    def __str__(self) -> str:
        return self.marshal()


class OAuth1Provider:
    """Base class for OAuth 1.0a identity providers."""

    provider_name: ClassVar[str] = ""
    request_token_url: ClassVar[str] = ""
    authorize_url: ClassVar[str] = ""
    authenticate_url: ClassVar[str] = ""
    access_token_url: ClassVar[str] = ""
    profile_url: ClassVar[str] = ""
    supports_scopes: ClassVar[bool] = False

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *,
        authenticate: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.client_key = client_key
        self.secret = secret
        self.callback_url = callback_url
        self.authenticate = authenticate
        self.http_client = http_client
        self.signature_method = SIGNATURE_HMAC_SHA1
        self.rsa_key: str | None = None
        self._name = self.provider_name
        self._debug = False

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def debug(self, enabled: bool) -> None:
        self._debug = enabled

    def request_headers(self) -> dict[str, str]:
        """Headers sent with every token and API request."""
        return {}

    def signer(self, **kwargs: Any) -> OAuth1Auth:
        return OAuth1Auth(
            self.client_key,
            client_secret=self.secret,
            signature_method=self.signature_method,
            rsa_key=self.rsa_key,
            **kwargs,
        )

    async def begin_auth(self, state: str) -> OAuth1Session:
        resp = await send(
            "POST",
            self.request_token_url,
            provider=self.name,
            endpoint="request_token",
            client=self.http_client,
            headers=self.request_headers(),
            auth=self.signer(redirect_uri=self.callback_url),
        )
        values = read_form(resp, provider=self.name, endpoint="request_token")
        base = self.authorize_url
        if self.authenticate and self.authenticate_url:
            base = self.authenticate_url
        auth_url = f"{base}?{urlencode({'oauth_token': values['oauth_token']})}"
        if self._debug:
            logger.debug("Obtained request token", extra={"provider": self.name})
        return OAuth1Session(
            auth_url=auth_url,
            request_token=values["oauth_token"],
            request_token_secret=values.get("oauth_token_secret"),
        )

    def unmarshal_session(self, data: str) -> OAuth1Session:
        try:
            return OAuth1Session.model_validate_json(data)
        except ValidationError as exc:
            raise ProviderError(
                "invalid_session", f"{self.name} session could not be decoded"
            ) from exc

    async def fetch_access_token(self, session: OAuth1Session, verifier: str) -> dict[str, str]:
        if not session.request_token:
            raise ProviderError("invalid_session", f"{self.name} session has no request token")
        resp = await send(
            "POST",
            self.access_token_url,
            provider=self.name,
            endpoint="access_token",
            client=self.http_client,
            headers=self.request_headers(),
            auth=self.signer(
                token=session.request_token,
                token_secret=session.request_token_secret,
                verifier=verifier,
            ),
        )
        return read_form(resp, provider=self.name, endpoint="access_token")

    async def fetch_user(self, session: Session) -> User:
        if not isinstance(session, OAuth1Session):
            raise ProviderError(
                "invalid_session",
                f"{self.name} cannot use a session of type {type(session).__name__}",
            )
        if not session.access_token:
            raise ProviderError(
                "missing_access_token",
                f"{self.name} cannot get user information without accessToken",
            )
        profile = await self.fetch_profile(session)
        try:
            fields = self.user_from_profile(profile)
        except ValidationError as exc:
            raise ProviderError(
                "invalid_token", f"{self.name} profile response was invalid"
            ) from exc
        values: dict[str, Any] = {
            "provider": self.name,
            "raw_data": profile,
            "access_token": session.access_token,
            "access_token_secret": session.access_token_secret,
            "expires_at": session.access_token_expires,
        }
        values.update(fields)
        return User(**values)

    async def fetch_profile(self, session: OAuth1Session) -> dict[str, Any]:
        return await self.signed_get_json(self.profile_url, session)

    async def signed_get_json(
        self,
        url: str,
        session: OAuth1Session,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        resp = await send(
            "GET",
            url,
            provider=self.name,
            endpoint="profile",
            client=self.http_client,
            auth=self.signer(token=session.access_token, token_secret=session.access_token_secret),
            params=dict(params) if params else None,
            headers={
                "Accept": "application/json",
                **self.request_headers(),
                **(headers or {}),
            },
        )
        return read_json(resp, provider=self.name, endpoint="profile")

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    async def refresh_token(self, refresh_token: str) -> Token:
        raise ProviderError(
            "refresh_not_supported", f"Refresh token is not provided by {self.name}"
        )

    def refresh_token_available(self) -> bool:
        return False
