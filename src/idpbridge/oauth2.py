"""OAuth2 client configuration, session and provider base class.

Most providers are thin subclasses of :class:`OAuth2Provider` that declare their
endpoints and scopes and map their profile payload onto :class:`User` in
``user_from_profile``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar
from urllib.parse import parse_qsl, urlencode

import httpx
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
from .models import BridgeBaseModel

logger = logging.getLogger(__name__)


class AuthStyle(str, Enum):
    """How client credentials are sent to the token endpoint."""

    IN_PARAMS = "params"
    IN_HEADER = "header"


class OAuth2Endpoint(BridgeBaseModel):
    auth_url: str
    token_url: str
    auth_style: AuthStyle = AuthStyle.IN_PARAMS


class _TokenResponse(BridgeBaseModel):
    """Token endpoint response (successful or error)."""

    model_config = ConfigDict(extra="allow", frozen=True)

    access_token: str | None = None
    token_type: str | None = None
    refresh_token: str | None = None
    expires_in: float | str | None = None
    expires: float | str | None = None
    id_token: str | None = None

    error: str | dict[str, Any] | None = None
    error_description: str | None = None


def stringify(value: Any) -> str | None:
    """Render numeric identifiers as strings, keeping empty values as ``None``."""
    if value is None or value == "":
        return None
    return str(value)


class OAuth2Config:
    """Client settings for one OAuth2 authorization server."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_url: str,
        endpoint: OAuth2Endpoint,
        scopes: Sequence[str] = (),
        scope_separator: str = " ",
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_url = redirect_url
        self.endpoint = endpoint
        self.scopes = list(scopes)
        self.scope_separator = scope_separator

    def auth_code_url(self, state: str, params: Mapping[str, str] | None = None) -> str:
        query: list[tuple[str, str]] = [
            ("client_id", self.client_id),
            ("response_type", "code"),
        ]
        if self.redirect_url:
            query.append(("redirect_uri", self.redirect_url))
        if self.scopes:
            query.append(("scope", self.scope_separator.join(self.scopes)))
        if state:
            query.append(("state", state))
        if params:
            query.extend(params.items())
        separator = "&" if "?" in self.endpoint.auth_url else "?"
        return f"{self.endpoint.auth_url}{separator}{urlencode(query)}"

    async def exchange(
        self,
        code: str,
        *,
        params: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
        provider: str = "oauth2",
    ) -> Token:
        payload: dict[str, str] = {"grant_type": "authorization_code", "code": code}
        if self.redirect_url:
            payload["redirect_uri"] = self.redirect_url
        if params:
            payload.update(params)
        return await self._request_token(
            payload, context="exchange_code", client=client, provider=provider
        )

    async def refresh(
        self,
        refresh_token: str,
        *,
        client: httpx.AsyncClient | None = None,
        provider: str = "oauth2",
    ) -> Token:
        payload = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        token = await self._request_token(
            payload, context="refresh_token", client=client, provider=provider
        )
        if not token.access_token:
            raise ProviderError("invalid_grant", "No access_token in refresh response")
        if token.refresh_token is None:
            return token.model_copy(update={"refresh_token": refresh_token})
        return token

    async def _request_token(
        self,
        payload: Mapping[str, str],
        *,
        context: str,
        client: httpx.AsyncClient | None,
        provider: str,
    ) -> Token:
        data = dict(payload)
        kwargs: dict[str, Any] = {
            "headers": {
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            }
        }
        if self.endpoint.auth_style is AuthStyle.IN_HEADER:
            kwargs["auth"] = httpx.BasicAuth(self.client_id, self.client_secret)
        else:
            data["client_id"] = self.client_id
            data["client_secret"] = self.client_secret

        resp = await send(
            "POST",
            self.endpoint.token_url,
            provider=provider,
            endpoint="token",
            client=client,
            data=data,
            **kwargs,
        )
        return parse_token_response(resp, context=context, provider=provider)


def parse_token_response(resp: Any, *, context: str, provider: str) -> Token:
    """Turn a token endpoint response (JSON or form-encoded) into a :class:`Token`."""
    if not 200 <= resp.status_code < 300:
        error_code = _try_extract_oauth_error_code(resp)
        logger.warning(
            "Token endpoint returned non-2xx",
            extra={
                "provider": provider,
                "endpoint": "token",
                "context": context,
                "status_code": resp.status_code,
                "provider_error": error_code,
            },
        )
        raise ProviderError(
            error_code or "invalid_grant",
            f"{provider} token request failed",
            status_code=resp.status_code,
        )

    payload = _decode_token_body(resp)
    if payload is None:
        logger.warning(
            "Token endpoint returned an unreadable body",
            extra={
                "provider": provider,
                "endpoint": "token",
                "context": context,
                "status_code": resp.status_code,
            },
        )
        raise ProviderError(
            "invalid_grant",
            f"{provider} token response was invalid",
            status_code=resp.status_code,
        )

    try:
        parsed = _TokenResponse.model_validate(payload)
    except ValidationError as exc:
        raise ProviderError(
            "invalid_grant",
            f"{provider} token response was invalid",
            status_code=resp.status_code,
        ) from exc

    if parsed.error:
        if isinstance(parsed.error, dict):
            code = str(parsed.error.get("type") or "invalid_grant")
            description = parsed.error.get("message")
        else:
            code = parsed.error
            description = parsed.error_description
        logger.warning(
            "Token endpoint returned an OAuth error",
            extra={
                "provider": provider,
                "endpoint": "token",
                "context": context,
                "provider_error": code,
            },
        )
        raise ProviderError(code, description or f"{provider} token request failed")

    expires_in = parsed.expires_in if parsed.expires_in is not None else parsed.expires
    try:
        expires_at = expires_at_from(expires_in)
    except (ValueError, OverflowError) as exc:
        raise ProviderError(
            "invalid_grant", f"{provider} returned an invalid expiry", status_code=400
        ) from exc

    return Token(
        access_token=parsed.access_token or "",
        token_type=parsed.token_type or "Bearer",
        refresh_token=parsed.refresh_token,
        expires_at=expires_at,
        raw=payload,
    )


def _decode_token_body(resp: Any) -> dict[str, Any] | None:
    try:
        payload = resp.json()
    except Exception:
        # Some servers still answer with application/x-www-form-urlencoded.
        text = getattr(resp, "text", "") or ""
        pairs = dict(parse_qsl(text))
        return pairs or None
    if not isinstance(payload, dict):
        return None
    return payload


def _try_extract_oauth_error_code(resp: Any) -> str | None:
    try:
        payload = resp.json()
    except Exception:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    return error if isinstance(error, str) else None


class OAuth2Session(BaseModel):
    """Login state for OAuth2 providers, serialized between redirect and callback."""

    model_config = ConfigDict(extra="ignore")

    auth_url: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None
    id_token: str | None = None

    def get_auth_url(self) -> str:
        if not self.auth_url:
            raise ProviderError("no_auth_url", NO_AUTH_URL_ERROR_MESSAGE)
        return self.auth_url

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        if not isinstance(provider, OAuth2Provider):
            raise ProviderError(
                "invalid_provider", f"{provider.name} cannot authorize an OAuth2 session"
            )
        token = await provider.exchange(self, params)
        if not token.valid:
            raise ProviderError("invalid_token", "Invalid token received from provider")
        self.apply_token(token)
        return token.access_token

    def apply_token(self, token: Token) -> None:
        self.access_token = token.access_token
        self.refresh_token = token.refresh_token
        self.expires_at = token.expires_at
        id_token = token.extra("id_token")
        if isinstance(id_token, str) and id_token:
            self.id_token = id_token

    def marshal(self) -> str:
        return self.model_dump_json()

    def __str__(self) -> str:
        return self.marshal()


class OAuth2Provider:
    """Base class for OAuth2 identity providers.

    Subclasses declare ``provider_name`` and the endpoint URLs as class
    attributes and implement ``user_from_profile``. ``default_scopes`` apply
    only when the caller requests none; ``base_scopes`` are always requested.
    """

    provider_name: ClassVar[str] = ""
    auth_url: str = ""
    token_url: str = ""
    profile_url: str = ""
    default_scopes: ClassVar[tuple[str, ...]] = ()
    base_scopes: ClassVar[tuple[str, ...]] = ()
    scope_separator: ClassVar[str] = " "
    auth_style: ClassVar[AuthStyle] = AuthStyle.IN_PARAMS
    refresh_supported: ClassVar[bool] = True
    token_in_query: ClassVar[bool] = False
    supports_scopes: ClassVar[bool] = True
    session_class: ClassVar[type[OAuth2Session]] = OAuth2Session

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *scopes: str,
        auth_url: str | None = None,
        token_url: str | None = None,
        profile_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.client_key = client_key
        self.secret = secret
        self.callback_url = callback_url
        self.http_client = http_client
        if auth_url:
            self.auth_url = auth_url
        if token_url:
            self.token_url = token_url
        if profile_url:
            self.profile_url = profile_url
        self._name = self.provider_name
        self._debug = False
        self.config = self._new_config(scopes)

    @classmethod
    def with_urls(
        cls,
        client_key: str,
        secret: str,
        callback_url: str,
        auth_url: str,
        token_url: str,
        profile_url: str,
        *scopes: str,
        **kwargs: Any,
    ) -> OAuth2Provider:
        """Build the provider against custom (e.g. self-hosted) endpoints."""
        return cls(
            client_key,
            secret,
            callback_url,
            *scopes,
            auth_url=auth_url,
            token_url=token_url,
            profile_url=profile_url,
            **kwargs,
        )

    # ── configuration ────────────────────────────────────────────────────────
    def resolve_scopes(self, scopes: Sequence[str]) -> list[str]:
        resolved = list(self.base_scopes)
        for scope in [s for s in scopes if s] or self.default_scopes:
            if scope not in resolved:
                resolved.append(scope)
        return resolved

    def _new_config(self, scopes: Sequence[str]) -> OAuth2Config:
        return OAuth2Config(
            client_id=self.client_key,
            client_secret=self.secret,
            redirect_url=self.callback_url,
            endpoint=OAuth2Endpoint(
                auth_url=self.auth_url,
                token_url=self.token_url,
                auth_style=self.auth_style,
            ),
            scopes=self.resolve_scopes(scopes),
            scope_separator=self.scope_separator,
        )

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def debug(self, enabled: bool) -> None:
        self._debug = enabled

    def authorize_params(self) -> dict[str, str]:
        """Extra query parameters appended to the authorization URL."""
        return {}

    # ── login flow ───────────────────────────────────────────────────────────
    async def begin_auth(self, state: str) -> OAuth2Session:
        url = self.config.auth_code_url(state, self.authorize_params())
        if self._debug:
            logger.debug("Built authorization URL", extra={"provider": self.name, "url": url})
        return self.session_class(auth_url=url)

    def unmarshal_session(self, data: str) -> OAuth2Session:
        try:
            return self.session_class.model_validate_json(data)
        except ValidationError as exc:
            raise ProviderError(
                "invalid_session", f"{self.name} session could not be decoded"
            ) from exc

    async def exchange(self, session: OAuth2Session, params: Mapping[str, str]) -> Token:
        """Trade the callback ``code`` for a token."""
        extra: dict[str, str] = {}
        code_verifier = params.get("code_verifier")
        if code_verifier:
            extra["code_verifier"] = code_verifier
        return await self.config.exchange(
            params.get("code", ""),
            params=extra,
            client=self.http_client,
            provider=self.name,
        )

    async def fetch_user(self, session: Session) -> User:
        sess = self.check_session(session)
        if not sess.access_token:
            raise ProviderError(
                "missing_access_token",
                f"{self.name} cannot get user information without accessToken",
            )
        try:
            profile = await self.fetch_profile(sess)
            extra = await self.extra_user_fields(sess, profile)
        except ValidationError as exc:
            raise ProviderError(
                "invalid_token", f"{self.name} profile response was invalid"
            ) from exc
        user = self.build_user(sess, profile)
        if extra:
            # raw_data stays the untouched profile payload.
            return user.model_copy(update=extra)
        return user

    async def refresh_token(self, refresh_token: str) -> Token:
        if not self.refresh_supported:
            raise ProviderError(
                "refresh_not_supported", f"Refresh token is not provided by {self.name}"
            )
        return await self.config.refresh(
            refresh_token, client=self.http_client, provider=self.name
        )

    def refresh_token_available(self) -> bool:
        return self.refresh_supported

    # ── profile helpers ──────────────────────────────────────────────────────
    def check_session(self, session: Session) -> OAuth2Session:
        if not isinstance(session, self.session_class):
            raise ProviderError(
                "invalid_session",
                f"{self.name} cannot use a session of type {type(session).__name__}",
            )
        return session

    async def fetch_profile(self, session: OAuth2Session) -> dict[str, Any]:
        if self.token_in_query:
            return await self.get_json(
                self.profile_url, params={"access_token": session.access_token or ""}
            )
        return await self.get_json(self.profile_url, access_token=session.access_token)

    async def extra_user_fields(
        self, session: OAuth2Session, profile: dict[str, Any]
    ) -> dict[str, Any]:
        """User fields looked up outside the profile endpoint, such as a primary email."""
        return {}

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}

    async def get_json(
        self,
        url: str,
        *,
        access_token: str | None = None,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        endpoint: str = "profile",
    ) -> dict[str, Any]:
        request_headers = self.profile_headers(access_token) if access_token else {}
        if headers:
            request_headers.update(headers)
        if self._debug:
            logger.debug(
                "Fetching provider resource",
                extra={"provider": self.name, "endpoint": endpoint, "url": url},
            )
        resp = await send(
            "GET",
            url,
            provider=self.name,
            endpoint=endpoint,
            client=self.http_client,
            headers=request_headers,
            params=dict(params) if params else None,
        )
        return read_json(resp, provider=self.name, endpoint=endpoint)

    def build_user(self, session: OAuth2Session, profile: dict[str, Any]) -> User:
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
            "refresh_token": session.refresh_token,
            "expires_at": session.expires_at,
            "id_token": session.id_token,
        }
        values.update(fields)
        return User(**values)

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        """Map a provider profile payload to :class:`User` keyword arguments."""
        raise NotImplementedError
