"""Starlette helpers that drive the login lifecycle for web applications.

:class:`AuthFlow` stores the marshalled provider session in an encrypted cookie
between the redirect to the provider and the callback, validates the ``state``
round-trip and returns the authenticated :class:`~idpbridge.contracts.User`.

```python
store = CookieSessionStore(Fernet.generate_key())
flow = AuthFlow(store)

async def welcome(request: Request, user: User) -> Response:
    return PlainTextResponse(f"hello {user.name}")

app = Starlette(routes=flow.routes(welcome))
```
"""

from __future__ import annotations

import gzip
import json
import logging
import secrets
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import parse_qs, urlsplit

from cryptography.fernet import Fernet, InvalidToken
from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response
from starlette.routing import Route

from .contracts import Provider, ProviderError, Session, User
from .registry import get_provider, get_providers

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "_idpbridge_session"
DEFAULT_MAX_AGE = 60 * 60 * 24 * 30

_STATE_ATTR = "idpbridge_session_values"

SuccessHandler = Callable[[Request, User], Awaitable[Response]]


def _build_fernet(secret_key: str | bytes) -> Fernet:
    key_bytes = secret_key.encode("utf-8") if isinstance(secret_key, str) else secret_key
    try:
        return Fernet(key_bytes)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            "Invalid session key: expected urlsafe base64-encoded 32-byte value. "
            "Pass the raw bytes from Fernet.generate_key() or the same value as a string."
        ) from exc


class CookieSessionStore:
    """Encrypted cookie holding marshalled sessions keyed by provider name.

    Values are JSON, gzip-compressed and sealed with Fernet. Reads are cached
    on ``request.state`` so writes made earlier in the same request are seen by
    later reads.
    """

    def __init__(
        self,
        secret_key: str | bytes,
        *,
        cookie_name: str = SESSION_COOKIE_NAME,
        max_age: int = DEFAULT_MAX_AGE,
        path: str = "/",
        secure: bool = False,
        samesite: str = "lax",
    ):
        self._fernet = _build_fernet(secret_key)
        self.cookie_name = cookie_name
        self.max_age = max_age
        self.path = path
        self.secure = secure
        self.samesite = samesite

    def load(self, request: Request) -> dict[str, str]:
        cached = getattr(request.state, _STATE_ATTR, None)
        if cached is not None:
            return cached
        values = self._decode(request.cookies.get(self.cookie_name))
        setattr(request.state, _STATE_ATTR, values)
        return values

    def save(self, request: Request, response: Response, values: dict[str, str]) -> None:
        setattr(request.state, _STATE_ATTR, dict(values))
        self._drop_pending_cookie(response)
        if not values:
            response.delete_cookie(self.cookie_name, path=self.path)
            return
        response.set_cookie(
            self.cookie_name,
            self._encode(values),
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.samesite,  # type: ignore[arg-type]
        )

    def _encode(self, values: dict[str, str]) -> str:
        payload = gzip.compress(json.dumps(values).encode("utf-8"))
        return self._fernet.encrypt(payload).decode("utf-8")

    def _decode(self, raw: str | None) -> dict[str, str]:
        if not raw:
            return {}
        try:
            payload = self._fernet.decrypt(raw.encode("utf-8"), ttl=self.max_age)
        except InvalidToken:
            logger.warning("Discarding session cookie that failed to decrypt")
            return {}
        values = json.loads(gzip.decompress(payload))
        if not isinstance(values, dict):
            return {}
        return {str(k): str(v) for k, v in values.items()}

    def _drop_pending_cookie(self, response: Response) -> None:
        # Only the last write in a request should reach the client.
        prefix = f"{self.cookie_name}=".encode("latin-1")
        response.raw_headers[:] = [
            (key, value)
            for key, value in response.raw_headers
            if not (key == b"set-cookie" and value.startswith(prefix))
        ]


class AuthFlow:
    """Begin-auth, callback and logout handling on top of the provider registry."""

    def __init__(
        self,
        store: CookieSessionStore,
        *,
        provider_lookup: Callable[[str], Provider | None] = get_provider,
    ):
        self.store = store
        self._lookup = provider_lookup

    def get_provider_name(self, request: Request) -> str:
        """Resolve the provider for a request.

        Checks the ``provider`` and ``:provider`` query parameters, then the
        ``provider`` path parameter, then any registered provider that already
        has a session stored for this client.
        """
        name = request.query_params.get("provider") or request.query_params.get(":provider")
        if not name:
            name = request.path_params.get("provider")
        if not name:
            stored = self.store.load(request)
            for candidate in get_providers():
                if candidate in stored:
                    name = candidate
                    break
        if not name:
            raise ProviderError("missing_provider", "you must select a provider")
        return name

    def set_state(self, request: Request) -> str:
        """State sent to the provider: the caller's ``state`` or a fresh random nonce."""
        state = request.query_params.get("state")
        if state:
            return state
        return secrets.token_urlsafe(64)

    async def get_state(self, request: Request) -> str:
        """State echoed back by the provider on the callback."""
        params = await self._callback_params(request)
        return params.get("state", "")

    async def get_auth_url(self, request: Request, response: Response) -> str:
        """Begin auth for the requested provider and remember the session."""
        name = self.get_provider_name(request)
        provider = self._provider(name)
        session = await provider.begin_auth(self.set_state(request))
        url = session.get_auth_url()
        self.store_in_session(name, session.marshal(), request, response)
        logger.debug("Started provider login", extra={"provider": name})
        return url

    async def begin_auth_handler(self, request: Request) -> Response:
        response = Response(status_code=307)
        try:
            url = await self.get_auth_url(request, response)
        except ProviderError as exc:
            return PlainTextResponse(str(exc), status_code=400)
        response.headers["location"] = url
        return response

    async def complete_user_auth(self, request: Request, response: Response) -> User:
        """Authorize the stored session with the callback params and fetch the user.

        The stored session is always cleared afterwards, on success or failure.
        """
        try:
            name = self.get_provider_name(request)
            provider = self._provider(name)
            value = self.get_from_session(name, request)
            if not value:
                raise ProviderError(
                    "missing_session", "could not find a matching session for this request"
                )
            session = provider.unmarshal_session(value)
            params = await self._callback_params(request)
            self._validate_state(session, params)

            try:
                return await provider.fetch_user(session)
            except ProviderError:
                # Not authorized yet.
                pass

            await session.authorize(provider, params)
            self.store_in_session(name, session.marshal(), request, response)
            user = await provider.fetch_user(session)
            logger.info("Completed provider login", extra={"provider": name})
            return user
        finally:
            self.logout(request, response)

    def logout(self, request: Request, response: Response) -> None:
        self.store.save(request, response, {})

    def store_in_session(self, key: str, value: str, request: Request, response: Response) -> None:
        values = dict(self.store.load(request))
        values[key] = value
        self.store.save(request, response, values)

    def get_from_session(self, key: str, request: Request) -> str | None:
        return self.store.load(request).get(key)

    def routes(
        self,
        on_success: SuccessHandler,
        prefix: str = "/auth",
        logout_redirect: str = "/",
    ) -> list[Route]:
        """Routes for ``{prefix}/{provider}``, its ``/callback`` and ``/logout``."""

        async def begin(request: Request) -> Response:
            return await self.begin_auth_handler(request)

        async def callback(request: Request) -> Response:
            carrier = Response()
            try:
                user = await self.complete_user_auth(request, carrier)
            except ProviderError as exc:
                logger.warning(
                    "Provider login failed",
                    extra={"provider": request.path_params.get("provider"), "error": exc.error},
                )
                failed = PlainTextResponse(str(exc), status_code=400)
                _copy_cookies(carrier, failed)
                return failed
            result = await on_success(request, user)
            _copy_cookies(carrier, result)
            return result

        async def logout(request: Request) -> Response:
            response = RedirectResponse(logout_redirect, status_code=307)
            self.logout(request, response)
            return response

        return [
            Route(f"{prefix}/{{provider}}", begin, methods=["GET"]),
            Route(f"{prefix}/{{provider}}/callback", callback, methods=["GET", "POST"]),
            Route(f"{prefix}/{{provider}}/logout", logout, methods=["GET"]),
        ]

    def _provider(self, name: str) -> Provider:
        provider = self._lookup(name)
        if provider is None:
            raise ProviderError("unknown_provider", f"no provider for {name} exists", 404)
        return provider

    async def _callback_params(self, request: Request) -> dict[str, str]:
        params: dict[str, str] = dict(request.query_params)
        if request.method == "POST":
            form = await request.form()
            for key, value in form.items():
                if isinstance(value, str):
                    params[key] = value
        return params

    def _validate_state(self, session: Session, params: dict[str, Any]) -> None:
        query = parse_qs(urlsplit(session.get_auth_url()).query)
        expected = query.get("state", [""])[0]
        if expected and expected != params.get("state"):
            raise ProviderError("state_mismatch", "state token mismatch")


def _copy_cookies(source: Response, target: Response) -> None:
    target.raw_headers.extend(
        (key, value) for key, value in source.raw_headers if key == b"set-cookie"
    )
