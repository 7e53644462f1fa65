"""Provider and session contracts shared by every identity provider.

A :class:`Provider` knows how to start a login (``begin_auth``), how to rebuild
a stored :class:`Session` (``unmarshal_session``) and how to turn an authorized
session into a normalized :class:`User` (``fetch_user``). Sessions carry the
authorization URL and the token state between the redirect and the callback.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, runtime_checkable

from pydantic import ConfigDict, Field

from .models import BridgeBaseModel

NO_AUTH_URL_ERROR_MESSAGE = "an AuthURL has not been set"

# Tokens are treated as expired slightly before their real expiry.
EXPIRY_DELTA = timedelta(seconds=10)


class ProviderError(Exception):
    """Raised when a provider, session or the registry cannot complete a request."""

    def __init__(self, error: str, description: str | None = None, status_code: int = 400):
        super().__init__(description or error)
        self.error = error
        self.description = description
        self.status_code = status_code


class User(BridgeBaseModel):
    """Normalized user profile returned by every provider.

    ``raw_data`` keeps the provider's original profile payload so callers can
    reach fields that are not part of the common shape.
    """

    provider: str
    raw_data: dict[str, Any] = Field(default_factory=dict)
    email: str | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    nick_name: str | None = None
    description: str | None = None
    user_id: str | None = None
    avatar_url: str | None = None
    location: str | None = None
    access_token: str | None = None
    access_token_secret: str | None = None
    refresh_token: str | None = None
    expires_at: datetime | None = None
    id_token: str | None = None


class Token(BridgeBaseModel):
    """Token endpoint result (authorization code exchange or refresh)."""

    access_token: str
    token_type: str = "Bearer"
    refresh_token: str | None = None
    expires_at: datetime | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def valid(self) -> bool:
        if not self.access_token:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at - EXPIRY_DELTA > datetime.now(timezone.utc)

    def extra(self, key: str) -> Any:
        """Return a non-standard field from the raw token response."""
        return self.raw.get(key)


@runtime_checkable
class Session(Protocol):
    """Serializable per-provider login state."""

    def get_auth_url(self) -> str:
        """Return the URL the user is redirected to."""
        ...

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        """Complete the login with callback params and return the access token."""
        ...

    def marshal(self) -> str:
        """Serialize the session to JSON."""
        ...


@runtime_checkable
class Provider(Protocol):
    """Uniform interface implemented by every identity provider."""

    @property
    def name(self) -> str: ...

    def set_name(self, name: str) -> None: ...

    async def begin_auth(self, state: str) -> Session: ...

    def unmarshal_session(self, data: str) -> Session: ...

    async def fetch_user(self, session: Session) -> User: ...

    def debug(self, enabled: bool) -> None: ...

    async def refresh_token(self, refresh_token: str) -> Token: ...

    def refresh_token_available(self) -> bool: ...


def expires_at_from(expires_in: float | int | str | None) -> datetime | None:
    """Convert a relative ``expires_in`` (seconds) into an absolute UTC timestamp."""
    if expires_in in (None, ""):
        return None
    seconds = float(expires_in)  # type: ignore[arg-type]
    if seconds <= 0:
        return None
    return datetime.now(timezone.utc) + timedelta(seconds=seconds)
