"""In-process provider for tests. It never touches the network."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, ValidationError

from ..contracts import Provider, ProviderError, Session, Token, User

FAUX_AUTH_URL = "http://example.com/auth/"


class FauxSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    email: str = ""

    def get_auth_url(self) -> str:
        return FAUX_AUTH_URL

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        return ""

    def marshal(self) -> str:
        return self.model_dump_json()

    def __str__(self) -> str:
        return self.marshal()


class FauxProvider:
    provider_name = "faux"
    supports_scopes = False

    def __init__(self, *args: object, **kwargs: object):
        self._name = self.provider_name

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def debug(self, enabled: bool) -> None:
        pass

    async def begin_auth(self, state: str) -> FauxSession:
        return FauxSession()

    def unmarshal_session(self, data: str) -> FauxSession:
        try:
            return FauxSession.model_validate_json(data)
        except ValidationError as exc:
            raise ProviderError("invalid_session", "faux session could not be decoded") from exc

    async def fetch_user(self, session: Session) -> User:
        if not isinstance(session, FauxSession):
            raise ProviderError("invalid_session", "faux cannot use this session")
        return User(
            provider=self.name,
            name=session.name or None,
            email=session.email or None,
        )

    async def refresh_token(self, refresh_token: str) -> Token:
        raise ProviderError(
            "refresh_not_supported", f"Refresh token is not provided by {self.name}"
        )

    def refresh_token_available(self) -> bool:
        return False
