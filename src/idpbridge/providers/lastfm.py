"""Last.fm provider.

Last.fm predates OAuth2: the user approves the app at ``/api/auth`` and is
sent back with a ``token`` that is traded for a session key through a signed
``auth.getSession`` call. API responses are XML wrapped in ``<lfm status=...>``.
"""

from __future__ import annotations

import hashlib
import logging
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..contracts import (
    NO_AUTH_URL_ERROR_MESSAGE,
    Provider,
    ProviderError,
    Session,
    Token,
    User,
)
from ..http import send

logger = logging.getLogger(__name__)

AUTH_URL = "http://www.lastfm.com.br/api/auth"
API_URL = "http://ws.audioscrobbler.com/2.0/"

# Index of the "extralarge" entry in user.getinfo's image list.
AVATAR_IMAGE_INDEX = 3


def sign_request(secret: str, params: Mapping[str, str]) -> str:
    """Last.fm ``api_sig``: MD5 over sorted ``key+value`` pairs followed by the secret."""
    plain = "".join(f"{key}{params[key]}" for key in sorted(params)) + secret
    return hashlib.md5(plain.encode("utf-8")).hexdigest()


class LastFMSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    auth_url: str | None = None
    access_token: str | None = None
    login: str | None = None

    def get_auth_url(self) -> str:
        if not self.auth_url:
            raise ProviderError("no_auth_url", NO_AUTH_URL_ERROR_MESSAGE)
        return self.auth_url

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        if not isinstance(provider, LastFMProvider):
            raise ProviderError(
                "invalid_provider", f"{provider.name} cannot authorize a Last.fm session"
            )
        login, key = await provider.get_session(params.get("token", ""))
        self.access_token = key
        self.login = login
        return key

    def marshal(self) -> str:
        return self.model_dump_json()

    def __str__(self) -> str:
        return self.marshal()


def _element_to_dict(element: ET.Element) -> dict[str, Any]:
    data: dict[str, Any] = {}
    images: list[dict[str, str]] = []
    for child in element:
        if child.tag == "image":
            images.append({"size": child.get("size", ""), "url": (child.text or "").strip()})
        else:
            data[child.tag] = (child.text or "").strip()
    if images:
        data["image"] = images
    return data


class LastFMProvider:
    provider_name = "lastfm"
    auth_url = AUTH_URL
    api_url = API_URL
    supports_scopes = False

    def __init__(
        self,
        client_key: str,
        secret: str,
        callback_url: str,
        *,
        user_agent: str = "",
        http_client: httpx.AsyncClient | None = None,
    ):
        self.client_key = client_key
        self.secret = secret
        self.callback_url = callback_url
        self.user_agent = user_agent
        self.http_client = http_client
        self._name = self.provider_name
        self._debug = False

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def debug(self, enabled: bool) -> None:
        self._debug = enabled

    async def begin_auth(self, state: str) -> LastFMSession:
        query = urlencode({"api_key": self.client_key, "callback": self.callback_url})
        return LastFMSession(auth_url=f"{self.auth_url}?{query}")

    def unmarshal_session(self, data: str) -> LastFMSession:
        try:
            return LastFMSession.model_validate_json(data)
        except ValidationError as exc:
            raise ProviderError(
                "invalid_session", f"{self.name} session could not be decoded"
            ) from exc

    async def get_session(self, token: str) -> tuple[str, str]:
        """Trade an auth token for ``(login, session_key)``."""
        root = await self.request({"method": "auth.getSession", "token": token}, sign=True)
        session = root.find("session")
        if session is None:
            raise ProviderError("invalid_grant", f"{self.name} returned no session")
        key = (session.findtext("key") or "").strip()
        if not key:
            raise ProviderError("invalid_token", "Invalid token received from provider")
        return (session.findtext("name") or "").strip(), key

    async def fetch_user(self, session: Session) -> User:
        if not isinstance(session, LastFMSession):
            raise ProviderError(
                "invalid_session",
                f"{self.name} cannot use a session of type {type(session).__name__}",
            )
        if not session.access_token:
            raise ProviderError(
                "missing_access_token",
                f"{self.name} cannot get user information without accessToken",
            )
        root = await self.request({"method": "user.getinfo", "user": session.login or ""})
        element = root.find("user")
        if element is None:
            raise ProviderError("invalid_token", f"{self.name} returned no user")
        profile = _element_to_dict(element)
        images = profile.get("image") or []
        avatar_url = images[AVATAR_IMAGE_INDEX]["url"] if len(images) > AVATAR_IMAGE_INDEX else None
        return User(
            provider=self.name,
            raw_data=profile,
            access_token=session.access_token,
            user_id=profile.get("id") or None,
            name=profile.get("realname") or None,
            nick_name=profile.get("name") or None,
            location=profile.get("country") or None,
            avatar_url=avatar_url or None,
        )

    async def request(self, params: Mapping[str, str], *, sign: bool = False) -> ET.Element:
        """Call the Last.fm API and return the ``<lfm>`` root of a successful response."""
        query = dict(params)
        query["api_key"] = self.client_key
        if sign:
            query["api_sig"] = sign_request(self.secret, query)
        method = query.get("method", "")
        resp = await send(
            "GET",
            self.api_url,
            provider=self.name,
            endpoint=method,
            client=self.http_client,
            params=query,
            headers={"User-Agent": self.user_agent} if self.user_agent else None,
        )
        if resp.status_code >= 500:
            logger.warning(
                "Last.fm API returned a server error",
                extra={"provider": self.name, "endpoint": method, "status_code": resp.status_code},
            )
            raise ProviderError(
                "temporarily_unavailable",
                f"Request error({resp.status_code})",
                status_code=resp.status_code,
            )
        try:
            root = ET.fromstring(resp.text)
        except ET.ParseError as exc:
            raise ProviderError(
                "invalid_token", f"{self.name} {method} response was invalid"
            ) from exc
        if root.tag != "lfm":
            raise ProviderError("invalid_token", f"{self.name} {method} response was invalid")
        if root.get("status") != "ok":
            error = root.find("error")
            code = error.get("code", "") if error is not None else ""
            message = (error.text or "").strip() if error is not None else ""
            logger.warning(
                "Last.fm API returned an error",
                extra={"provider": self.name, "endpoint": method, "provider_error": code},
            )
            raise ProviderError("invalid_grant", f"Request Error({code}): {message}")
        return root

    async def refresh_token(self, refresh_token: str) -> Token:
        raise ProviderError(
            "refresh_not_supported", f"Refresh token is not provided by {self.name}"
        )

    def refresh_token_available(self) -> bool:
        return False
