import hashlib
from urllib.parse import parse_qs, urlsplit

import pytest
from pytest import MonkeyPatch

from idpbridge import ProviderError
from idpbridge.providers import LastFMProvider
from idpbridge.providers.lastfm import LastFMSession, sign_request
from tests.provider_testkit import FakeAsyncHttpClient, FakeResponse, patch_http_client

SESSION_XML = """<?xml version="1.0" encoding="utf-8"?>
<lfm status="ok">
  <session><name>rj</name><key>d580d57f32848f5dcf574d1ce18d78b2</key><subscriber>0</subscriber></session>
</lfm>"""

USER_XML = """<?xml version="1.0" encoding="utf-8"?>
<lfm status="ok">
  <user>
    <id>1000002</id>
    <name>rj</name>
    <realname>Richard Jones</realname>
    <image size="small">https://img/34.png</image>
    <image size="medium">https://img/64.png</image>
    <image size="large">https://img/126.png</image>
    <image size="extralarge">https://img/252.png</image>
    <country>UK</country>
  </user>
</lfm>"""

ERROR_XML = """<?xml version="1.0" encoding="utf-8"?>
<lfm status="failed"><error code="4">Invalid authentication token supplied</error></lfm>"""


def _provider() -> LastFMProvider:
    return LastFMProvider("api-key", "shh", "https://app/auth/lastfm/callback")


def test_sign_request_matches_documented_scheme() -> None:
    params = {"method": "auth.getSession", "token": "t", "api_key": "k"}
    expected = hashlib.md5(b"api_keykmethodauth.getSessiontokentshh").hexdigest()
    assert sign_request("shh", params) == expected


@pytest.mark.asyncio
async def test_begin_auth_url() -> None:
    url = (await _provider().begin_auth("ignored")).get_auth_url()
    query = parse_qs(urlsplit(url).query)
    assert url.startswith("http://www.lastfm.com.br/api/auth?")
    assert query == {"api_key": ["api-key"], "callback": ["https://app/auth/lastfm/callback"]}


@pytest.mark.asyncio
async def test_authorize_and_fetch_user(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "method=auth.getSession": FakeResponse(200, None, text=SESSION_XML),
            "method=user.getinfo": FakeResponse(200, None, text=USER_XML),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = _provider()
    session = await provider.begin_auth("s")

    token = await session.authorize(provider, {"token": "auth-token"})
    user = await provider.fetch_user(session)

    assert token == "d580d57f32848f5dcf574d1ce18d78b2"
    assert isinstance(session, LastFMSession)
    assert session.login == "rj"
    assert user.user_id == "1000002"
    assert user.nick_name == "rj"
    assert user.name == "Richard Jones"
    assert user.avatar_url == "https://img/252.png"
    assert user.location == "UK"
    assert user.raw_data["image"][0] == {"size": "small", "url": "https://img/34.png"}

    session_call, user_call = fake.requests
    assert session_call.params["token"] == "auth-token"
    assert session_call.params["api_sig"] == sign_request(
        "shh", {k: v for k, v in session_call.params.items() if k != "api_sig"}
    )
    assert "api_sig" not in user_call.params
    assert user_call.params["user"] == "rj"


@pytest.mark.asyncio
async def test_api_error_is_reported(monkeypatch: MonkeyPatch) -> None:
    patch_http_client(
        monkeypatch,
        FakeAsyncHttpClient(default_get_response=FakeResponse(200, None, text=ERROR_XML)),
    )
    provider = _provider()
    session = await provider.begin_auth("s")

    with pytest.raises(ProviderError) as exc:
        await session.authorize(provider, {"token": "bad"})
    assert str(exc.value) == "Request Error(4): Invalid authentication token supplied"
    assert session.access_token is None


@pytest.mark.asyncio
async def test_server_error(monkeypatch: MonkeyPatch) -> None:
    patch_http_client(
        monkeypatch,
        FakeAsyncHttpClient(default_get_response=FakeResponse(503, None, text="down")),
    )
    with pytest.raises(ProviderError) as exc:
        await _provider().fetch_user(LastFMSession(access_token="k", login="rj"))
    assert exc.value.status_code == 503


@pytest.mark.asyncio
async def test_user_without_large_image(monkeypatch: MonkeyPatch) -> None:
    xml = '<lfm status="ok"><user><id>1</id><name>rj</name></user></lfm>'
    patch_http_client(
        monkeypatch, FakeAsyncHttpClient(default_get_response=FakeResponse(200, None, text=xml))
    )
    user = await _provider().fetch_user(LastFMSession(access_token="k", login="rj"))
    assert user.avatar_url is None
    assert user.name is None


@pytest.mark.asyncio
async def test_refresh_not_supported() -> None:
    with pytest.raises(ProviderError) as exc:
        await _provider().refresh_token("x")
    assert str(exc.value) == "Refresh token is not provided by lastfm"
