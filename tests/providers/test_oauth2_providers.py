"""Behaviour specific to individual OAuth2 providers.

Endpoint quirks (extra auth params, headers, query tokens, POST profiles) are
asserted against the recorded requests of the fake HTTP client.
"""

import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from pytest import MonkeyPatch

from idpbridge import OAuth2Session, ProviderError
from idpbridge.providers import (
    AmazonProvider,
    AtlassianProvider,
    Auth0Provider,
    BattlenetProvider,
    BitbucketProvider,
    BoxProvider,
    CognitoProvider,
    DailymotionProvider,
    DigitalOceanProvider,
    DiscordProvider,
    DropboxProvider,
    EveOnlineProvider,
    FitbitProvider,
    GiteeProvider,
    GitLabProvider,
    InstagramProvider,
    LinkedInProvider,
    MicrosoftOnlineProvider,
    NextcloudProvider,
    OktaProvider,
    PatreonProvider,
    PayPalProvider,
    RedditProvider,
    SpotifyProvider,
    StravaProvider,
    TwitchProvider,
    UberProvider,
    VKProvider,
    YandexProvider,
    ZoomProvider,
)
from idpbridge.providers.reddit import DEFAULT_USER_AGENT
from idpbridge.providers.vk import VKSession
from tests.provider_testkit import FakeAsyncHttpClient, FakeResponse, patch_http_client

CALLBACK = "https://app/callback"


def _query(url: str) -> dict[str, list[str]]:
    return parse_qs(urlsplit(url).query)


def _session(access_token: str = "at") -> OAuth2Session:
    return OAuth2Session(auth_url="https://provider/authorize", access_token=access_token)


# ── discord ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_discord_auth_url_has_prompt_and_permissions() -> None:
    provider = DiscordProvider("cid", "secret", CALLBACK, "identify", "bot")
    provider.set_permissions("8")

    session = await provider.begin_auth("state")

    query = _query(session.get_auth_url())
    assert query["prompt"] == ["none"]
    assert query["permissions"] == ["8"]
    assert query["scope"] == ["identify bot"]


@pytest.mark.asyncio
async def test_discord_auth_url_without_permissions() -> None:
    provider = DiscordProvider("cid", "secret", CALLBACK)

    session = await provider.begin_auth("state")

    query = _query(session.get_auth_url())
    assert "permissions" not in query
    assert query["scope"] == ["identify"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "avatar,expected",
    [
        ("a_animated", "https://media.discordapp.net/avatars/42/a_animated.gif"),
        ("still", "https://media.discordapp.net/avatars/42/still.jpg"),
        (None, None),
    ],
)
async def test_discord_avatar_url(
    monkeypatch: MonkeyPatch, avatar: str | None, expected: str | None
) -> None:
    fake = FakeAsyncHttpClient(
        default_get_response=FakeResponse(
            200, {"id": "42", "username": "wumpus", "email": "w@example.com", "avatar": avatar}
        )
    )
    patch_http_client(monkeypatch, fake)
    provider = DiscordProvider("cid", "secret", CALLBACK)

    user = await provider.fetch_user(_session())

    assert user.user_id == "42"
    assert user.name == "wumpus"
    assert user.avatar_url == expected


# ── bitbucket ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_bitbucket_uses_primary_confirmed_email(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "2.0/user/emails": FakeResponse(
                200,
                {
                    "values": [
                        {"email": "pending@example.com", "is_primary": True, "is_confirmed": False},
                        {"email": "other@example.com", "is_primary": False, "is_confirmed": True},
                        {"email": "main@example.com", "is_primary": True, "is_confirmed": True},
                    ]
                },
            ),
            "2.0/user": FakeResponse(
                200,
                {
                    "uuid": "{abc}",
                    "username": "bucky",
                    "display_name": "Bucky",
                    "links": {"avatar": {"href": "https://bitbucket/avatar.png"}},
                },
            ),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = BitbucketProvider("cid", "secret", CALLBACK)

    user = await provider.fetch_user(_session())

    assert user.user_id == "{abc}"
    assert user.nick_name == "bucky"
    assert user.email == "main@example.com"
    assert "email" not in user.raw_data
    assert user.avatar_url == "https://bitbucket/avatar.png"
    assert fake.get_calls == 2


@pytest.mark.asyncio
async def test_bitbucket_without_confirmed_email(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "2.0/user/emails": FakeResponse(200, {"values": []}),
            "2.0/user": FakeResponse(200, {"uuid": "{abc}", "nickname": "bucky"}),
        }
    )
    patch_http_client(monkeypatch, fake)

    user = await BitbucketProvider("cid", "secret", CALLBACK).fetch_user(_session())

    assert user.email is None
    assert user.nick_name == "bucky"


# ── twitch ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_twitch_sends_client_id_and_reads_first_user(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        default_get_response=FakeResponse(
            200,
            {
                "data": [
                    {
                        "id": "141981764",
                        "login": "twitchdev",
                        "display_name": "TwitchDev",
                        "email": "dev@example.com",
                        "profile_image_url": "https://static/twitchdev.png",
                    }
                ]
            },
        )
    )
    patch_http_client(monkeypatch, fake)
    provider = TwitchProvider("twitch-client", "secret", CALLBACK)

    user = await provider.fetch_user(_session())

    headers = fake.last("GET").headers
    assert headers["Client-Id"] == "twitch-client"
    assert headers["Authorization"] == "Bearer at"
    assert user.user_id == "141981764"
    assert user.name == "twitchdev"
    assert user.nick_name == "TwitchDev"
    assert user.email == "dev@example.com"


@pytest.mark.asyncio
async def test_twitch_empty_user_list_is_an_error(monkeypatch: MonkeyPatch) -> None:
    patch_http_client(
        monkeypatch, FakeAsyncHttpClient(default_get_response=FakeResponse(200, {"data": []}))
    )

    with pytest.raises(ProviderError, match="returned no user"):
        await TwitchProvider("cid", "secret", CALLBACK).fetch_user(_session())


def test_twitch_default_scope() -> None:
    provider = TwitchProvider("cid", "secret", CALLBACK)
    assert provider.config.scopes == ["user:read:email"]


# ── strava ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_strava_scopes_are_comma_separated() -> None:
    provider = StravaProvider("cid", "secret", CALLBACK, "read", "activity:read")

    session = await provider.begin_auth("state")

    assert _query(session.get_auth_url())["scope"] == ["read,activity:read"]


@pytest.mark.asyncio
async def test_strava_profile(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        default_get_response=FakeResponse(
            200,
            {
                "id": 1234567890987654400,
                "username": "marianne_t",
                "firstname": "Marianne",
                "lastname": "Teutenberg",
                "city": "San Francisco",
                "state": "CA",
                "country": "US",
                "sex": "F",
                "profile": "https://strava/large.jpg",
            },
        )
    )
    patch_http_client(monkeypatch, fake)

    user = await StravaProvider("cid", "secret", CALLBACK).fetch_user(_session("strava-at"))

    assert fake.last("GET").params == {"access_token": "strava-at"}
    assert "Authorization" not in fake.last("GET").headers
    assert user.user_id == "1234567890987654400"
    assert user.name == "Marianne Teutenberg"
    assert json.loads(user.location or "") == {
        "city": "San Francisco",
        "region": "CA",
        "country": "US",
    }
    assert json.loads(user.description or "") == {"gender": "F"}


# ── reddit ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_reddit_auth_url_requests_duration() -> None:
    provider = RedditProvider("cid", "secret", CALLBACK, duration="temporary")

    session = await provider.begin_auth("state")

    query = _query(session.get_auth_url())
    assert query["duration"] == ["temporary"]
    assert query["scope"] == ["identity"]


@pytest.mark.asyncio
async def test_reddit_exchange_uses_basic_auth(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        post_response=FakeResponse(200, {"access_token": "reddit-at", "expires_in": 3600})
    )
    patch_http_client(monkeypatch, fake)
    provider = RedditProvider("cid", "secret", CALLBACK)
    session = await provider.begin_auth("state")

    token = await session.authorize(provider, {"code": "the-code"})

    request = fake.last("POST")
    assert token == "reddit-at"
    assert isinstance(request.kwargs["auth"], httpx.BasicAuth)
    assert "client_secret" not in request.data
    assert request.data["code"] == "the-code"


@pytest.mark.asyncio
async def test_reddit_profile_sends_user_agent(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        default_get_response=FakeResponse(
            200, {"id": "t2_1", "name": "spez", "icon_img": "https://reddit/icon.png"}
        )
    )
    patch_http_client(monkeypatch, fake)
    provider = RedditProvider("cid", "secret", CALLBACK, user_agent="web:test:v1 (by /u/me)")

    user = await provider.fetch_user(_session())

    assert fake.last("GET").headers["User-Agent"] == "web:test:v1 (by /u/me)"
    assert user.nick_name == "spez"
    assert user.avatar_url == "https://reddit/icon.png"


@pytest.mark.asyncio
async def test_reddit_default_user_agent_names_the_library(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(default_get_response=FakeResponse(200, {"id": "t2_1"}))
    patch_http_client(monkeypatch, fake)

    await RedditProvider("cid", "secret", CALLBACK).fetch_user(_session())

    assert fake.last("GET").headers["User-Agent"] == DEFAULT_USER_AGENT
    assert DEFAULT_USER_AGENT.startswith("idpbridge:")


# ── dropbox ──────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_dropbox_profile_is_a_post(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        post_responses={
            "get_current_account": FakeResponse(
                200,
                {
                    "account_id": "dbid:AAH4f99",
                    "email": "franz@example.com",
                    "country": "US",
                    "name": {
                        "display_name": "Franz Ferdinand (Personal)",
                        "familiar_name": "Franz",
                        "given_name": "Franz",
                        "surname": "Ferdinand",
                    },
                },
            )
        }
    )
    patch_http_client(monkeypatch, fake)

    user = await DropboxProvider("cid", "secret", CALLBACK).fetch_user(_session("dbx"))

    assert fake.get_calls == 0
    assert fake.last("POST").headers == {"Authorization": "Bearer dbx"}
    assert user.user_id == "dbid:AAH4f99"
    assert user.name == "Franz Ferdinand (Personal)"
    assert user.first_name == "Franz"
    assert user.last_name == "Ferdinand"
    assert user.location == "US"


@pytest.mark.asyncio
async def test_dropbox_profile_error(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        post_responses={"get_current_account": FakeResponse(401, {"error": "expired"})}
    )
    patch_http_client(monkeypatch, fake)

    with pytest.raises(ProviderError) as exc:
        await DropboxProvider("cid", "secret", CALLBACK).fetch_user(_session())
    assert exc.value.status_code == 401


# ── auth0 ────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_auth0_endpoints_derive_from_domain(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "tenant.eu.auth0.com/userinfo": FakeResponse(
                200, {"sub": "auth0|123", "email": "a@example.com", "nickname": "a"}
            )
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = Auth0Provider("cid", "secret", CALLBACK, domain="https://tenant.eu.auth0.com/")

    session = await provider.begin_auth("state")
    user = await provider.fetch_user(_session())

    assert session.get_auth_url().startswith("https://tenant.eu.auth0.com/oauth/authorize?")
    assert _query(session.get_auth_url())["scope"] == ["profile openid"]
    assert provider.token_url == "https://tenant.eu.auth0.com/oauth/token"
    assert user.user_id == "auth0|123"
    assert user.nick_name == "a"


# ── vk ───────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_vk_email_comes_from_token_response(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        post_response=FakeResponse(
            200,
            {"access_token": "vk-at", "expires_in": 0, "user_id": 210700286, "email": "vk@example.com"},
        ),
        get_responses={
            "users.get": FakeResponse(
                200,
                {
                    "response": [
                        {
                            "id": 210700286,
                            "first_name": "Lindsey",
                            "last_name": "Stirling",
                            "photo_200": "https://vk/photo.jpg",
                        }
                    ]
                },
            )
        },
    )
    patch_http_client(monkeypatch, fake)
    provider = VKProvider("cid", "secret", CALLBACK)
    session = await provider.begin_auth("state")

    await session.authorize(provider, {"code": "c"})
    restored = provider.unmarshal_session(session.marshal())
    user = await provider.fetch_user(restored)

    assert isinstance(restored, VKSession)
    assert restored.user_id == "210700286"
    assert user.email == "vk@example.com"
    assert user.name == "Lindsey Stirling"
    assert user.user_id == "210700286"
    assert fake.last("GET").params["v"] == "5.131"
    assert _query(session.get_auth_url())["scope"] == ["email"]


@pytest.mark.asyncio
async def test_vk_rejects_plain_oauth2_session() -> None:
    provider = VKProvider("cid", "secret", CALLBACK)

    with pytest.raises(ProviderError, match="cannot use a session"):
        await provider.fetch_user(_session())


# ── paypal ───────────────────────────────────────────────────────────────────


def test_paypal_sandbox_from_environment(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("PAYPAL_ENV", "sandbox")

    provider = PayPalProvider("cid", "secret", CALLBACK)

    assert provider.environment == "sandbox"
    assert provider.auth_url.startswith("https://www.sandbox.paypal.com/")
    assert provider.token_url.endswith("/tokenservice")


def test_paypal_explicit_environment_wins(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("PAYPAL_ENV", "sandbox")

    provider = PayPalProvider("cid", "secret", CALLBACK, environment="production")

    assert provider.auth_url.startswith("https://www.paypal.com/")


@pytest.mark.asyncio
async def test_paypal_userinfo(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        default_get_response=FakeResponse(
            200,
            {
                "user_id": "https://www.paypal.com/webapps/auth/identity/user/abc",
                "name": "Pay Pal",
                "given_name": "Pay",
                "family_name": "Pal",
                "email": "pp@example.com",
                "address": {"locality": "San Jose", "country": "US"},
            },
        )
    )
    patch_http_client(monkeypatch, fake)

    user = await PayPalProvider("cid", "secret", CALLBACK).fetch_user(_session())

    assert fake.last("GET").params == {"schema": "openid"}
    assert user.first_name == "Pay"
    assert user.location == "San Jose"


# ── profile mappings ─────────────────────────────────────────────────────────

PROFILE_CASES = [
    pytest.param(
        lambda: AmazonProvider("cid", "secret", CALLBACK),
        {"user_id": "amzn1.account.X", "name": "Amy", "email": "amy@example.com",
         "postal_code": "98109"},
        {"user_id": "amzn1.account.X", "email": "amy@example.com", "name": "Amy",
         "avatar_url": None, "location": "98109"},
        id="amazon",
    ),
    pytest.param(
        lambda: AtlassianProvider("cid", "secret", CALLBACK),
        {"account_id": "557058:abc", "name": "Ann Lass", "nickname": "ann",
         "email": "ann@example.com", "picture": "https://atl/ann.png",
         "extended_profile": {"location": "Sydney", "job_title": "Engineer"}},
        {"user_id": "557058:abc", "email": "ann@example.com", "name": "Ann Lass",
         "avatar_url": "https://atl/ann.png", "location": "Sydney",
         "description": "Engineer"},
        id="atlassian",
    ),
    pytest.param(
        lambda: BattlenetProvider("cid", "secret", CALLBACK),
        {"id": 12345, "battletag": "Hero#1234"},
        {"user_id": "12345", "email": None, "name": None, "avatar_url": None,
         "nick_name": "Hero#1234"},
        id="battlenet",
    ),
    pytest.param(
        lambda: BoxProvider("cid", "secret", CALLBACK),
        {"id": "11446498", "name": "Box User", "login": "box@example.com",
         "address": "Redwood City", "avatar_url": "https://box/avatar.png"},
        {"user_id": "11446498", "email": "box@example.com", "name": "Box User",
         "avatar_url": "https://box/avatar.png", "location": "Redwood City"},
        id="box",
    ),
    pytest.param(
        lambda: CognitoProvider(
            "cid", "secret", CALLBACK, base_url="https://pool.auth.example.com"
        ),
        {"sub": "c-1", "email": "cog@example.com", "name": "Cog Nito",
         "preferred_username": "cog", "picture": "https://cog/pic.png"},
        {"user_id": "c-1", "email": "cog@example.com", "name": "Cog Nito",
         "avatar_url": "https://cog/pic.png", "nick_name": "cog"},
        id="cognito",
    ),
    pytest.param(
        lambda: DailymotionProvider("cid", "secret", CALLBACK),
        {"id": "x1", "email": "dm@example.com", "fullname": "Daily Motion",
         "username": "daily", "avatar_720_url": "https://dm/720.png", "city": "Paris"},
        {"user_id": "x1", "email": "dm@example.com", "name": "Daily Motion",
         "avatar_url": "https://dm/720.png", "location": "Paris"},
        id="dailymotion",
    ),
    pytest.param(
        lambda: DigitalOceanProvider("cid", "secret", CALLBACK),
        {"account": {"uuid": "do-uuid", "email": "do@example.com", "email_verified": True}},
        {"user_id": "do-uuid", "email": "do@example.com", "name": None, "avatar_url": None},
        id="digitalocean",
    ),
    pytest.param(
        lambda: EveOnlineProvider("cid", "secret", CALLBACK),
        {"CharacterID": 95465499, "CharacterName": "CCP Bartender",
         "CharacterOwnerHash": "hash"},
        {"user_id": "95465499", "email": None, "name": "CCP Bartender",
         "avatar_url": None, "nick_name": "CCP Bartender"},
        id="eveonline",
    ),
    pytest.param(
        lambda: FitbitProvider("cid", "secret", CALLBACK),
        {"user": {"encodedId": "ABC123", "fullName": "Fit Bit", "displayName": "fitty",
                  "avatar": "https://fitbit/avatar.png", "country": "US"}},
        {"user_id": "ABC123", "email": None, "name": "Fit Bit",
         "avatar_url": "https://fitbit/avatar.png", "location": "US"},
        id="fitbit",
    ),
    pytest.param(
        lambda: GiteeProvider("cid", "secret", CALLBACK),
        {"id": 77, "login": "gitee-user", "name": "Gi Tee", "email": "gitee@example.com",
         "avatar_url": "https://gitee/avatar.png", "bio": "hello"},
        {"user_id": "77", "email": "gitee@example.com", "name": "Gi Tee",
         "avatar_url": "https://gitee/avatar.png", "description": "hello"},
        id="gitee",
    ),
    pytest.param(
        lambda: GitLabProvider("cid", "secret", CALLBACK),
        {"id": 1, "username": "john_smith", "name": "John Smith", "email": "john@example.com",
         "avatar_url": "https://gitlab/john.png", "location": "Berlin"},
        {"user_id": "1", "email": "john@example.com", "name": "John Smith",
         "avatar_url": "https://gitlab/john.png", "nick_name": "john_smith"},
        id="gitlab",
    ),
    pytest.param(
        lambda: InstagramProvider("cid", "secret", CALLBACK),
        {"id": "17841405", "username": "insta", "account_type": "PERSONAL",
         "media_count": 3},
        {"user_id": "17841405", "email": None, "name": None, "avatar_url": None,
         "nick_name": "insta"},
        id="instagram",
    ),
    pytest.param(
        lambda: LinkedInProvider("cid", "secret", CALLBACK),
        {"id": "li-1", "firstName": "Link", "lastName": "Edin",
         "emailAddress": "li@example.com", "headline": "Networker",
         "pictureUrl": "https://li/pic.png", "location": {"name": "Dublin"}},
        {"user_id": "li-1", "email": "li@example.com", "name": "Link Edin",
         "avatar_url": "https://li/pic.png", "location": "Dublin"},
        id="linkedin",
    ),
    pytest.param(
        lambda: MicrosoftOnlineProvider("cid", "secret", CALLBACK),
        {"id": "ms-1", "displayName": "Adele Vance", "givenName": "Adele",
         "surname": "Vance", "mail": None, "userPrincipalName": "adele@contoso.com"},
        {"user_id": "ms-1", "email": "adele@contoso.com", "name": "Adele Vance",
         "avatar_url": None, "last_name": "Vance"},
        id="microsoftonline",
    ),
    pytest.param(
        lambda: NextcloudProvider(
            "cid", "secret", CALLBACK, server_url="https://cloud.example.com"
        ),
        {"ocs": {"data": {"id": "nc-admin", "email": "nc@example.com",
                          "display-name": "Next Cloud", "address": "Stuttgart"}}},
        {"user_id": "nc-admin", "email": "nc@example.com", "name": "Next Cloud",
         "avatar_url": None, "location": "Stuttgart"},
        id="nextcloud",
    ),
    pytest.param(
        lambda: OktaProvider("cid", "secret", CALLBACK, org_url="https://dev-1.okta.com"),
        {"sub": "00u1", "email": "okta@example.com", "name": "Ok Ta",
         "given_name": "Ok", "family_name": "Ta", "address": {"locality": "Denver"}},
        {"user_id": "00u1", "email": "okta@example.com", "name": "Ok Ta",
         "avatar_url": None, "location": "Denver"},
        id="okta",
    ),
    pytest.param(
        lambda: PatreonProvider("cid", "secret", CALLBACK),
        {"data": {"id": "pat-1", "attributes": {
            "email": "pat@example.com", "full_name": "Pat Reon", "vanity": "patty",
            "image_url": "https://patreon/pat.png"}}},
        {"user_id": "pat-1", "email": "pat@example.com", "name": "Pat Reon",
         "avatar_url": "https://patreon/pat.png", "nick_name": "patty"},
        id="patreon",
    ),
    pytest.param(
        lambda: SpotifyProvider("cid", "secret", CALLBACK),
        {"id": "wizzler", "display_name": "Wiz", "email": "wiz@example.com",
         "country": "SE", "images": [{"url": "https://spotify/first.jpg"},
                                     {"url": "https://spotify/second.jpg"}]},
        {"user_id": "wizzler", "email": "wiz@example.com", "name": "Wiz",
         "avatar_url": "https://spotify/first.jpg", "location": "SE"},
        id="spotify",
    ),
    pytest.param(
        lambda: UberProvider("cid", "secret", CALLBACK),
        {"uuid": "uber-1", "first_name": "Uber", "last_name": "Rider",
         "email": "uber@example.com", "picture": "https://uber/pic.png"},
        {"user_id": "uber-1", "email": "uber@example.com", "name": "Uber",
         "avatar_url": "https://uber/pic.png", "last_name": "Rider"},
        id="uber",
    ),
    pytest.param(
        lambda: YandexProvider("cid", "secret", CALLBACK),
        {"id": "ya-1", "login": "ivan", "default_email": "ivan@yandex.ru",
         "real_name": "Ivan Ivanov", "default_avatar_id": "131652443",
         "is_avatar_empty": False},
        {"user_id": "ya-1", "email": "ivan@yandex.ru", "name": "Ivan Ivanov",
         "avatar_url": "https://avatars.yandex.net/get-yapic/131652443/islands-200"},
        id="yandex",
    ),
    pytest.param(
        lambda: ZoomProvider("cid", "secret", CALLBACK),
        {"id": "z-1", "first_name": "Zoe", "last_name": "Oom", "email": "zoe@example.com",
         "pic_url": "https://zoom/zoe.png", "location": "San Jose"},
        {"user_id": "z-1", "email": "zoe@example.com", "name": "Zoe Oom",
         "avatar_url": "https://zoom/zoe.png", "location": "San Jose"},
        id="zoom",
    ),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("factory,profile,expected", PROFILE_CASES)
async def test_profile_maps_to_user(
    monkeypatch: MonkeyPatch, factory, profile: dict, expected: dict
) -> None:
    fake = FakeAsyncHttpClient(default_get_response=FakeResponse(200, profile))
    patch_http_client(monkeypatch, fake)
    provider = factory()

    user = await provider.fetch_user(_session())

    assert user.provider == provider.name
    assert user.access_token == "at"
    assert user.raw_data == profile
    for field_name, value in expected.items():
        assert getattr(user, field_name) == value, field_name


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "factory",
    [
        lambda: AmazonProvider("cid", "secret", CALLBACK),
        lambda: BattlenetProvider("cid", "secret", CALLBACK),
        lambda: DailymotionProvider("cid", "secret", CALLBACK),
        lambda: InstagramProvider("cid", "secret", CALLBACK),
    ],
    ids=["amazon", "battlenet", "dailymotion", "instagram"],
)
async def test_token_sent_as_query_param(monkeypatch: MonkeyPatch, factory) -> None:
    fake = FakeAsyncHttpClient(default_get_response=FakeResponse(200, {}))
    patch_http_client(monkeypatch, fake)

    await factory().fetch_user(_session())

    request = fake.last("GET")
    assert request.params["access_token"] == "at"
    assert "Authorization" not in request.headers


# ── atlassian ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_atlassian_auth_url_has_audience_and_consent_prompt() -> None:
    provider = AtlassianProvider("cid", "secret", CALLBACK)

    session = await provider.begin_auth("state")

    query = _query(session.get_auth_url())
    assert query["audience"] == ["api.atlassian.com"]
    assert query["prompt"] == ["consent"]
    assert query["scope"] == ["read:me"]


# ── yandex ───────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_yandex_uses_oauth_authorization_scheme(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(default_get_response=FakeResponse(200, {"id": "ya-1"}))
    patch_http_client(monkeypatch, fake)

    await YandexProvider("cid", "secret", CALLBACK).fetch_user(_session("ya-token"))

    assert fake.last("GET").headers["Authorization"] == "OAuth ya-token"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "avatar_fields",
    [
        {"default_avatar_id": "131652443", "is_avatar_empty": True},
        {"is_avatar_empty": False},
    ],
)
async def test_yandex_skips_placeholder_avatar(
    monkeypatch: MonkeyPatch, avatar_fields: dict
) -> None:
    fake = FakeAsyncHttpClient(
        default_get_response=FakeResponse(200, {"id": "ya-1", **avatar_fields})
    )
    patch_http_client(monkeypatch, fake)

    user = await YandexProvider("cid", "secret", CALLBACK).fetch_user(_session())

    assert user.avatar_url is None


# ── gitee ────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_gitee_falls_back_to_primary_email(monkeypatch: MonkeyPatch) -> None:
    profile = {"id": 77, "login": "gitee-user", "email": None}
    fake = FakeAsyncHttpClient(
        get_responses={
            "api/v5/emails": FakeResponse(
                200,
                [
                    {"email": "backup@example.com", "state": "confirmed", "scope": ["committed"]},
                    {"email": "main@example.com", "state": "confirmed",
                     "scope": ["primary", "committed"]},
                ],
            ),
            "api/v5/user": FakeResponse(200, profile),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = GiteeProvider("cid", "secret", CALLBACK, "user_info", "emails")

    user = await provider.fetch_user(_session())

    assert user.email == "main@example.com"
    assert user.raw_data == profile
    assert fake.get_calls_by_route == {"api/v5/user": 1, "api/v5/emails": 1}
    assert fake.last("GET").params == {"access_token": "at"}


@pytest.mark.asyncio
async def test_gitee_skips_email_lookup_without_email_scope(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={"api/v5/user": FakeResponse(200, {"id": 77, "login": "gitee-user"})}
    )
    patch_http_client(monkeypatch, fake)

    user = await GiteeProvider("cid", "secret", CALLBACK).fetch_user(_session())

    assert user.email is None
    assert fake.get_calls == 1


@pytest.mark.asyncio
async def test_gitee_without_primary_email(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "api/v5/emails": FakeResponse(200, [{"email": "x@example.com", "scope": []}]),
            "api/v5/user": FakeResponse(200, {"id": 77}),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = GiteeProvider("cid", "secret", CALLBACK, "emails")

    user = await provider.fetch_user(_session())

    assert user.email is None
    assert fake.get_calls == 2


# ── nextcloud ────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_nextcloud_sends_ocs_header(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(default_get_response=FakeResponse(200, {"ocs": {"data": {}}}))
    patch_http_client(monkeypatch, fake)
    provider = NextcloudProvider("cid", "secret", CALLBACK, server_url="https://cloud.example.com/")

    await provider.fetch_user(_session())

    request = fake.last("GET")
    assert request.url == "https://cloud.example.com/ocs/v2.php/cloud/user?format=json"
    assert request.headers["OCS-APIRequest"] == "true"
