import pytest
from pytest import MonkeyPatch

from idpbridge import OAuth2Session, ProviderError
from idpbridge.providers import GitHubProvider
from tests.provider_testkit import FakeAsyncHttpClient, FakeResponse, patch_http_client

PROFILE = {
    "id": 123,
    "login": "octocat",
    "name": "The Octocat",
    "email": None,
    "bio": "hi",
    "avatar_url": "https://avatars/octocat",
    "location": "SF",
}


def _session() -> OAuth2Session:
    return OAuth2Session(auth_url="https://github.com/login/oauth/authorize", access_token="at")


@pytest.mark.asyncio
async def test_fetch_user_uses_primary_verified_email(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "user/emails": FakeResponse(
                200,
                [
                    {"email": "old@example.com", "primary": False, "verified": True},
                    {"email": "unverified@example.com", "primary": True, "verified": False},
                    {"email": "octo@example.com", "primary": True, "verified": True},
                ],
            ),
            "api.github.com/user": FakeResponse(200, dict(PROFILE)),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = GitHubProvider("cid", "secret", "https://app/callback", "user:email")

    user = await provider.fetch_user(_session())

    assert user.user_id == "123"
    assert user.nick_name == "octocat"
    assert user.name == "The Octocat"
    assert user.email == "octo@example.com"
    assert user.raw_data == PROFILE
    assert user.description == "hi"
    assert fake.get_calls_by_route["user/emails"] == 1
    assert fake.last("GET").headers["Accept"] == "application/vnd.github+json"


@pytest.mark.asyncio
async def test_email_lookup_skipped_without_email_scope(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(get_responses={"api.github.com/user": FakeResponse(200, PROFILE)})
    patch_http_client(monkeypatch, fake)
    provider = GitHubProvider("cid", "secret", "https://app/callback", "repo")

    user = await provider.fetch_user(_session())

    assert user.email is None
    assert fake.get_calls == 1


@pytest.mark.asyncio
async def test_email_lookup_skipped_when_profile_has_email(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "api.github.com/user": FakeResponse(200, {**PROFILE, "email": "public@example.com"})
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = GitHubProvider("cid", "secret", "https://app/callback", "user")

    user = await provider.fetch_user(_session())

    assert user.email == "public@example.com"
    assert fake.get_calls == 1


@pytest.mark.asyncio
async def test_email_endpoint_failure_propagates(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "user/emails": FakeResponse(403, {"message": "forbidden"}),
            "api.github.com/user": FakeResponse(200, PROFILE),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = GitHubProvider("cid", "secret", "https://app/callback", "user:email")

    with pytest.raises(ProviderError) as exc:
        await provider.fetch_user(_session())
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_enterprise_urls(monkeypatch: MonkeyPatch) -> None:
    fake = FakeAsyncHttpClient(
        get_responses={
            "ghe.example.com/api/v3/user/emails": FakeResponse(
                200, [{"email": "e@corp", "primary": True, "verified": True}]
            ),
            "ghe.example.com/api/v3/user": FakeResponse(200, PROFILE),
        }
    )
    patch_http_client(monkeypatch, fake)
    provider = GitHubProvider.with_urls(
        "cid",
        "secret",
        "https://app/callback",
        "https://ghe.example.com/login/oauth/authorize",
        "https://ghe.example.com/login/oauth/access_token",
        "https://ghe.example.com/api/v3/user",
        "user:email",
    )

    session = await provider.begin_auth("s")
    assert session.get_auth_url().startswith("https://ghe.example.com/login/oauth/authorize?")
    user = await provider.fetch_user(_session())
    assert user.email == "e@corp"
