"""Shopify provider.

Each provider instance targets one shop (``<shop_name>.myshopify.com``). Before
the code is exchanged, the callback is verified: the ``hmac`` parameter must be
the HMAC-SHA256 of the other callback parameters under the app secret, and
``shop`` must be a valid hostname.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import Field

from ..contracts import Provider, ProviderError
from ..models import ResponseModel
from ..oauth2 import OAuth2Provider, OAuth2Session

logger = logging.getLogger(__name__)

SCOPE_READ_CUSTOMERS = "read_customers"
API_VERSION = "2019-04"

HOSTNAME_PATTERN = re.compile(
    r"^(([a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9\-]*[a-zA-Z0-9])\.)*"
    r"([A-Za-z0-9]|[A-Za-z0-9][A-Za-z0-9\-]*[A-Za-z0-9])$"
)

_SIGNED_PARAMS = ("code", "host", "shop", "state", "timestamp")


def callback_digest(params: Mapping[str, str], secret: str) -> str:
    """Compute the hex HMAC-SHA256 Shopify attaches to OAuth callbacks."""
    message = "&".join(f"{key}={params.get(key, '')}" for key in _SIGNED_PARAMS)
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


class ShopifySession(OAuth2Session):
    hostname: str | None = None
    hmac_digest: str | None = None

    async def authorize(self, provider: Provider, params: Mapping[str, str]) -> str:
        if not isinstance(provider, ShopifyProvider):
            raise ProviderError(
                "invalid_provider", f"{provider.name} cannot authorize a Shopify session"
            )
        expected = callback_digest(params, provider.secret)
        if not hmac.compare_digest(expected, params.get("hmac", "")):
            logger.warning(
                "Shopify callback HMAC mismatch",
                extra={"provider": provider.name, "shop": params.get("shop")},
            )
            raise ProviderError("invalid_request", "Invalid HMAC received")
        if not HOSTNAME_PATTERN.match(params.get("shop", "")):
            raise ProviderError("invalid_request", "Invalid hostname received")

        access_token = await super().authorize(provider, params)
        self.hostname = params.get("shop")
        self.hmac_digest = params.get("hmac")
        return access_token


class _Shop(ResponseModel):
    id: int | None = None
    name: str | None = None
    email: str | None = None
    city: str | None = None
    country: str | None = None
    shop_owner: str | None = None
    myshopify_domain: str | None = None
    plan_display_name: str | None = None


class _ShopResponse(ResponseModel):
    shop: _Shop = Field(default_factory=_Shop)


class ShopifyProvider(OAuth2Provider):
    provider_name = "shopify"
    default_scopes = (SCOPE_READ_CUSTOMERS,)
    scope_separator = ","
    refresh_supported = False
    session_class = ShopifySession

    def __init__(self, *args: Any, shop_name: str = "", **kwargs: Any):
        self.shop_name = shop_name
        self._apply_shop(shop_name)
        super().__init__(*args, **kwargs)

    def _apply_shop(self, shop_name: str) -> None:
        base = f"https://{shop_name}.myshopify.com"
        self.auth_url = f"{base}/admin/oauth/authorize"
        self.token_url = f"{base}/admin/oauth/access_token"
        self.profile_url = f"{base}/admin/api/{API_VERSION}/shop.json"

    def set_shop_name(self, shop_name: str) -> None:
        """Point the provider at another shop, rebuilding its endpoints."""
        self.shop_name = shop_name
        self._apply_shop(shop_name)
        self.config = self._new_config(self.config.scopes)

    def profile_headers(self, access_token: str) -> dict[str, str]:
        return {"X-Shopify-Access-Token": access_token, "Accept": "application/json"}

    def user_from_profile(self, profile: dict[str, Any]) -> dict[str, Any]:
        shop = _ShopResponse.model_validate(profile).shop
        return {
            "user_id": str(shop.id) if shop.id is not None else None,
            "name": shop.name,
            "nick_name": shop.shop_owner,
            "email": shop.email,
            "description": f"{shop.myshopify_domain} ({shop.plan_display_name})",
            "location": f"{shop.city}, {shop.country}",
        }
