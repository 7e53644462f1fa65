"""YAML configuration for registering providers.

```yaml
session:
  secret_key: ${IDPBRIDGE_SESSION_KEY}
providers:
  github:
    client_id: ${GITHUB_KEY}
    client_secret: ${GITHUB_SECRET}
    callback_url: http://localhost:3000/auth/github/callback
    scopes: [user:email]
  corp-sso:
    type: openid-connect
    client_id: ${OIDC_KEY}
    client_secret: file://secrets/oidc_secret
    callback_url: http://localhost:3000/auth/corp-sso/callback
    options:
      discovery_url: https://sso.example.com/.well-known/openid-configuration
```

String values may reference environment variables (``${NAME}``) or the
contents of a local file (``file://path``).
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator

from .contracts import Provider
from .models import BridgeBaseModel
from .providers import PROVIDERS
from .registry import use_providers
from .web import DEFAULT_MAX_AGE, SESSION_COOKIE_NAME, CookieSessionStore

logger = logging.getLogger(__name__)

__all__ = [
    "BridgeConfigModel",
    "ProviderConfigModel",
    "SessionConfigModel",
    "build_providers",
    "build_session_store",
    "configure_registry",
    "interpolate",
    "load_config",
    "resolve_config_path",
]

CONFIG_ENV_VAR = "IDPBRIDGE_CONFIG"
DEFAULT_CONFIG_FILE = "idpbridge.yml"

ENV_VAR_PATTERN = re.compile(r"\${([A-Za-z0-9_]+)}")
FILE_URL_PATTERN = re.compile(r"file://(.+)")


class SessionConfigModel(BridgeBaseModel):
    secret_key: str | None = None
    cookie_name: str = SESSION_COOKIE_NAME
    max_age: int = DEFAULT_MAX_AGE
    secure: bool = False


class ProviderConfigModel(BridgeBaseModel):
    type: str | None = None
    client_id: str
    client_secret: str = ""
    callback_url: str
    scopes: list[str] = Field(default_factory=list)
    options: dict[str, Any] = Field(default_factory=dict)
    debug: bool = False

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return value


class BridgeConfigModel(BridgeBaseModel):
    providers: dict[str, ProviderConfigModel] = Field(default_factory=dict)
    session: SessionConfigModel = Field(default_factory=SessionConfigModel)


def resolve_env_var(value: str) -> str:
    """Replace ``${NAME}`` references with environment values.

    Raises:
        ValueError: If a referenced variable is not set.
    """
    result = value
    for env_var in ENV_VAR_PATTERN.findall(value):
        if env_var not in os.environ:
            raise ValueError(f"Environment variable {env_var} is not set")
        result = result.replace(f"${{{env_var}}}", os.environ[env_var])
    return result


def resolve_file_url(file_url: str) -> str:
    """Read a ``file://`` reference; relative paths are resolved against the cwd."""
    match = FILE_URL_PATTERN.fullmatch(file_url)
    if not match:
        raise ValueError(f"Invalid file URL format: '{file_url}'")
    raw_path = match.group(1)
    file_path = Path(raw_path) if raw_path.startswith("/") else Path.cwd() / raw_path
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")
    content = file_path.read_text(encoding="utf-8").strip()
    if not content:
        logger.warning("Referenced file is empty", extra={"path": str(file_path)})
    return content


def interpolate(config: Any) -> Any:
    """Recursively resolve env and file references in a loaded document."""
    if isinstance(config, str):
        if config.startswith("file://"):
            return resolve_file_url(config)
        if ENV_VAR_PATTERN.search(config):
            return resolve_env_var(config)
        return config
    if isinstance(config, dict):
        return {k: interpolate(v) for k, v in config.items()}
    if isinstance(config, list):
        return [interpolate(item) for item in config]
    return config


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path:
        return Path(path)
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE))


def load_config(path: str | Path | None = None) -> BridgeConfigModel:
    """Load and validate the configuration file.

    The path is ``path``, else ``$IDPBRIDGE_CONFIG``, else ``./idpbridge.yml``.
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"idpbridge config not found at {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError("idpbridge config must be a mapping")

    data = interpolate(data)

    try:
        return BridgeConfigModel.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid idpbridge config: {exc}") from exc


def build_providers(config: BridgeConfigModel) -> list[Provider]:
    """Instantiate one provider per configured entry.

    Entries named differently from their ``type`` are renamed, so the same
    provider type can be registered more than once.
    """
    providers: list[Provider] = []
    for name, entry in config.providers.items():
        provider_type = entry.type or name
        provider_cls = PROVIDERS.get(provider_type)
        if provider_cls is None:
            raise ValueError(f"Unknown provider type '{provider_type}' for '{name}'")
        supports_scopes = getattr(provider_cls, "supports_scopes", True)
        if entry.scopes and not supports_scopes:
            raise ValueError(f"Provider '{name}' ({provider_type}) does not accept scopes")

        args = [entry.client_id, entry.client_secret, entry.callback_url]
        if supports_scopes:
            args.extend(entry.scopes)
        try:
            provider = provider_cls(*args, **entry.options)
        except TypeError as exc:
            raise ValueError(f"Invalid options for provider '{name}': {exc}") from exc

        if provider.name != name:
            provider.set_name(name)
        if entry.debug:
            provider.debug(True)
        logger.debug("Built provider", extra={"provider": name, "type": provider_type})
        providers.append(provider)
    return providers


def configure_registry(config: BridgeConfigModel) -> list[Provider]:
    """Build the configured providers and register them."""
    providers = build_providers(config)
    use_providers(*providers)
    return providers


def build_session_store(config: BridgeConfigModel) -> CookieSessionStore:
    session = config.session
    if not session.secret_key:
        raise ValueError("session.secret_key is required for the cookie session store")
    return CookieSessionStore(
        session.secret_key,
        cookie_name=session.cookie_name,
        max_age=session.max_age,
        secure=session.secure,
    )
