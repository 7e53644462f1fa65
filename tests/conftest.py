"""
Global pytest configuration and fixtures.
"""

import pytest
from cryptography.fernet import Fernet

from idpbridge.registry import clear_providers


@pytest.fixture(autouse=True)
def reset_registry():
    """Each test starts and ends with an empty provider registry."""
    clear_providers()
    yield
    clear_providers()


@pytest.fixture
def session_key() -> bytes:
    return Fernet.generate_key()


@pytest.fixture(autouse=True)
def clear_idpbridge_env(monkeypatch):
    for name in ("IDPBRIDGE_CONFIG", "IDPBRIDGE_DEBUG", "PAYPAL_ENV"):
        monkeypatch.delenv(name, raising=False)
