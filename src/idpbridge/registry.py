"""Process-wide provider registry.

Applications register providers once at startup with :func:`use_providers` and
look them up by name while handling requests. Lookups go through a
:class:`ProviderResolver`; the default resolver is an in-memory mapping, and
:func:`set_provider_resolver` lets callers plug in their own source.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol, runtime_checkable

from .contracts import Provider, ProviderError

logger = logging.getLogger(__name__)


@runtime_checkable
class ProviderResolver(Protocol):
    """Source of providers consulted by :func:`get_provider`."""

    def get(self, name: str) -> Provider | None: ...

    def get_all(self) -> dict[str, Provider]: ...


class _MapResolver:
    def __init__(self, providers: dict[str, Provider]):
        self._providers = providers

    def get(self, name: str) -> Provider | None:
        return self._providers.get(name)

    def get_all(self) -> dict[str, Provider]:
        return dict(self._providers)


_lock = threading.RLock()
_providers: dict[str, Provider] = {}
_resolver: ProviderResolver = _MapResolver(_providers)


def use_providers(*providers: Provider) -> None:
    """Register providers under their current name, replacing existing entries."""
    with _lock:
        for provider in providers:
            _providers[provider.name] = provider
            logger.debug("Registered provider", extra={"provider": provider.name})


def get_providers() -> dict[str, Provider]:
    """Return a snapshot of every provider known to the active resolver."""
    with _lock:
        return _resolver.get_all()


def get_provider(name: str) -> Provider | None:
    """Return the provider registered under ``name``.

    Raises:
        ProviderError: when the default resolver has no such provider.
    """
    with _lock:
        if isinstance(_resolver, _MapResolver):
            provider = _resolver.get(name)
            if provider is None:
                raise ProviderError(
                    "unknown_provider", f"no provider for {name} exists", status_code=404
                )
            return provider
        return _resolver.get(name)


def delete_provider(name: str) -> None:
    with _lock:
        _providers.pop(name, None)


def clear_providers() -> None:
    """Remove all registered providers and restore the default resolver."""
    global _resolver
    with _lock:
        _providers.clear()
        _resolver = _MapResolver(_providers)


def set_provider_resolver(resolver: ProviderResolver) -> None:
    global _resolver
    with _lock:
        _resolver = resolver
