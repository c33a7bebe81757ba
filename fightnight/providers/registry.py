from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fightnight.providers.base import BaseProvider

PROVIDER_REGISTRY: dict[str, type[BaseProvider]] = {}


def register_provider(key: str):
    """Decorator to register a provider class under an org key."""
    def decorator(cls):
        cls.org = key
        PROVIDER_REGISTRY[key] = cls
        return cls
    return decorator


def get_provider(key: str | None) -> BaseProvider | None:
    """Return a provider instance for the org key, or None if unregistered."""
    if key and key in PROVIDER_REGISTRY:
        return PROVIDER_REGISTRY[key]()
    return None


def has_provider(key: str | None) -> bool:
    return bool(key) and key in PROVIDER_REGISTRY


def list_provider_keys() -> list[str]:
    """Return all registered org keys."""
    return sorted(PROVIDER_REGISTRY.keys())
