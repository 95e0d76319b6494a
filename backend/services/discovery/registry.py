"""Discovery provider registry.

The primary and fallback providers are named in settings
(`discovery_provider`, `fallback_provider`) and built once per process.
"""

import logging

from config import settings
from services.discovery.base import DiscoveryProvider

logger = logging.getLogger(__name__)

PROVIDER_NAMES = ("apollo", "adzuna")

_providers: tuple[DiscoveryProvider, DiscoveryProvider | None] | None = None


def _create_provider(name: str) -> DiscoveryProvider:
    """Factory: create a provider by name with deferred imports."""
    if name == "apollo":
        from services.discovery.apollo import ApolloProvider
        return ApolloProvider()
    elif name == "adzuna":
        from services.discovery.adzuna import AdzunaProvider
        return AdzunaProvider()
    else:
        raise ValueError(f"Unknown discovery provider: {name}")


def get_providers() -> tuple[DiscoveryProvider, DiscoveryProvider | None]:
    """(primary, fallback) from settings; fallback is None when disabled or same as primary."""
    global _providers
    if _providers is None:
        primary = _create_provider(settings.discovery_provider)
        fallback_name = settings.fallback_provider
        fallback = None
        if fallback_name and fallback_name != primary.name:
            fallback = _create_provider(fallback_name)
        logger.info(
            "Discovery providers: primary=%s (configured=%s) fallback=%s",
            primary.name, primary.is_configured(), fallback.name if fallback else None,
        )
        _providers = (primary, fallback)
    return _providers


def provider_status() -> dict[str, bool]:
    """Configured flag per discovery provider, for the health endpoint."""
    return {p.name: p.is_configured() for p in get_providers() if p is not None}


def clear() -> None:
    """Drop the cached providers. Useful for testing."""
    global _providers
    _providers = None
