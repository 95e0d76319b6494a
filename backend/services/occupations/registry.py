"""Occupation provider registry.

Providers are built from a static list and toggled by settings; there is
no dynamic plugin discovery. The coordinator is a lazily created global
singleton, like the model registry it replaces.
"""

import logging

from config import settings
from services.events import EventEmitter
from services.occupations.base import OccupationProvider
from services.occupations.coordinator import OccupationCoordinator

logger = logging.getLogger(__name__)

PROVIDER_NAMES = ("local_catalog", "esco", "onet")

_coordinator: OccupationCoordinator | None = None


def _create_provider(name: str) -> OccupationProvider:
    """Factory: create a provider by name with deferred imports."""
    if name == "local_catalog":
        from services.occupations.local_catalog import LocalCatalogProvider
        provider = LocalCatalogProvider(priority=settings.local_catalog_priority)
        provider.enabled = settings.local_catalog_enabled
    elif name == "esco":
        from services.occupations.esco import EscoProvider
        provider = EscoProvider()
        provider.enabled = settings.esco_enabled
    elif name == "onet":
        from services.occupations.onet import OnetProvider
        provider = OnetProvider()
        provider.enabled = settings.onet_enabled
    else:
        raise ValueError(f"Unknown occupation provider: {name}")
    return provider


def build_providers(names: tuple[str, ...] = PROVIDER_NAMES) -> list[OccupationProvider]:
    providers = [_create_provider(name) for name in names]
    for p in providers:
        logger.info("Occupation provider %s: enabled=%s configured=%s", p.name, p.enabled, p.is_configured())
    return providers


def get_coordinator(events: EventEmitter | None = None) -> OccupationCoordinator:
    """Get the shared coordinator, creating providers on first access."""
    global _coordinator
    if _coordinator is None:
        _coordinator = OccupationCoordinator(build_providers(), events=events)
    return _coordinator


def provider_status() -> dict[str, bool]:
    """Configured flag per enabled provider, for the health endpoint."""
    return {p.name: p.is_configured() for p in get_coordinator().providers if p.enabled}


def clear() -> None:
    """Drop the shared coordinator. Useful for testing."""
    global _coordinator
    _coordinator = None
