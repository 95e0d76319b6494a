"""Abstract base class for organization discovery providers."""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from models.schemas.company import DiscoveredCompany, SearchFilters


class ProviderSearchResult(BaseModel):
    companies: list[DiscoveredCompany] = []
    api_calls: int = 0


class DiscoveryProvider(ABC):
    """Finds candidate organizations for a search filter.

    Subclasses must implement:
        - name: identifier used in the registry, stats and discovery_source
        - required_secrets(): settings fields the provider needs
        - health_check(): cheap reachability probe, never raises
        - search(filters, limit): normalized candidates; raises ProviderError
          on timeout, non-2xx or malformed payload

    enrich() is optional; the default returns the company unchanged.
    """

    name: str = ""
    version: str = "1.0.0"
    credits_per_enrichment: int = 0  # API calls spent by one enrich() call

    def required_secrets(self) -> list[str]:
        return []

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def health_check(self) -> bool:
        """Return True when the provider can currently serve requests."""

    @abstractmethod
    async def search(self, filters: SearchFilters, limit: int) -> ProviderSearchResult:
        """Return up to `limit` candidate companies matching the filters."""

    async def enrich(self, company: DiscoveredCompany) -> DiscoveredCompany:
        """Add contact, postings, technologies and signals to one candidate."""
        return company

    async def aclose(self) -> None:
        """Release network resources."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r} configured={self.is_configured()}>"
