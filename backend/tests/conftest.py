"""Shared test configuration, pytest markers and fakes."""

import pytest

from models.schemas.company import DiscoveredCompany, JobPosting
from models.schemas.occupation import (
    CoordinatedOccupation,
    OccupationMappingResult,
    OccupationSkill,
    StandardOccupation,
    WorkActivity,
)
from models.schemas.skill import ExtractedSkill
from services.errors import ProviderError
from services.events import EventEmitter, RecordingSink
from services.discovery.base import DiscoveryProvider, ProviderSearchResult
from services.occupations.base import OccupationProvider


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: loads real embedding models or calls live provider APIs (slow)"
    )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_skill(name: str, category: str = "technical", confidence: float = 0.9) -> ExtractedSkill:
    return ExtractedSkill(name=name, category=category, confidence=confidence)


def make_occupation(
    code: str = "17-2141.00",
    title: str = "Mechanical Engineer",
    match_score: float = 0.6,
    confidence: float = 0.9,
    skills: tuple[str, ...] = ("Thermodynamics", "Heat Transfer"),
    activities: tuple[str, ...] = ("Conduct thermal analysis",),
    provider: str = "local_catalog",
    coordinated: bool = True,
    **extra,
):
    fields = dict(
        code=code,
        title=title,
        match_score=match_score,
        confidence=confidence,
        skills=[OccupationSkill(name=s, importance=80) for s in skills],
        work_activities=[WorkActivity(name=a, importance=75) for a in activities],
        provider=provider,
        **extra,
    )
    if coordinated:
        return CoordinatedOccupation(providers=[provider], consensus_score=0.7, **fields)
    return StandardOccupation(**fields)


def make_company(name: str = "Acme Thermal", **fields) -> DiscoveredCompany:
    return DiscoveredCompany(name=name, **fields)


def make_postings(*titles: str) -> list[JobPosting]:
    return [JobPosting(id=str(i), title=t) for i, t in enumerate(titles)]


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeOccupationProvider(OccupationProvider):
    """In-memory provider returning canned occupations."""

    def __init__(
        self,
        name: str,
        occupations: list[StandardOccupation] | None = None,
        priority: int = 1,
        healthy: bool = True,
        configured: bool = True,
        fail: bool = False,
    ) -> None:
        self.name = name
        self.priority = priority
        self.occupations = occupations or []
        self.healthy = healthy
        self.configured = configured
        self.fail = fail
        self.calls = 0

    def is_configured(self) -> bool:
        return self.configured

    async def health_check(self) -> bool:
        return self.healthy

    async def map_skills_to_occupations(self, skills):
        self.calls += 1
        if self.fail:
            raise ProviderError(self.name, "simulated outage")
        return OccupationMappingResult(
            occupations=[o.model_copy(update={"provider": self.name}) for o in self.occupations],
            provider=self.name,
            api_calls=1,
        )


class FakeDiscoveryProvider(DiscoveryProvider):
    """Returns canned companies per search call; records the filters it was given.

    `responses` is consumed one entry per search; the last entry repeats.
    A ProviderError entry is raised instead of returned.
    """

    def __init__(
        self,
        name: str = "fake",
        responses: list | None = None,
        configured: bool = True,
        credits_per_enrichment: int = 0,
        enrich_fail: set[str] | None = None,
    ) -> None:
        self.name = name
        self.responses = responses if responses is not None else [[]]
        self.configured = configured
        self.credits_per_enrichment = credits_per_enrichment
        self.enrich_fail = enrich_fail or set()
        self.searches: list = []
        self.enriched: list[str] = []

    def required_secrets(self) -> list[str]:
        return [f"{self.name}_api_key"]

    def is_configured(self) -> bool:
        return self.configured

    async def health_check(self) -> bool:
        return self.configured

    async def search(self, filters, limit):
        response = self.responses[min(len(self.searches), len(self.responses) - 1)]
        self.searches.append(filters)
        if isinstance(response, ProviderError):
            raise response
        return ProviderSearchResult(companies=list(response)[:limit], api_calls=1)

    async def enrich(self, company):
        if company.name in self.enrich_fail:
            raise ProviderError(self.name, "enrich failed")
        self.enriched.append(company.name)
        return company

@pytest.fixture
def recorder():
    return RecordingSink()


@pytest.fixture
def events(recorder):
    return EventEmitter(sinks=[recorder])
