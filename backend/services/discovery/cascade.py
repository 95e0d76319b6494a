"""Cascading search relaxation.

Levels run strictly in order and only while the candidate pool is short:

    1. filters as built
    2. no results at all: widen the location (region + country, then country)
    3. under the minimum: keep about half the industry keywords
    4. still under the minimum: drop industry keywords, location only

Results from every level that ran are accumulated and de-duplicated.
"""

import logging

from pydantic import BaseModel

from config import settings
from models.schemas.company import DiscoveredCompany, SearchFilters
from services.discovery.base import DiscoveryProvider
from services.discovery.dedup import dedupe_companies
from services.discovery.filters import broader_locations
from services.errors import NoResultsError
from services.events import EventEmitter, default_emitter

logger = logging.getLogger(__name__)


class CascadeOutcome(BaseModel):
    companies: list[DiscoveredCompany] = []
    level: int = 1  # deepest level that ran
    filters: SearchFilters = SearchFilters()  # filters of the deepest level
    api_calls: int = 0


async def run_cascade(
    provider: DiscoveryProvider,
    filters: SearchFilters,
    limit: int,
    min_viable: int | None = None,
    events: EventEmitter | None = None,
) -> CascadeOutcome:
    """Search with progressively relaxed filters until the pool is viable.

    Raises:
        NoResultsError: every level that ran returned zero candidates.
        ProviderError: propagated from the provider's search.
    """
    min_viable = settings.min_viable_companies if min_viable is None else min_viable
    events = events or default_emitter()
    outcome = CascadeOutcome(filters=filters)
    pool: list[DiscoveredCompany] = []

    async def search_level(level: int, level_filters: SearchFilters) -> int:
        result = await provider.search(level_filters, limit)
        pool.extend(result.companies)
        outcome.api_calls += result.api_calls
        outcome.level = level
        outcome.filters = level_filters
        events.emit(
            "discovery_level",
            provider=provider.name,
            level=level,
            locations=level_filters.locations,
            industries=len(level_filters.industry_keywords),
            found=len(result.companies),
        )
        logger.info("Cascade level %d via %s: %d candidates", level, provider.name, len(result.companies))
        return len(result.companies)

    # Level 1
    await search_level(1, filters)

    # Level 2
    if not pool and filters.locations:
        for location in broader_locations(filters.locations[0]):
            if await search_level(2, filters.model_copy(update={"locations": [location]})):
                break

    base = outcome.filters

    # Level 3
    keywords = base.industry_keywords
    if len(dedupe_companies(pool)) < min_viable and len(keywords) > 1:
        half = keywords[: max(1, len(keywords) // 2)]
        await search_level(3, base.model_copy(update={"industry_keywords": half}))

    # Level 4
    if len(dedupe_companies(pool)) < min_viable and keywords:
        await search_level(4, base.model_copy(update={"industry_keywords": []}))

    outcome.companies = dedupe_companies(pool)
    if not outcome.companies:
        raise NoResultsError(f"No companies found via {provider.name} after {outcome.level} search levels")
    return outcome
