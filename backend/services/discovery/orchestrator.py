"""Discovery orchestrator: course context in, ranked sponsor candidates out.

Flow:
    CourseContext
      ├─ build_search_filters()            → SearchFilters
      ├─ run_cascade(primary | fallback)   → raw candidates (levels 1-4)
      ├─ dedupe_companies()                → unique candidates
      ├─ enrich_candidates()               → contacts, postings, signals
      ├─ distance filter + sort            → within radius, nearest first
      └─ SimilarityRanker.rank()           → kept above adaptive threshold
                       ↓
         DiscoveryResult(companies[:target_count], stats)
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from config import settings
from models.schemas.company import CourseContext, DiscoveredCompany
from models.schemas.match import DiscoveryResult, DiscoveryStats
from services.discovery.base import DiscoveryProvider
from services.discovery.cascade import CascadeOutcome, run_cascade
from services.discovery.dedup import dedupe_companies
from services.discovery.enrichment import enrich_candidates
from services.discovery.filters import build_search_filters
from services.errors import ConfigurationError, NoResultsError, ProviderError
from services.events import EventEmitter, default_emitter
from services.geo import distance_between
from services.similarity import SimilarityRanker

logger = logging.getLogger(__name__)

DistanceFn = Callable[[str | None, str | None], float | None]


def apply_distance(
    companies: list[DiscoveredCompany],
    origin: str,
    radius_miles: float,
    distance_fn: DistanceFn = distance_between,
) -> tuple[list[DiscoveredCompany], int]:
    """Attach distances, drop known distances beyond the radius, nearest first.

    Unknown distances are kept after the known ones. The sort is stable so
    ties keep enrichment order. Returns the companies and the number dropped.
    """
    if not origin:
        return companies, 0

    measured = [
        c.model_copy(update={"distance_miles": distance_fn(origin, c.location or c.city)})
        for c in companies
    ]
    within = [c for c in measured if c.distance_miles is None or c.distance_miles <= radius_miles]
    within.sort(key=lambda c: (c.distance_miles is None, c.distance_miles or 0.0))
    dropped = len(measured) - len(within)
    if dropped:
        logger.info("Dropped %d candidates beyond %.0f miles of %r", dropped, radius_miles, origin)
    return within, dropped


class DiscoveryOrchestrator:
    def __init__(
        self,
        primary: DiscoveryProvider,
        fallback: DiscoveryProvider | None = None,
        ranker: SimilarityRanker | None = None,
        distance_fn: DistanceFn = distance_between,
        events: EventEmitter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        min_viable: int | None = None,
        radius_miles: float | None = None,
        pacing_seconds: float | None = None,
    ) -> None:
        self.primary = primary
        self.fallback = fallback
        self.events = events or default_emitter()
        self.ranker = ranker or SimilarityRanker(events=self.events)
        self.distance_fn = distance_fn
        self.sleep = sleep
        self.min_viable = settings.min_viable_companies if min_viable is None else min_viable
        self.radius_miles = settings.search_radius_miles if radius_miles is None else radius_miles
        self.pacing_seconds = pacing_seconds

    def _providers(self) -> list[DiscoveryProvider]:
        candidates = [p for p in (self.primary, self.fallback) if p is not None]
        configured = [p for p in candidates if p.is_configured()]
        if not configured:
            missing = sorted({s for p in candidates for s in p.required_secrets()})
            raise ConfigurationError(f"No discovery provider configured (missing: {', '.join(missing)})")
        for p in candidates:
            if p not in configured:
                logger.warning("Discovery provider %s not configured, skipping", p.name)
        return configured

    async def _search(self, context: CourseContext, limit: int) -> tuple[DiscoveryProvider, CascadeOutcome]:
        filters = build_search_filters(context, limit)
        last_error: Exception | None = None
        for provider in self._providers():
            try:
                return provider, await run_cascade(
                    provider, filters, limit, min_viable=self.min_viable, events=self.events
                )
            except (ProviderError, NoResultsError) as e:
                logger.warning("Discovery via %s failed: %s", provider.name, e)
                self.events.emit("provider_failed", provider=provider.name, error=type(e).__name__)
                last_error = e
        raise NoResultsError("No companies found for this course") from last_error

    async def discover(self, context: CourseContext) -> DiscoveryResult:
        """Run search, enrichment, distance filtering and ranking for one course.

        Raises:
            ConfigurationError: neither provider has credentials.
            NoResultsError: every provider's cascade came back empty or failed.
        """
        start = time.monotonic()
        limit = context.target_count * settings.search_multiplier

        provider, outcome = await self._search(context, limit)
        candidates = dedupe_companies(outcome.companies)[:limit]

        enriched, enriched_count = await enrich_candidates(
            provider, candidates, pacing_seconds=self.pacing_seconds, sleep=self.sleep, events=self.events
        )

        origin = context.location or context.search_location
        nearby, beyond = apply_distance(enriched, origin, self.radius_miles, self.distance_fn)

        ranking = self.ranker.rank(nearby, context.skills, context.occupations, context.domain.domain)
        companies = ranking.kept[: context.target_count]

        stats = DiscoveryStats(
            discovered=len(candidates),
            enriched=enriched_count,
            ranked=0 if ranking.skipped else len(ranking.kept) + len(ranking.filtered),
            filtered_out=len(ranking.filtered),
            beyond_radius=beyond,
            cascade_level=outcome.level,
            threshold=ranking.threshold,
            provider_used=provider.name,
            api_credits_used=outcome.api_calls + enriched_count * provider.credits_per_enrichment,
            processing_time_seconds=round(time.monotonic() - start, 3),
        )
        logger.info(
            "Discovery for %r via %s: %d candidates, %d enriched, %d returned (level %d)",
            context.title, provider.name, stats.discovered, stats.enriched, len(companies), stats.cascade_level,
        )
        self.events.emit("discovery_complete", **stats.model_dump())
        return DiscoveryResult(companies=companies, stats=stats)
