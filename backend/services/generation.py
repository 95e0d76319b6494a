"""Generation run: one course in, ranked sponsor candidates out.

Flow:
    DiscoverRequest
      ├─ extract_skills(outcomes, title, level)   → skills
      ├─ OccupationCoordinator.coordinate(skills)  → occupations
      ├─ classify_domain(occupations)              → domain
      ├─ DiscoveryOrchestrator.discover(context)   → ranked companies + stats
      └─ CompanyStore upsert + run record          → run_id
"""

import logging
import sqlite3
import time

from config import settings
from models.requests import DiscoverRequest
from models.responses import DiscoverResponse, summarize_occupation
from models.schemas.company import CourseContext
from services.discovery.orchestrator import DiscoveryOrchestrator
from services.discovery.registry import get_providers
from services.domain_classifier import classify_domain
from services.embeddings import SentenceTransformerEmbeddings
from services.events import EventEmitter, default_emitter
from services.occupations.coordinator import OccupationCoordinator
from services.occupations.registry import get_coordinator
from services.similarity import SimilarityRanker
from services.skill_extractor import extract_skills
from services.store import CompanyStore

logger = logging.getLogger(__name__)

_orchestrator: DiscoveryOrchestrator | None = None
_store: CompanyStore | None = None


def get_orchestrator() -> DiscoveryOrchestrator:
    """Shared orchestrator, created on first access with providers from settings."""
    global _orchestrator
    if _orchestrator is None:
        primary, fallback = get_providers()
        embeddings = SentenceTransformerEmbeddings() if settings.embeddings_enabled else None
        _orchestrator = DiscoveryOrchestrator(primary, fallback, ranker=SimilarityRanker(embeddings=embeddings))
    return _orchestrator


def get_store() -> CompanyStore:
    global _store
    if _store is None:
        _store = CompanyStore()
    return _store


def clear() -> None:
    """Drop shared instances. Useful for testing."""
    global _orchestrator, _store
    _orchestrator = None
    _store = None


def _persist(store: CompanyStore, request: DiscoverRequest, response: DiscoverResponse) -> str:
    """Write-behind: a storage failure is logged and never fails the run."""
    try:
        store.upsert_companies([r.company for r in response.companies])
        return store.record_run(request.course_title, {
            "request": request.model_dump(),
            "skills": [s.model_dump() for s in response.skills],
            "occupations": [o.model_dump() for o in response.occupations],
            "domain": response.domain.model_dump(),
            "threshold": response.stats.threshold,
            "stats": response.stats.model_dump(),
            "processing_time_seconds": response.processing_time_seconds,
        })
    except sqlite3.Error as e:
        logger.error("Failed to persist generation run for %r: %s", request.course_title, e)
        return ""


async def run_generation(
    request: DiscoverRequest,
    coordinator: OccupationCoordinator | None = None,
    orchestrator: DiscoveryOrchestrator | None = None,
    store: CompanyStore | None = None,
    events: EventEmitter | None = None,
) -> DiscoverResponse:
    """Run the full pipeline for one course.

    Raises:
        ConfigurationError: no occupation or discovery provider is usable.
        ProviderError: every occupation provider failed its mapping call.
        NoResultsError: the discovery cascade found nothing.
    """
    start = time.monotonic()
    events = events or default_emitter()
    coordinator = coordinator or get_coordinator()
    orchestrator = orchestrator or get_orchestrator()
    store = store or get_store()

    # --- Stage 1: skills ---
    extraction = extract_skills(request.outcomes, title=request.course_title, level=request.course_level)

    # --- Stage 2: occupations and domain ---
    mapping = await coordinator.coordinate(extraction.skills)
    occupations = mapping.occupations
    degraded = bool(mapping.providers_failed)
    if degraded:
        logger.warning("Occupation providers failed, continuing with %s", ", ".join(mapping.providers_succeeded))
        events.emit("degraded_mode", stage="occupations", failed=mapping.providers_failed)
    domain = classify_domain(occupations)

    # --- Stage 3: discovery and ranking ---
    context = CourseContext(
        title=request.course_title,
        level=request.course_level,
        outcomes=request.outcomes,
        topics=request.topics,
        location=request.location,
        search_location=request.search_location,
        target_count=request.target_count,
        skills=extraction.skills,
        occupations=occupations,
        domain=domain,
    )
    result = await orchestrator.discover(context)

    response = DiscoverResponse(
        companies=result.companies,
        stats=result.stats,
        skills=extraction.skills,
        extraction_method=extraction.extraction_method,
        occupations=[summarize_occupation(o) for o in occupations],
        domain=domain,
        degraded=degraded,
        processing_time_seconds=round(time.monotonic() - start, 3),
    )

    # --- Stage 4: persistence ---
    response.run_id = _persist(store, request, response)
    events.emit(
        "generation_complete",
        run_id=response.run_id,
        skills=len(extraction.skills),
        occupations=len(occupations),
        domain=domain.domain,
        companies=len(result.companies),
    )
    logger.info(
        "Generation for %r: %d skills, %d occupations, domain=%s, %d companies in %.1fs",
        request.course_title, len(extraction.skills), len(occupations), domain.domain,
        len(result.companies), response.processing_time_seconds,
    )
    return response
