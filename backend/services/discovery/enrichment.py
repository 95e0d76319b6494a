"""Enrichment scoring and the paced enrichment loop.

Completeness is a 0-100 percentage over contact (40), organization (30)
and market-intelligence (30) points:

    contact:  email 10, name 8, title 6, phone 6, linkedin 5, headline 5
    org:      website 5, sector 5, employees 5, revenue 5, founded 3,
              linkedin 3, city 2, logo 2
    market:   job postings (1 per posting, max 15), technologies (1 each,
              max 10), funding stage 5
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from config import settings
from models.schemas.company import BuyingIntentSignal, DiscoveredCompany, EnrichmentLevel, JobPosting
from services.discovery.base import DiscoveryProvider
from services.errors import ProviderError
from services.events import EventEmitter, default_emitter

logger = logging.getLogger(__name__)

FUNDING_STAGES_WITH_INTENT = ("Series A", "Series B", "Series C")
RECENT_FUNDING_MONTHS = 12
HIRING_VELOCITY_MIN = 5
HIRING_VELOCITY_HIGH = 10

_CONTACT_POINTS = (("email", 10), ("name", 8), ("title", 6), ("phone", 6), ("linkedin_url", 5), ("headline", 5))
_ORG_POINTS = (
    ("website", 5), ("sector", 5), ("employee_count", 5), ("annual_revenue", 5),
    ("founded_year", 3), ("linkedin_url", 3), ("city", 2), ("logo_url", 2),
)
MAX_JOB_POINTS = 15
MAX_TECH_POINTS = 10
FUNDING_POINTS = 5
TOTAL_POINTS = 100


def completeness_score(company: DiscoveredCompany) -> int:
    score = 0
    if company.contact is not None:
        score += sum(points for field, points in _CONTACT_POINTS if getattr(company.contact, field))
    score += sum(points for field, points in _ORG_POINTS if getattr(company, field))
    score += min(MAX_JOB_POINTS, len(company.job_postings))
    score += min(MAX_TECH_POINTS, len(company.technologies))
    if company.funding_stage:
        score += FUNDING_POINTS
    return round(score / TOTAL_POINTS * 100)


def enrichment_level(score: float, job_count: int) -> EnrichmentLevel:
    if score >= 80 and job_count >= 3:
        return "fully_enriched"
    if score >= 60 or job_count >= 1:
        return "apollo_verified"
    return "basic"


def format_employee_count(count: int | None) -> str:
    if not count:
        return "Unknown"
    if count < 50:
        return "1-50"
    if count < 200:
        return "51-200"
    if count < 500:
        return "201-500"
    if count < 1000:
        return "501-1000"
    if count < 5000:
        return "1001-5000"
    return "5000+"


def _months_since(date_text: str, now: datetime) -> float | None:
    try:
        then = datetime.fromisoformat(date_text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if then.tzinfo is None:
        then = then.replace(tzinfo=timezone.utc)
    return (now - then).total_seconds() / (30 * 24 * 3600)


def buying_intent_signals(
    funding_stage: str | None,
    latest_funding_date: str | None,
    postings: list[JobPosting],
    now: datetime | None = None,
) -> list[BuyingIntentSignal]:
    now = now or datetime.now(timezone.utc)
    signals: list[BuyingIntentSignal] = []

    if funding_stage in FUNDING_STAGES_WITH_INTENT and latest_funding_date:
        months = _months_since(latest_funding_date, now)
        if months is not None and months < RECENT_FUNDING_MONTHS:
            signals.append(BuyingIntentSignal(
                signal_type="recent_funding",
                strength="high",
                detail=f"Raised {funding_stage} within last {round(months)} months",
            ))

    if len(postings) >= HIRING_VELOCITY_MIN:
        signals.append(BuyingIntentSignal(
            signal_type="hiring_velocity",
            strength="high" if len(postings) >= HIRING_VELOCITY_HIGH else "medium",
            detail=f"{len(postings)} active job openings",
        ))
    return signals


def finalize_enrichment(company: DiscoveredCompany, now: datetime | None = None) -> DiscoveredCompany:
    """Recompute signals, completeness and level from the company's current fields."""
    now = now or datetime.now(timezone.utc)
    score = completeness_score(company)
    return company.model_copy(update={
        "buying_intent_signals": buying_intent_signals(
            company.funding_stage, company.latest_funding_date, company.job_postings, now
        ),
        "data_completeness_score": score,
        "enrichment_level": enrichment_level(score, len(company.job_postings)),
        "last_enriched_at": now.isoformat(),
    })


async def enrich_candidates(
    provider: DiscoveryProvider,
    companies: list[DiscoveredCompany],
    pacing_seconds: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    events: EventEmitter | None = None,
) -> tuple[list[DiscoveredCompany], int]:
    """Enrich candidates one at a time with a pacing delay between calls.

    A candidate whose enrichment fails is kept at basic level, with signals
    and completeness computed from its search record.
    Returns the companies in input order and the number enriched.
    """
    pacing = settings.enrichment_pacing_seconds if pacing_seconds is None else pacing_seconds
    events = events or default_emitter()
    enriched: list[DiscoveredCompany] = []
    succeeded = 0

    for i, company in enumerate(companies):
        if i and pacing > 0:
            await sleep(pacing)
        try:
            enriched.append(await provider.enrich(company))
            succeeded += 1
        except ProviderError as e:
            logger.warning("Enrichment of %s failed, keeping basic record: %s", company.name, e)
            events.emit("enrichment_failed", provider=provider.name, company=company.name)
            enriched.append(finalize_enrichment(company).model_copy(update={"enrichment_level": "basic"}))

    logger.info("Enriched %d/%d candidates via %s", succeeded, len(companies), provider.name)
    return enriched, succeeded
