"""Occupation coordinator: fans out to every usable provider and builds a consensus ranking.

Flow:
    skills
      ├─ health_check() on all providers        (concurrent)
      ├─ map_skills_to_occupations() on survivors (concurrent, isolated)
      ├─ group by normalized title
      └─ consensus score, merge, top N          → CoordinationResult
"""

import asyncio
import logging
import re
import time

from config import settings
from models.schemas.occupation import (
    CoordinatedOccupation,
    CoordinationResult,
    OccupationMappingResult,
    OccupationSkill,
    StandardOccupation,
    WorkActivity,
)
from models.schemas.skill import ExtractedSkill
from services.errors import ConfigurationError, ProviderError
from services.events import EventEmitter, default_emitter
from services.occupations.base import OccupationProvider

logger = logging.getLogger(__name__)

MATCH_WEIGHT = 0.4
CONFIDENCE_WEIGHT = 0.3
AGREEMENT_WEIGHT = 0.3


def normalize_title(title: str) -> str:
    """Lowercase, punctuation stripped, whitespace collapsed."""
    stripped = re.sub(r"[^\w\s]", " ", title.lower())
    return re.sub(r"\s+", " ", stripped).strip()


def consensus_score(occurrences: list[StandardOccupation], providers_queried: int) -> float:
    if not occurrences or providers_queried <= 0:
        return 0.0
    avg_match = sum(o.match_score for o in occurrences) / len(occurrences)
    avg_confidence = sum(o.confidence for o in occurrences) / len(occurrences)
    agreement = len({o.provider for o in occurrences}) / providers_queried
    return MATCH_WEIGHT * avg_match + CONFIDENCE_WEIGHT * avg_confidence + AGREEMENT_WEIGHT * agreement


def merge_occurrences(occurrences: list[StandardOccupation], providers_queried: int) -> CoordinatedOccupation:
    """Merge one title group. Collections are unioned; scalar fields take the last non-empty value."""
    skills: dict[str, OccupationSkill] = {}
    activities: dict[str, WorkActivity] = {}
    tools: dict[str, None] = {}
    technologies: dict[str, None] = {}
    tasks: dict[str, None] = {}
    scalars = {"code": "", "title": "", "description": ""}

    for occ in occurrences:
        for field in scalars:
            value = getattr(occ, field)
            if value:
                scalars[field] = value
        for skill in occ.skills:
            key = skill.name.lower()
            if key not in skills or skill.importance > skills[key].importance:
                skills[key] = skill
        for activity in occ.work_activities:
            key = activity.name.lower()
            if key not in activities or activity.importance > activities[key].importance:
                activities[key] = activity
        tools.update(dict.fromkeys(occ.tools))
        technologies.update(dict.fromkeys(occ.technologies))
        tasks.update(dict.fromkeys(occ.tasks))

    providers = list(dict.fromkeys(o.provider for o in occurrences))
    return CoordinatedOccupation(
        **scalars,
        match_score=max(o.match_score for o in occurrences),
        confidence=min(1.0, max(o.confidence for o in occurrences)),
        skills=list(skills.values()),
        work_activities=list(activities.values()),
        tools=list(tools),
        technologies=list(technologies),
        tasks=list(tasks),
        provider="+".join(providers),
        providers=providers,
        consensus_score=round(consensus_score(occurrences, providers_queried), 4),
    )


class OccupationCoordinator:
    def __init__(
        self,
        providers: list[OccupationProvider],
        max_results: int | None = None,
        events: EventEmitter | None = None,
    ) -> None:
        self.providers = providers
        self.max_results = max_results or settings.max_coordinated_occupations
        self.events = events or default_emitter()

    async def usable_providers(self) -> list[OccupationProvider]:
        """Enabled, configured and healthy providers, highest priority first."""
        candidates = [p for p in self.providers if p.enabled and p.is_configured()]
        checks = await asyncio.gather(*(p.health_check() for p in candidates), return_exceptions=True)

        usable = []
        for provider, healthy in zip(candidates, checks):
            if healthy is True:
                usable.append(provider)
            else:
                logger.warning("Occupation provider %s unhealthy: %s", provider.name, healthy)
                self.events.emit("occupation_provider_unhealthy", provider=provider.name)
        usable.sort(key=lambda p: p.priority, reverse=True)
        return usable

    async def coordinate(self, skills: list[ExtractedSkill]) -> CoordinationResult:
        start = time.perf_counter()
        providers = await self.usable_providers()
        if not providers:
            raise ConfigurationError("No occupation provider is enabled, configured and healthy")

        names = [p.name for p in providers]
        logger.info("Coordinating %d skills across providers: %s", len(skills), ", ".join(names))
        outcomes = await asyncio.gather(
            *(p.map_skills_to_occupations(skills) for p in providers), return_exceptions=True
        )

        results: list[OccupationMappingResult] = []
        failed: list[str] = []
        for provider, outcome in zip(providers, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Occupation provider %s failed: %s", provider.name, outcome)
                self.events.emit("occupation_provider_failed", provider=provider.name, error=str(outcome))
                failed.append(provider.name)
            else:
                results.append(outcome)

        if not results:
            raise ProviderError("occupation_coordinator", f"all {len(providers)} providers failed")

        # results follow provider priority order
        groups: dict[str, list[StandardOccupation]] = {}
        for result in results:
            for occ in result.occupations:
                occ = occ if occ.provider else occ.model_copy(update={"provider": result.provider})
                groups.setdefault(normalize_title(occ.title), []).append(occ)

        merged = [merge_occurrences(group, len(providers)) for group in groups.values()]
        merged.sort(key=lambda o: o.consensus_score, reverse=True)
        top = merged[: self.max_results]

        covered = {s.name.lower() for occ in top for s in occ.skills}
        unmapped = [s.name for s in skills if s.name.lower() not in covered]

        elapsed_ms = (time.perf_counter() - start) * 1000
        coordination = CoordinationResult(
            occupations=top,
            unmapped_skills=unmapped,
            providers_queried=names,
            providers_succeeded=[r.provider for r in results],
            providers_failed=failed,
            total_api_calls=sum(r.api_calls for r in results),
            total_cache_hits=sum(r.cache_hits for r in results),
            processing_time_ms=elapsed_ms,
        )
        self.events.emit(
            "occupation_coordination",
            providers_queried=len(names),
            providers_failed=len(failed),
            occupations=len(top),
            api_calls=coordination.total_api_calls,
            cache_hits=coordination.total_cache_hits,
            duration_ms=round(elapsed_ms, 1),
        )
        return coordination
