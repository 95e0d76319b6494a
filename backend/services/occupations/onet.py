"""O*NET Web Services provider.

Requires HTTP Basic credentials (ONET_USERNAME / ONET_PASSWORD). Search
returns SOC-coded occupations; the top hits are expanded through five
detail endpoints fetched concurrently: work_activities, skills,
tools_used, technology_skills and tasks.
"""

import asyncio
import logging
import time
from collections import Counter
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from config import settings
from models.schemas.occupation import (
    OccupationMappingResult,
    OccupationSkill,
    StandardOccupation,
    WorkActivity,
)
from models.schemas.skill import ExtractedSkill
from services.cache import TTLCache
from services.errors import ProviderError
from services.http import build_client, request_json
from services.occupations.base import OccupationProvider, unmapped_skill_names

logger = logging.getLogger(__name__)

SEARCH_SKILLS = 3
SEARCH_KEEP = 10
DETAIL_LIMIT = 5
CONFIDENCE = 0.95


# ---------------------------------------------------------------------------
# Native payloads
# ---------------------------------------------------------------------------

class OnetSearchHit(BaseModel):
    code: str
    title: str = ""
    description: str = ""
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_names(cls, v: Any) -> list[str]:
        # Search returns tags as {"bright_outlook": true, ...}
        if isinstance(v, dict):
            return [k for k, flag in v.items() if flag]
        return list(v or [])


class OnetSearchPayload(BaseModel):
    occupation: list[OnetSearchHit] = []


class OnetScore(BaseModel):
    value: float = 0.0


class OnetElement(BaseModel):
    id: str = ""
    name: str = ""
    description: str = ""
    importance: OnetScore = Field(default_factory=OnetScore)


class OnetWorkActivitiesPayload(BaseModel):
    work_activity: list[OnetElement] = []


class OnetSkillsPayload(BaseModel):
    element: list[OnetElement] = []
    skill: list[OnetElement] = []


class OnetNamed(BaseModel):
    name: str = ""
    title: str = ""


class OnetToolsPayload(BaseModel):
    tool: list[OnetNamed] = []


class OnetTechnologyPayload(BaseModel):
    technology: list[OnetNamed] = []
    category: list[OnetNamed] = []


class OnetTask(BaseModel):
    statement: str = ""
    name: str = ""


class OnetTasksPayload(BaseModel):
    task: list[OnetTask] = []


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

def keyword_match_score(keywords: list[str], title: str, tags: list[str]) -> float:
    if not keywords:
        return 0.0
    text = " ".join([title, *tags]).lower()
    return sum(1 for k in keywords if k in text) / len(keywords)


class OnetProvider(OccupationProvider):
    name = "onet"

    def __init__(
        self,
        username: str | None = None,
        password: str | None = None,
        base_url: str | None = None,
        priority: int | None = None,
        cache: TTLCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.username = username if username is not None else settings.onet_username
        self.password = password if password is not None else settings.onet_password
        self.base_url = (base_url or settings.onet_base_url).rstrip("/")
        self.priority = priority if priority is not None else settings.onet_priority
        self.cache = cache or TTLCache(settings.occupation_cache_ttl_seconds)
        self.max_attempts = max_attempts
        auth = (self.username, self.password) if self.is_configured() else None
        self._client = build_client(self.base_url, auth=auth, transport=transport)

    def is_configured(self) -> bool:
        return bool(self.username and self.password)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> bool:
        if not self.is_configured():
            return False
        try:
            response = await self._client.get("/about", timeout=settings.health_check_timeout_seconds)
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("O*NET health check failed: %s", e)
            return False

    async def map_skills_to_occupations(self, skills: list[ExtractedSkill]) -> OccupationMappingResult:
        if not self.is_configured():
            raise ProviderError(self.name, "credentials not configured")

        start = time.perf_counter()
        stats: Counter = Counter()
        keywords = [s.name.lower() for s in skills]

        hits = await self._search(keywords, stats)
        top = hits[:DETAIL_LIMIT]
        details = await asyncio.gather(*(self._details(hit, stats) for hit, _ in top), return_exceptions=True)

        occupations: list[StandardOccupation] = []
        for (hit, score), outcome in zip(top, details):
            if isinstance(outcome, BaseException):
                logger.warning("O*NET details for %s failed: %s", hit.code, outcome)
                continue
            occupations.append(outcome.model_copy(update={"match_score": round(score, 4)}))

        logger.info("O*NET mapped %d skills to %d occupations (%d API calls, %d cache hits)",
                    len(skills), len(occupations), stats["api_calls"], stats["cache_hits"])
        return OccupationMappingResult(
            occupations=occupations,
            unmapped_skills=unmapped_skill_names(skills, occupations),
            provider=self.name,
            api_calls=stats["api_calls"],
            cache_hits=stats["cache_hits"],
            processing_time_ms=(time.perf_counter() - start) * 1000,
        )

    async def _get(self, stats: Counter, cache_key: str, path: str, model: type[BaseModel], **params: Any) -> Any:
        """Cached GET parsed into a native payload model."""
        cached = self.cache.get(cache_key)
        if cached is not None:
            stats["cache_hits"] += 1
            return cached

        stats["api_calls"] += 1
        data = await request_json(
            self._client, "GET", path,
            provider=self.name,
            max_attempts=self.max_attempts,
            params=params or None,
        )
        try:
            payload = model.model_validate(data)
        except ValidationError as e:
            raise ProviderError(self.name, f"malformed payload from {path}") from e
        self.cache.set(cache_key, payload)
        return payload

    async def _search(self, keywords: list[str], stats: Counter) -> list[tuple[OnetSearchHit, float]]:
        query = " ".join(keywords[:SEARCH_SKILLS])
        payload: OnetSearchPayload = await self._get(stats, f"search:{query}", "/search", OnetSearchPayload, keyword=query)
        hits = [(hit, keyword_match_score(keywords, hit.title, hit.tags)) for hit in payload.occupation[:SEARCH_KEEP]]
        hits.sort(key=lambda pair: pair[1], reverse=True)
        return hits

    async def _details(self, hit: OnetSearchHit, stats: Counter) -> StandardOccupation:
        base = f"/occupations/{hit.code}/details"
        activities, skills, tools, tech, tasks = await asyncio.gather(
            self._get(stats, f"dwas:{hit.code}", f"{base}/work_activities", OnetWorkActivitiesPayload),
            self._get(stats, f"skills:{hit.code}", f"{base}/skills", OnetSkillsPayload),
            self._get(stats, f"tools:{hit.code}", f"{base}/tools_used", OnetToolsPayload),
            self._get(stats, f"tech:{hit.code}", f"{base}/technology_skills", OnetTechnologyPayload),
            self._get(stats, f"tasks:{hit.code}", f"{base}/tasks", OnetTasksPayload),
        )
        return StandardOccupation(
            code=hit.code,
            title=hit.title,
            description=hit.description,
            confidence=CONFIDENCE,
            skills=[
                OccupationSkill(name=s.name, description=s.description, importance=s.importance.value)
                for s in (skills.skill or skills.element) if s.name
            ],
            work_activities=[
                WorkActivity(name=a.name, description=a.description or a.name, importance=a.importance.value)
                for a in activities.work_activity if a.name
            ],
            tools=[t.name or t.title for t in tools.tool if t.name or t.title],
            technologies=[t.name or t.title for t in (tech.technology or tech.category) if t.name or t.title],
            tasks=[t.statement or t.name for t in tasks.task if t.statement or t.name],
            provider=self.name,
        )
