"""ESCO (European Skills, Competences, Qualifications and Occupations) provider.

Public REST API, no credentials. Two calls per mapping:
    GET {base}/search?text=...&type=occupation&language=en&limit=20
    GET {base}/resource/occupation?uri=...&language=en   (top 5 hits)

ESCO occupations carry ISCO-08 codes rather than SOC codes; the code is
kept as-is and bucketed by the domain classifier.
"""

import asyncio
import logging
import time
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

LANGUAGE = "en"
SEARCH_LIMIT = 20
SEARCH_SKILLS = 3
DETAIL_LIMIT = 5
CONFIDENCE = 0.85
ESSENTIAL_IMPORTANCE = 90.0
OPTIONAL_IMPORTANCE = 60.0
RELATION_IMPORTANCE = 75.0
# Probe target for health checks: "mechanical engineer"
HEALTH_CHECK_URI = "http://data.europa.eu/esco/occupation/114e1eff-215e-47df-8e10-45a5b72f8197"


def _literal(value: Any) -> str:
    """ESCO text fields come as plain strings, {"literal": ...} or {"en": {"literal": ...}}."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        if "literal" in value:
            return str(value["literal"] or "")
        if LANGUAGE in value:
            return _literal(value[LANGUAGE])
    return ""


# ---------------------------------------------------------------------------
# Native payloads
# ---------------------------------------------------------------------------

class EscoSearchHit(BaseModel):
    uri: str
    title: str = ""
    description: str = ""

    @field_validator("description", mode="before")
    @classmethod
    def _flatten(cls, v: Any) -> str:
        return _literal(v)


class EscoEmbedded(BaseModel):
    results: list[EscoSearchHit] = []


class EscoSearchPayload(BaseModel):
    embedded: EscoEmbedded = Field(default_factory=EscoEmbedded, alias="_embedded")


class EscoRelation(BaseModel):
    uri: str = ""
    preferred_label: str = Field(default="", alias="preferredLabel")
    title: str = ""
    description: str = ""

    @field_validator("preferred_label", "title", "description", mode="before")
    @classmethod
    def _flatten(cls, v: Any) -> str:
        return _literal(v)

    @property
    def label(self) -> str:
        return self.preferred_label or self.title


class EscoOccupationPayload(BaseModel):
    uri: str = ""
    code: str = ""  # ISCO-08 based, e.g. "2144.1"
    title: str = "Unknown"
    description: str = ""
    essential_skills: list[EscoRelation] = Field(default=[], alias="hasEssentialSkill")
    optional_skills: list[EscoRelation] = Field(default=[], alias="hasOptionalSkill")
    broader_relations: list[EscoRelation] = Field(default=[], alias="broaderRelations")
    links: dict[str, Any] = Field(default={}, alias="_links")

    @field_validator("title", "description", mode="before")
    @classmethod
    def _flatten(cls, v: Any) -> str:
        return _literal(v)

    def linked(self, key: str) -> list[EscoRelation]:
        """Relations listed under _links (the live API nests them there)."""
        raw = self.links.get(key) or []
        if isinstance(raw, dict):
            raw = [raw]
        return [EscoRelation.model_validate(r) for r in raw if isinstance(r, dict)]


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

def keyword_match_score(keywords: list[str], title: str, description: str) -> float:
    """Fraction of skill keywords appearing in the occupation title or description."""
    if not keywords:
        return 0.0
    text = f"{title} {description}".lower()
    return sum(1 for k in keywords if k in text) / len(keywords)


class EscoProvider(OccupationProvider):
    name = "esco"

    def __init__(
        self,
        base_url: str | None = None,
        priority: int | None = None,
        cache: TTLCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.base_url = (base_url or settings.esco_base_url).rstrip("/")
        self.priority = priority if priority is not None else settings.esco_priority
        self.cache = cache or TTLCache(settings.occupation_cache_ttl_seconds)
        self.max_attempts = max_attempts
        self._client = build_client(self.base_url, transport=transport)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> bool:
        try:
            response = await self._client.get(
                "/resource/occupation",
                params={"uri": HEALTH_CHECK_URI, "language": LANGUAGE},
                timeout=settings.health_check_timeout_seconds,
            )
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("ESCO health check failed: %s", e)
            return False

    async def map_skills_to_occupations(self, skills: list[ExtractedSkill]) -> OccupationMappingResult:
        start = time.perf_counter()
        keywords = [s.name.lower() for s in skills]
        api_calls = 0
        cache_hits = 0

        hits, hit_from_cache = await self._search(keywords[:SEARCH_SKILLS], keywords)
        if hit_from_cache:
            cache_hits += 1
        else:
            api_calls += 1

        top = hits[:DETAIL_LIMIT]
        details = await asyncio.gather(*(self._details(uri) for uri, _ in top), return_exceptions=True)

        occupations: list[StandardOccupation] = []
        for (uri, score), outcome in zip(top, details):
            if isinstance(outcome, BaseException):
                api_calls += 1
                logger.warning("ESCO details for %s failed: %s", uri, outcome)
                continue
            occupation, from_cache = outcome
            if from_cache:
                cache_hits += 1
            else:
                api_calls += 1
            occupations.append(occupation.model_copy(update={"match_score": round(score, 4)}))

        logger.info("ESCO mapped %d skills to %d occupations (%d API calls, %d cache hits)",
                    len(skills), len(occupations), api_calls, cache_hits)
        return OccupationMappingResult(
            occupations=occupations,
            unmapped_skills=unmapped_skill_names(skills, occupations),
            provider=self.name,
            api_calls=api_calls,
            cache_hits=cache_hits,
            processing_time_ms=(time.perf_counter() - start) * 1000,
        )

    async def _search(self, query_terms: list[str], keywords: list[str]) -> tuple[list[tuple[str, float]], bool]:
        query = " ".join(query_terms)
        cache_key = f"search:{query}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached, True

        data = await request_json(
            self._client, "GET", "/search",
            provider=self.name,
            max_attempts=self.max_attempts,
            params={"text": query, "type": "occupation", "language": LANGUAGE, "limit": SEARCH_LIMIT},
        )
        try:
            payload = EscoSearchPayload.model_validate(data)
        except ValidationError as e:
            raise ProviderError(self.name, f"malformed search payload: {e.error_count()} errors") from e

        hits = [
            (hit.uri, keyword_match_score(keywords, hit.title, hit.description))
            for hit in payload.embedded.results
        ]
        hits.sort(key=lambda pair: pair[1], reverse=True)
        self.cache.set(cache_key, hits)
        return hits, False

    async def _details(self, uri: str) -> tuple[StandardOccupation, bool]:
        cache_key = f"occupation:{uri}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached, True

        data = await request_json(
            self._client, "GET", "/resource/occupation",
            provider=self.name,
            max_attempts=self.max_attempts,
            params={"uri": uri, "language": LANGUAGE},
        )
        try:
            payload = EscoOccupationPayload.model_validate(data)
        except ValidationError as e:
            raise ProviderError(self.name, f"malformed occupation payload for {uri}") from e

        occupation = self._to_standard(payload, uri)
        self.cache.set(cache_key, occupation)
        return occupation, False

    def _to_standard(self, payload: EscoOccupationPayload, uri: str) -> StandardOccupation:
        essential = payload.essential_skills or payload.linked("hasEssentialSkill")
        optional = payload.optional_skills or payload.linked("hasOptionalSkill")
        broader = payload.broader_relations or payload.linked("broaderOccupation")

        skills = [
            OccupationSkill(name=r.label, description=r.description, importance=ESSENTIAL_IMPORTANCE)
            for r in essential if r.label
        ] + [
            OccupationSkill(name=r.label, description=r.description, importance=OPTIONAL_IMPORTANCE)
            for r in optional if r.label
        ]
        activities = [
            WorkActivity(name=r.label, description=r.description, importance=RELATION_IMPORTANCE)
            for r in broader if r.label
        ]
        return StandardOccupation(
            code=payload.code or payload.uri or uri,
            title=payload.title,
            description=payload.description,
            confidence=CONFIDENCE,
            skills=skills,
            work_activities=activities,
            provider=self.name,
        )
