"""Occupation mapping contracts shared by all occupation providers and the coordinator."""

from pydantic import BaseModel, Field


class OccupationSkill(BaseModel):
    name: str
    description: str = ""
    importance: float = 0.0  # 0-100


class WorkActivity(BaseModel):
    """Detailed work activity (DWA) attached to an occupation."""
    name: str
    description: str = ""
    importance: float = 0.0  # 0-100


class StandardOccupation(BaseModel):
    """Provider-independent occupation record.

    Every provider adapter normalizes its native payload into this shape
    before anything downstream touches it.
    """
    code: str  # SOC code (e.g. 17-2141.00), ISCO code, or provider URI
    title: str
    description: str = ""
    match_score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    skills: list[OccupationSkill] = []
    work_activities: list[WorkActivity] = []
    tools: list[str] = []
    technologies: list[str] = []
    tasks: list[str] = []
    provider: str = ""


class OccupationMappingResult(BaseModel):
    occupations: list[StandardOccupation] = []
    unmapped_skills: list[str] = []
    provider: str = ""
    api_calls: int = 0
    cache_hits: int = 0
    processing_time_ms: float = 0.0


class CoordinatedOccupation(StandardOccupation):
    """An occupation merged across every provider that returned it."""
    consensus_score: float = 0.0
    providers: list[str] = []


class CoordinationResult(BaseModel):
    occupations: list[CoordinatedOccupation] = []
    unmapped_skills: list[str] = []
    providers_queried: list[str] = []
    providers_succeeded: list[str] = []
    providers_failed: list[str] = []
    total_api_calls: int = 0
    total_cache_hits: int = 0
    processing_time_ms: float = 0.0
