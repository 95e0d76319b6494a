"""Similarity ranking and discovery result contracts."""

from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.company import DiscoveredCompany
from models.schemas.domain import ExclusionDecision

ConfidenceTier = Literal["high", "medium", "low"]


class SemanticMatch(BaseModel):
    company_id: str = ""
    company_name: str = ""
    raw_score: float = 0.0
    penalty: float = 0.0
    hiring_boost: float = 0.0
    final_score: float = Field(default=0.0, ge=0.0, le=1.0)
    confidence: ConfidenceTier = "low"
    matching_skills: list[str] = []
    matching_activities: list[str] = []
    explanation: str = ""
    exclusion: ExclusionDecision = ExclusionDecision()


class RankedCompany(BaseModel):
    company: DiscoveredCompany
    match: SemanticMatch | None = None  # None when ranking was skipped


class RankingResult(BaseModel):
    kept: list[RankedCompany] = []
    filtered: list[RankedCompany] = []
    threshold: float | None = None  # None when ranking was skipped
    skipped: bool = False
    method: str = "keyword"  # embedding, keyword, skipped
    average_score: float = 0.0


class DiscoveryStats(BaseModel):
    discovered: int = 0  # raw candidates after dedup
    enriched: int = 0
    ranked: int = 0
    filtered_out: int = 0
    beyond_radius: int = 0
    cascade_level: int = 0  # 1-4, level that produced the candidates
    threshold: float | None = None
    provider_used: str = ""
    api_credits_used: int = 0
    processing_time_seconds: float = 0.0


class DiscoveryResult(BaseModel):
    companies: list[RankedCompany] = []
    stats: DiscoveryStats = DiscoveryStats()
