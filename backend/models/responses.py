from pydantic import BaseModel

from models.schemas.domain import CourseDomainClassification
from models.schemas.match import DiscoveryStats, RankedCompany
from models.schemas.occupation import CoordinatedOccupation
from models.schemas.skill import ExtractedSkill


class OccupationSummary(BaseModel):
    code: str
    title: str
    consensus_score: float = 0.0
    providers: list[str] = []


class DiscoverResponse(BaseModel):
    run_id: str = ""
    companies: list[RankedCompany] = []
    stats: DiscoveryStats = DiscoveryStats()
    skills: list[ExtractedSkill] = []
    extraction_method: str = "pattern"
    occupations: list[OccupationSummary] = []
    domain: CourseDomainClassification = CourseDomainClassification()
    degraded: bool = False  # at least one occupation provider failed
    processing_time_seconds: float = 0.0


class HealthResponse(BaseModel):
    status: str = "ok"
    discovery_providers: dict[str, bool] = {}
    occupation_providers: dict[str, bool] = {}
    embeddings_enabled: bool = False


def summarize_occupation(occupation: CoordinatedOccupation) -> OccupationSummary:
    return OccupationSummary(
        code=occupation.code,
        title=occupation.title,
        consensus_score=round(occupation.consensus_score, 4),
        providers=occupation.providers,
    )
