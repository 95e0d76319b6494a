"""Inter-stage Pydantic contracts for the discovery pipeline."""

from models.schemas.skill import ExtractedSkill, SkillExtractionResult
from models.schemas.occupation import (
    CoordinatedOccupation,
    CoordinationResult,
    OccupationMappingResult,
    StandardOccupation,
)
from models.schemas.domain import CourseDomainClassification, ExclusionDecision
from models.schemas.company import CourseContext, DiscoveredCompany, JobPosting, SearchFilters
from models.schemas.match import DiscoveryResult, RankedCompany, SemanticMatch

__all__ = [
    "ExtractedSkill",
    "SkillExtractionResult",
    "StandardOccupation",
    "OccupationMappingResult",
    "CoordinatedOccupation",
    "CoordinationResult",
    "CourseDomainClassification",
    "ExclusionDecision",
    "CourseContext",
    "DiscoveredCompany",
    "JobPosting",
    "SearchFilters",
    "SemanticMatch",
    "RankedCompany",
    "DiscoveryResult",
]
