"""Skill extraction output: typed, confidence-scored skills from course outcomes."""

from typing import Literal

from pydantic import BaseModel, Field

SkillCategory = Literal["technical", "analytical", "domain", "tool", "framework"]


class ExtractedSkill(BaseModel):
    """A single skill surfaced from course outcome text."""
    name: str  # normalized, title-cased
    category: SkillCategory = "domain"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    source: str = ""  # excerpt of the outcome it came from
    keywords: list[str] = []


class SkillExtractionResult(BaseModel):
    skills: list[ExtractedSkill] = []
    total_extracted: int = 0
    course_context: str = ""  # title + level
    extraction_method: str = "pattern"  # pattern, pattern+title_inference
