"""Course domain classification and industry exclusion decisions."""

from typing import Literal

from pydantic import BaseModel, Field

CourseDomain = Literal[
    "business_management",
    "engineering_technical",
    "computer_tech",
    "healthcare_science",
    "hybrid",
    "unknown",
]


class CourseDomainClassification(BaseModel):
    domain: CourseDomain = "unknown"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = ""
    votes: dict[str, float] = {}  # bucket -> accumulated confidence


class ExclusionDecision(BaseModel):
    should_exclude: bool = False
    penalty: float = Field(default=0.0, ge=0.0, le=1.0)  # 1.0 = hard exclude
    reason: str = ""
