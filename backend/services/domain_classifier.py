"""Course domain classification from coordinated occupation codes.

Each occupation votes for a domain bucket with weight = its confidence
(scaled for a few partial-fit groups). The leading bucket wins unless it
holds less than 60% of the votes and a runner-up has any, in which case
the course is hybrid.
"""

import logging
import re

from models.schemas.domain import CourseDomain, CourseDomainClassification
from models.schemas.occupation import StandardOccupation

logger = logging.getLogger(__name__)

HYBRID_SHARE = 0.6

# SOC 2018 major group -> (bucket, weight multiplier)
SOC_MAJOR_GROUPS: dict[str, tuple[CourseDomain, float]] = {
    "11": ("business_management", 1.0),  # Management
    "13": ("business_management", 1.0),  # Business and financial operations
    "15": ("computer_tech", 1.0),  # Computer and mathematical
    "17": ("engineering_technical", 1.0),  # Architecture and engineering
    "19": ("healthcare_science", 1.0),  # Life, physical and social science
    "29": ("healthcare_science", 1.0),  # Healthcare practitioners
    "51": ("engineering_technical", 0.8),  # Production
}

# ISCO-08 sub-major group (ESCO occupations) -> bucket
ISCO_SUB_MAJOR_GROUPS: dict[str, CourseDomain] = {
    "12": "business_management",  # Administrative and commercial managers
    "24": "business_management",  # Business and administration professionals
    "25": "computer_tech",  # ICT professionals
    "35": "computer_tech",  # ICT technicians
    "21": "engineering_technical",  # Science and engineering professionals
    "31": "engineering_technical",  # Science and engineering associate professionals
    "22": "healthcare_science",  # Health professionals
    "32": "healthcare_science",  # Health associate professionals
}

UNKNOWN_WEIGHT = 0.5

_SOC_CODE = re.compile(r"^(\d{2})-\d{4}")
_ISCO_CODE = re.compile(r"^(\d{2})\d{0,2}(?:\.\d+)*$")


def major_group(code: str) -> str:
    """Two-digit group of a SOC ("17-2141.00" -> "17") or ISCO ("2144.1" -> "21") code."""
    code = (code or "").strip()
    m = _SOC_CODE.match(code) or _ISCO_CODE.match(code)
    return m.group(1) if m else ""


def domain_bucket(code: str) -> tuple[CourseDomain, float]:
    """Bucket and weight multiplier for one occupation code."""
    code = (code or "").strip()
    group = major_group(code)
    if _SOC_CODE.match(code):
        return SOC_MAJOR_GROUPS.get(group, ("unknown", UNKNOWN_WEIGHT))
    if group in ISCO_SUB_MAJOR_GROUPS:
        return ISCO_SUB_MAJOR_GROUPS[group], 1.0
    return "unknown", UNKNOWN_WEIGHT


def classify_domain(occupations: list[StandardOccupation]) -> CourseDomainClassification:
    if not occupations:
        return CourseDomainClassification(
            domain="unknown", confidence=0.0, reasoning="No occupation mappings available"
        )

    votes: dict[str, float] = {
        "business_management": 0.0,
        "engineering_technical": 0.0,
        "computer_tech": 0.0,
        "healthcare_science": 0.0,
        "unknown": 0.0,
    }
    for occ in occupations:
        bucket, multiplier = domain_bucket(occ.code)
        votes[bucket] += occ.confidence * multiplier

    total = sum(votes.values())
    if total <= 0:
        return CourseDomainClassification(
            domain="unknown", confidence=0.0, reasoning="All occupation mappings have zero confidence",
            votes=votes,
        )

    ranked = sorted(votes.items(), key=lambda kv: kv[1], reverse=True)
    (primary, primary_score), (secondary, secondary_score) = ranked[0], ranked[1]
    share = primary_score / total

    if share < HYBRID_SHARE and secondary_score > 0:
        result = CourseDomainClassification(
            domain="hybrid",
            confidence=round(1 - share, 4),
            reasoning=(
                f"Hybrid course: {round(share * 100)}% {primary}, "
                f"{round(secondary_score / total * 100)}% {secondary}"
            ),
            votes=votes,
        )
    else:
        result = CourseDomainClassification(
            domain=primary,
            confidence=round(share, 4),
            reasoning=f"Primary domain: {primary} ({round(share * 100)}%)",
            votes=votes,
        )

    logger.info("Course domain: %s (%.0f%% confidence) - %s", result.domain, result.confidence * 100, result.reasoning)
    return result
