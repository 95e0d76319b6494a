"""Context-aware industry exclusion.

Two tiers:
    - hard exclude: never a project sponsor for any course (insurance, legal, gambling, ...)
    - soft exclude: staffing/HR-type sectors; a target industry for business
      courses, penalized for technical ones, and decided from job postings
      for hybrid courses.

Also provides the mild sector-relevance penalty used during ranking and the
organization-search exclusion lists used when building discovery filters.
"""

import logging

from config import settings
from models.schemas.company import JobPosting
from models.schemas.domain import CourseDomain, ExclusionDecision
from models.schemas.occupation import StandardOccupation
from services.domain_classifier import domain_bucket, major_group

logger = logging.getLogger(__name__)

HARD_EXCLUDE_INDUSTRIES = (
    "insurance", "insurance services",
    "legal services", "law firm", "law practice",
    "gambling", "casino",
    "tobacco", "alcohol",
)

SOFT_EXCLUDE_INDUSTRIES = (
    "staffing", "recruiting", "recruitment",
    "human resources", "hr services", "hr consulting",
    "employment services", "talent acquisition",
    "outsourcing",
)

# Organization-search taxonomy names
ALWAYS_EXCLUDED_SEARCH_INDUSTRIES = ("Insurance", "Legal Services", "Gambling & Casinos")
CONTEXT_DEPENDENT_SEARCH_INDUSTRIES = (
    "Staffing & Recruiting",
    "Human Resources",
    "Outsourcing/Offshoring",
    "Employment Services",
    "Recruitment",
    "Talent Acquisition",
)

# ---------------------------------------------------------------------------
# Job posting analysis
# ---------------------------------------------------------------------------
PROJECT_ROLE_KEYWORDS = (
    # Software
    "software engineer", "software developer", "programmer", "coder",
    "full stack", "backend", "frontend", "web developer", "mobile developer",
    "application developer", "systems developer",
    # Data and AI
    "data scientist", "data analyst", "data engineer", "database administrator",
    "machine learning", "ai engineer", "ml engineer", "deep learning",
    "computer vision", "nlp engineer", "ai researcher",
    # Infrastructure
    "devops", "cloud engineer", "systems engineer", "network engineer",
    "site reliability", "infrastructure engineer", "platform engineer",
    "security engineer", "cybersecurity",
    # Mechanical / industrial
    "mechanical engineer", "design engineer", "manufacturing engineer",
    "industrial engineer", "process engineer", "quality engineer",
    "product engineer", "test engineer", "cad engineer", "r&d engineer",
    # Electrical / electronics
    "electrical engineer", "electronics engineer", "firmware engineer",
    "hardware engineer", "embedded systems", "pcb design",
    # Civil / construction
    "civil engineer", "structural engineer", "construction engineer",
    "project engineer", "field engineer", "geotechnical engineer",
    # Business / analytics
    "business analyst", "product manager", "product owner", "project manager",
    "financial analyst", "business intelligence", "analytics manager",
    "operations analyst", "strategy analyst", "management consultant",
    "process analyst", "systems analyst",
    # Research / science
    "research scientist", "research engineer", "research analyst", "lab technician",
    "biostatistician", "clinical analyst", "scientist", "chemist", "physicist",
    "materials scientist", "research associate",
)

RECRUITING_ROLE_KEYWORDS = (
    "recruiter", "recruitment", "talent acquisition", "sourcer", "sourcing",
    "hr specialist", "hr coordinator", "hr generalist", "hr manager", "hr business partner",
    "staffing", "headhunter", "talent partner", "people operations", "people ops",
    "talent coordinator", "recruiting coordinator", "employment specialist",
)

# Text that marks a role as placed with a client rather than internal
EXTERNAL_PLACEMENT_MARKERS = ("client", "placement", "contract role")

# ---------------------------------------------------------------------------
# Sector relevance (ranking penalty)
# ---------------------------------------------------------------------------
ENGINEERING_INDUSTRIES = (
    "engineering", "manufacturing", "construction", "automotive", "aerospace", "energy",
    "hvac", "mechanical", "industrial", "renewables", "environment",
)
THERMAL_INDUSTRIES = ("thermal", "fluid", "power generation")
COMPUTING_INDUSTRIES = ("software", "technology", "information technology", "it services")

MODERATE_MISMATCH_INDUSTRIES = (
    "recruitment", "human resources", "hr", "staffing",
    "marketing", "advertising", "public relations",
    "retail", "consumer goods",
    "hospitality", "tourism", "entertainment",
    "real estate", "property",
)
GENERIC_INDUSTRIES = ("services", "consulting", "solutions", "systems")

MODERATE_MISMATCH_PENALTY = 0.15
GENERIC_PENALTY = 0.15
UNRECOGNIZED_PENALTY = 0.10


def _matches_any(text: str, keywords: tuple[str, ...]) -> str | None:
    for keyword in keywords:
        if keyword in text:
            return keyword
    return None


def is_soft_excluded_sector(sector: str | None) -> bool:
    return _matches_any((sector or "").lower(), SOFT_EXCLUDE_INDUSTRIES) is not None


def _is_project_role(posting: JobPosting) -> bool:
    title = posting.title.lower()
    combined = f"{title} {posting.description.lower()}"
    if _matches_any(title, PROJECT_ROLE_KEYWORDS) is None:
        return False
    return _matches_any(combined, EXTERNAL_PLACEMENT_MARKERS) is None


def analyze_job_postings_for_projects(postings: list[JobPosting]) -> bool:
    """True when postings show internal project work rather than recruiting.

    Needs at least one legitimate project role and at least as many
    legitimate roles as recruiting roles. Recruiting is judged by title only.
    """
    if not postings:
        return False

    legitimate = 0
    recruiting = 0
    for posting in postings:
        if _matches_any(posting.title.lower(), RECRUITING_ROLE_KEYWORDS):
            recruiting += 1
        elif _is_project_role(posting):
            legitimate += 1

    passed = legitimate >= 1 and legitimate >= recruiting
    logger.debug("Job posting analysis: %d legitimate, %d recruiting -> %s",
                 legitimate, recruiting, "pass" if passed else "fail")
    return passed


# ---------------------------------------------------------------------------
# Exclusion decision
# ---------------------------------------------------------------------------

def _hybrid_decision(
    occupations: list[StandardOccupation],
    postings: list[JobPosting],
) -> ExclusionDecision:
    primary = occupations[0] if occupations else None
    if primary is not None and domain_bucket(primary.code)[0] == "business_management":
        return ExclusionDecision(
            should_exclude=False,
            penalty=0.0,
            reason="Hybrid course with business primary occupation; staffing companies allowed",
        )

    if postings and analyze_job_postings_for_projects(postings):
        return ExclusionDecision(
            should_exclude=False,
            penalty=settings.hybrid_legitimate_penalty,
            reason="Staffing company with legitimate internal project roles",
        )

    return ExclusionDecision(
        should_exclude=True,
        penalty=settings.soft_exclude_penalty,
        reason="Hybrid course with technical primary occupation; no internal project roles",
    )


def should_exclude_industry(
    sector: str | None,
    domain: CourseDomain,
    occupations: list[StandardOccupation] | None = None,
    job_postings: list[JobPosting] | None = None,
) -> ExclusionDecision:
    """Decide whether (and how hard) to penalize a candidate's sector for this course."""
    sector_lower = (sector or "").lower()
    if not sector_lower:
        return ExclusionDecision(reason="No sector information")

    hard = _matches_any(sector_lower, HARD_EXCLUDE_INDUSTRIES)
    if hard:
        return ExclusionDecision(
            should_exclude=True,
            penalty=settings.hard_exclude_penalty,
            reason=f"Hard-excluded industry: {hard}",
        )

    if _matches_any(sector_lower, SOFT_EXCLUDE_INDUSTRIES) is None:
        return ExclusionDecision(reason="Not an excluded industry")

    if domain == "business_management":
        return ExclusionDecision(
            should_exclude=False,
            penalty=0.0,
            reason="Business course; staffing companies are a target industry",
        )
    if domain == "hybrid":
        return _hybrid_decision(occupations or [], job_postings or [])

    # engineering_technical, computer_tech, healthcare_science, unknown
    return ExclusionDecision(
        should_exclude=True,
        penalty=settings.soft_exclude_penalty,
        reason=f"Staffing-type company penalized for {domain} course",
    )


def expected_industries(occupations: list[StandardOccupation]) -> set[str]:
    """Sector keywords that fit the course's occupations."""
    expected: set[str] = set()
    for occ in occupations:
        title = occ.title.lower()
        group = major_group(occ.code)
        if group == "17" or "engineer" in title:
            expected.update(ENGINEERING_INDUSTRIES)
            if "mechanical" in title or "thermal" in title:
                expected.update(THERMAL_INDUSTRIES)
            if "software" in title or "computer" in title:
                expected.update(COMPUTING_INDUSTRIES)
        if group == "15" or "software" in title or "data" in title:
            expected.update(COMPUTING_INDUSTRIES)
    return expected


def sector_relevance_penalty(occupations: list[StandardOccupation], sector: str | None) -> float:
    """Mild ranking penalty for sectors that fit the course poorly.

    Returns 0 for an empty sector, no occupations, or an expected industry.
    """
    sector_lower = (sector or "").lower()
    if not sector_lower or not occupations:
        return 0.0
    if _matches_any(sector_lower, MODERATE_MISMATCH_INDUSTRIES):
        return MODERATE_MISMATCH_PENALTY
    if _matches_any(sector_lower, tuple(expected_industries(occupations))):
        return 0.0
    if _matches_any(sector_lower, GENERIC_INDUSTRIES):
        return GENERIC_PENALTY
    return UNRECOGNIZED_PENALTY


def excluded_search_industries(domain: CourseDomain) -> list[str]:
    """Organization-search industries to exclude when building filters for a domain."""
    if domain == "business_management":
        return list(ALWAYS_EXCLUDED_SEARCH_INDUSTRIES)
    return list(ALWAYS_EXCLUDED_SEARCH_INDUSTRIES + CONTEXT_DEPENDENT_SEARCH_INDUSTRIES)
