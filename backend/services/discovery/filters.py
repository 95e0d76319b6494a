"""Provider-agnostic search filters built from the course context.

Industries come from a discipline -> SOC table (matched on the course title
and outcomes) plus the coordinated occupation codes, translated into the
organization-search taxonomy. A deterministic seed derived from the course
(SHA-256 of title|level|topics) picks the job-title category mix and the
employee-size bucket, so the same course always produces the same filter
while different courses get some variety. The seed never touches
industries or location.
"""

import hashlib
import logging
from dataclasses import dataclass

from models.schemas.company import CourseContext, SearchFilters
from models.schemas.domain import CourseDomain
from models.schemas.occupation import StandardOccupation
from services.industry_exclusion import excluded_search_industries

logger = logging.getLogger(__name__)

MAX_SOC_MATCHES = 3
MAX_INDUSTRY_KEYWORDS = 10
MAX_TAXONOMY_TERMS = 15
MAX_OCCUPATION_TITLES = 3


@dataclass(frozen=True)
class SocMapping:
    code: str
    title: str
    confidence: float
    industries: tuple[str, ...]
    keywords: tuple[str, ...]


# ---------------------------------------------------------------------------
# Discipline -> SOC table
# ---------------------------------------------------------------------------

DISCIPLINE_SOC_MAP: dict[str, tuple[SocMapping, ...]] = {
    "mechanical": (
        SocMapping("17-2141.00", "Mechanical Engineers", 0.95,
                   ("aerospace", "automotive", "manufacturing", "hvac", "robotics", "energy"),
                   ("mechanical", "fluid", "thermodynamics", "dynamics", "heat transfer", "mechanics")),
        SocMapping("17-2011.00", "Aerospace Engineers", 0.85,
                   ("aerospace", "defense", "aviation", "space"),
                   ("aerodynamics", "propulsion", "flight", "spacecraft")),
    ),
    "systems": (
        SocMapping("17-2112.00", "Industrial Engineers", 0.95,
                   ("manufacturing", "logistics", "operations", "industrial engineering", "supply chain",
                    "automation", "production", "quality assurance"),
                   ("systems", "optimization", "processes", "efficiency", "operations")),
        SocMapping("17-2199.08", "Robotics Engineers", 0.85,
                   ("robotics", "automation", "manufacturing", "ai"),
                   ("robotics", "automation", "control systems")),
    ),
    "computer": (
        SocMapping("15-1252.00", "Software Developers", 0.95,
                   ("software", "technology", "fintech", "saas", "cloud computing"),
                   ("software", "programming", "development", "coding", "algorithms")),
        SocMapping("15-1299.08", "Computer Systems Engineers/Architects", 0.90,
                   ("cloud", "infrastructure", "enterprise software", "cybersecurity"),
                   ("systems", "architecture", "infrastructure", "networks")),
    ),
    "electrical": (
        SocMapping("17-2071.00", "Electrical Engineers", 0.95,
                   ("electronics", "power systems", "telecommunications", "semiconductors", "iot"),
                   ("electrical", "electronics", "circuits", "power", "signals")),
        SocMapping("17-2072.00", "Electronics Engineers", 0.90,
                   ("consumer electronics", "semiconductors", "iot", "embedded systems"),
                   ("electronics", "embedded", "microcontrollers", "pcb")),
    ),
    "civil": (
        SocMapping("17-2051.00", "Civil Engineers", 0.95,
                   ("construction", "infrastructure", "transportation", "urban planning"),
                   ("civil", "structures", "construction", "infrastructure", "transportation")),
    ),
    "chemical": (
        SocMapping("17-2041.00", "Chemical Engineers", 0.95,
                   ("chemical", "pharmaceutical", "petrochemical", "materials", "biotech"),
                   ("chemical", "reactions", "processes", "materials", "catalysis")),
    ),
    "data": (
        SocMapping("15-2051.00", "Data Scientists", 0.95,
                   ("technology", "finance", "healthcare", "e-commerce", "consulting"),
                   ("data", "analytics", "machine learning", "statistics", "ai")),
        SocMapping("15-2051.01", "Business Intelligence Analysts", 0.85,
                   ("business intelligence", "consulting", "enterprise software"),
                   ("business intelligence", "reporting", "dashboards", "kpis")),
    ),
    "business": (
        SocMapping("11-3021.00", "Computer and Information Systems Managers", 0.85,
                   ("technology", "consulting", "finance", "enterprise"),
                   ("management", "leadership", "it", "project management")),
        SocMapping("13-1111.00", "Management Analysts", 0.80,
                   ("consulting", "business services", "finance"),
                   ("strategy", "consulting", "business analysis", "operations")),
    ),
}

DISCIPLINE_STEMS: dict[str, tuple[str, ...]] = {
    "mechanical": ("mechanical", "mechanics", "mechanic"),
    "systems": ("systems", "system"),
    "computer": ("computer", "computing", "computation"),
    "electrical": ("electrical", "electric", "electronics", "electronic"),
    "civil": ("civil",),
    "chemical": ("chemical", "chemistry"),
    "data": ("data",),
    "business": ("business", "management", "mba"),
}

# SOC major group -> industries, for occupation codes not in the table above
MAJOR_GROUP_INDUSTRIES: dict[str, tuple[str, ...]] = {
    "11": ("consulting", "business services"),
    "13": ("consulting", "finance"),
    "15": ("software", "technology"),
    "17": ("manufacturing", "industrial"),
    "19": ("research",),
    "29": ("healthcare", "medical devices"),
    "51": ("manufacturing",),
}

# ---------------------------------------------------------------------------
# Industry keyword -> organization-search taxonomy
# ---------------------------------------------------------------------------

SEARCH_TAXONOMY: dict[str, tuple[str, ...]] = {
    # Engineering and manufacturing
    "aerospace": ("Aerospace", "Aviation & Aerospace", "Defense & Space"),
    "automotive": ("Automotive", "Motor Vehicle Manufacturing"),
    "manufacturing": ("Manufacturing", "Industrial Manufacturing", "Machinery"),
    "hvac": ("Mechanical Or Industrial Engineering", "Building Services", "Energy & Utilities"),
    "robotics": ("Robotics", "Industrial Automation", "Manufacturing"),
    "energy": ("Energy", "Renewables & Environment", "Oil & Energy"),
    "mechanical": ("Mechanical Or Industrial Engineering", "Manufacturing"),
    "industrial": ("Industrial Automation", "Manufacturing", "Machinery"),
    "renewables": ("Renewables & Environment", "Environmental Services"),
    "environment": ("Environmental Services", "Renewables & Environment"),
    # Civil and construction
    "construction": ("Construction", "Civil Engineering"),
    "infrastructure": ("Civil Engineering", "Construction", "Transportation"),
    "transportation": ("Transportation/Trucking/Railroad", "Logistics & Supply Chain"),
    # Electrical and electronics
    "electronics": ("Electrical & Electronic Manufacturing", "Semiconductors"),
    "semiconductors": ("Semiconductors", "Electrical & Electronic Manufacturing"),
    "power systems": ("Utilities", "Energy"),
    "telecommunications": ("Telecommunications",),
    "iot": ("Internet", "Computer Hardware", "Electrical & Electronic Manufacturing"),
    # Chemical and materials
    "chemical": ("Chemicals", "Petrochemicals"),
    "pharmaceutical": ("Pharmaceuticals", "Biotechnology"),
    "petrochemical": ("Oil & Energy", "Chemicals"),
    "materials": ("Plastics", "Materials", "Chemicals"),
    "biotech": ("Biotechnology", "Pharmaceuticals"),
    # Software and technology
    "software": ("Computer Software", "Information Technology & Services"),
    "technology": ("Information Technology & Services", "Computer Software"),
    "fintech": ("Financial Services", "Computer Software"),
    "saas": ("Computer Software", "Internet"),
    "cloud computing": ("Computer Software", "Information Technology & Services"),
    "it services": ("Information Technology & Services", "Computer Software"),
    "cloud": ("Computer Software", "Information Technology & Services"),
    "cybersecurity": ("Computer & Network Security", "Information Technology & Services"),
    # Data and analytics
    "data analytics": ("Computer Software", "Information Technology & Services"),
    "business intelligence": ("Computer Software", "Management Consulting"),
    "ai": ("Computer Software", "Research"),
    # Business and consulting
    "consulting": ("Management Consulting", "Business Consulting"),
    "business services": ("Business Supplies & Equipment", "Outsourcing/Offshoring"),
    "finance": ("Financial Services", "Investment Banking", "Venture Capital & Private Equity"),
    "enterprise software": ("Computer Software", "Information Technology & Services"),
    "enterprise": ("Computer Software", "Information Technology & Services"),
    # Logistics and operations
    "logistics": ("Logistics & Supply Chain", "Transportation/Trucking/Railroad"),
    "operations": ("Logistics & Supply Chain", "Manufacturing"),
    "supply chain": ("Logistics & Supply Chain", "Warehousing"),
    # Healthcare and life sciences
    "healthcare": ("Hospital & Health Care", "Medical Devices"),
    "medical devices": ("Medical Devices", "Hospital & Health Care"),
    "research": ("Research", "Biotechnology"),
}

# ---------------------------------------------------------------------------
# Seeded variety
# ---------------------------------------------------------------------------

JOB_TITLE_CATEGORIES: tuple[tuple[str, ...], ...] = (
    ("Director", "VP", "Manager", "Lead"),
    ("Engineer", "Analyst", "Specialist", "Coordinator"),
    ("Operations", "Business", "Technical", "Strategic"),
)
EMPLOYEE_RANGES: tuple[tuple[str, ...], ...] = (
    ("10,50", "51,200"),
    ("51,200", "201,500"),
    ("201,500", "501,1000"),
)

# Titles that signal a recruiting intermediary rather than a project host
RECRUITING_TITLES = ("Recruiter", "Talent Acquisition", "Staffing Coordinator", "HR Generalist")

# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

COUNTRY_CODES: dict[str, str] = {
    "IN": "India", "US": "United States", "GB": "United Kingdom", "CA": "Canada",
    "AU": "Australia", "DE": "Germany", "FR": "France", "JP": "Japan", "CN": "China",
    "SG": "Singapore", "AE": "United Arab Emirates", "NL": "Netherlands", "SE": "Sweden",
    "CH": "Switzerland", "ES": "Spain", "IT": "Italy", "BR": "Brazil", "MX": "Mexico",
    "KR": "South Korea", "IL": "Israel",
}

# Two-letter US state codes; a trailing "CA" or "IN" after a city is a state, not a country
US_STATE_CODES = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID", "IL", "IN", "IA",
    "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT",
    "VA", "WA", "WV", "WI", "WY", "DC",
})


def _is_code(value: str) -> bool:
    return len(value) == 2 and value.isalpha() and value.isupper()


def expand_country_codes(location: str) -> str:
    """Replace an ISO country code with the country name ("IN" -> "India").

    A bare code is always expanded. A trailing code is expanded when the
    location has three or more parts, or when it is not a US state code.
    """
    location = (location or "").strip()
    if _is_code(location):
        return COUNTRY_CODES.get(location, location)

    parts = [p.strip() for p in location.split(",")]
    last = parts[-1]
    if len(parts) >= 2 and _is_code(last) and last in COUNTRY_CODES:
        if len(parts) >= 3 or last not in US_STATE_CODES:
            parts[-1] = COUNTRY_CODES[last]
            return ", ".join(parts)
    return location


def broader_locations(location: str) -> list[str]:
    """Progressively wider locations: region + country, then country alone."""
    parts = [p.strip() for p in (location or "").split(",") if p.strip()]
    broader: list[str] = []
    if len(parts) >= 3:
        broader.append(", ".join(parts[-2:]))
    if len(parts) >= 2:
        broader.append(parts[-1])
    return broader


# ---------------------------------------------------------------------------
# Course -> SOC -> industries
# ---------------------------------------------------------------------------

def map_course_to_soc(title: str, outcomes: list[str] | None = None) -> list[SocMapping]:
    """Top SOC mappings for a course, matched on discipline stems then keywords."""
    title_lower = (title or "").lower()
    all_text = f"{title_lower} {' '.join(outcomes or []).lower()}"

    scored: list[tuple[float, SocMapping]] = []
    for discipline, mappings in DISCIPLINE_SOC_MAP.items():
        stems = DISCIPLINE_STEMS.get(discipline, (discipline,))
        if not any(stem in all_text for stem in stems):
            continue
        title_hit = any(stem in title_lower for stem in stems)
        for mapping in mappings:
            score = (50 if title_hit else 0) + 10 * sum(1 for k in mapping.keywords if k in all_text)
            scored.append((score, mapping))

    if not scored:
        # No discipline named: weight keyword hits, longer keywords count more
        title_words = set(title_lower.split())
        for mappings in DISCIPLINE_SOC_MAP.values():
            for mapping in mappings:
                score = sum(20 if len(k) > 6 else 15 for k in mapping.keywords if k in all_text)
                if title_words & set(mapping.keywords):
                    score += 25
                if score > 0:
                    scored.append((score, mapping))

    scored.sort(key=lambda pair: pair[0] * pair[1].confidence, reverse=True)
    return [mapping for _, mapping in scored[:MAX_SOC_MATCHES]]


def _soc_index() -> dict[str, SocMapping]:
    return {m.code[:7]: m for mappings in DISCIPLINE_SOC_MAP.values() for m in mappings}


def industries_for_occupations(occupations: list[StandardOccupation]) -> list[str]:
    """Industry keywords implied by occupation codes (exact SOC first, then major group)."""
    index = _soc_index()
    industries: list[str] = []
    for occ in occupations:
        mapping = index.get(occ.code[:7])
        if mapping is not None:
            industries.extend(mapping.industries)
        else:
            industries.extend(MAJOR_GROUP_INDUSTRIES.get(occ.code[:2], ()))
    return industries


def industry_keywords(soc_mappings: list[SocMapping], occupations: list[StandardOccupation]) -> list[str]:
    keywords = [i for m in soc_mappings for i in m.industries] + industries_for_occupations(occupations)
    return list(dict.fromkeys(keywords))[:MAX_INDUSTRY_KEYWORDS]


def map_industries_to_taxonomy(keywords: list[str]) -> list[str]:
    """Translate generic industry keywords into search-taxonomy terms (unmapped kept as-is)."""
    terms: list[str] = []
    for keyword in keywords:
        terms.extend(SEARCH_TAXONOMY.get(keyword.lower(), (keyword,)))
    return list(dict.fromkeys(terms))[:MAX_TAXONOMY_TERMS]


def variety_seed(title: str, level: str, topics: list[str]) -> int:
    digest = hashlib.sha256(f"{title}|{level}|{','.join(topics)}".encode("utf-8")).hexdigest()
    return int(digest, 16) % 1000


def search_terms(context: CourseContext) -> list[str]:
    """Free-text terms for job-posting providers: occupations, then skills, then topics."""
    if context.occupations:
        top = sorted(context.occupations, key=lambda o: o.match_score, reverse=True)
        return [o.title for o in top[:MAX_OCCUPATION_TITLES]]
    technical = [s.name for s in context.skills if s.category in ("technical", "domain")]
    if technical:
        return technical[:5]
    return list(context.topics)


def excluded_titles(domain: CourseDomain) -> list[str]:
    return [] if domain == "business_management" else list(RECRUITING_TITLES)


def build_search_filters(context: CourseContext, max_results: int) -> SearchFilters:
    domain = context.domain.domain
    soc_mappings = map_course_to_soc(context.title, context.outcomes)
    keywords = industry_keywords(soc_mappings, context.occupations)

    seed = variety_seed(context.title, context.level, context.topics)
    category = JOB_TITLE_CATEGORIES[seed % len(JOB_TITLE_CATEGORIES)]
    employee_ranges = EMPLOYEE_RANGES[seed % len(EMPLOYEE_RANGES)]

    base_titles = [o.title for o in context.occupations[:MAX_OCCUPATION_TITLES]] or [m.title for m in soc_mappings]
    location = expand_country_codes(context.search_location or context.location)

    filters = SearchFilters(
        locations=[location] if location else [],
        industry_keywords=map_industries_to_taxonomy(keywords),
        excluded_industries=excluded_search_industries(domain),
        job_titles=list(dict.fromkeys(base_titles + list(category))),
        excluded_titles=excluded_titles(domain),
        employee_ranges=list(employee_ranges),
        occupation_codes=[o.code for o in context.occupations] or [m.code for m in soc_mappings],
        search_terms=search_terms(context),
        max_results=max_results,
    )
    logger.info("Search filters for %r: %d industries, location=%r, seed=%d",
                context.title, len(filters.industry_keywords), location, seed)
    return filters
