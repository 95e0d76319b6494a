"""Adzuna job-search provider.

Discovers companies through their job postings: search jobs for the
course's occupations in the target location, group the postings by
employer, and infer sector and size from the postings. Every candidate
therefore has at least one real opening.

    GET {base}/{country}/search/{page}?app_id=..&app_key=..&what=..&where=..&category=..
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError, field_validator

from config import settings
from models.schemas.company import DiscoveredCompany, JobPosting, SearchFilters
from services.discovery.base import DiscoveryProvider, ProviderSearchResult
from services.discovery.dedup import normalize_company_name
from services.errors import ConfigurationError, ProviderError
from services.http import request_json, build_client

logger = logging.getLogger(__name__)

# SOC detailed occupation -> Adzuna category tag
SOC_TO_CATEGORY: dict[str, str] = {
    "17-2141": "engineering-jobs",  # Mechanical Engineers
    "17-2011": "engineering-jobs",  # Aerospace Engineers
    "17-2051": "engineering-jobs",  # Civil Engineers
    "17-2071": "engineering-jobs",  # Electrical Engineers
    "17-2112": "engineering-jobs",  # Industrial Engineers
    "17-2199": "engineering-jobs",  # Engineers, All Other
    "15-1252": "it-jobs",  # Software Developers
    "15-1253": "it-jobs",  # Software QA
    "15-1244": "it-jobs",  # Network and Computer Systems Administrators
    "15-1299": "it-jobs",  # Computer Occupations, All Other
    "15-2051": "scientific-qa-jobs",  # Data Scientists
    "15-2021": "scientific-qa-jobs",  # Mathematicians
    "17-1011": "engineering-jobs",  # Architects
    "17-1012": "engineering-jobs",  # Landscape Architects
    "17-3011": "engineering-jobs",  # Architectural and Civil Drafters
    "19-1029": "scientific-qa-jobs",  # Biological Scientists
    "19-2031": "scientific-qa-jobs",  # Chemists
    "19-2042": "scientific-qa-jobs",  # Geoscientists
    "19-3051": "scientific-qa-jobs",  # Urban and Regional Planners
    "11-2021": "marketing-pr-jobs",  # Marketing Managers
    "11-2022": "sales-jobs",  # Sales Managers
    "11-3021": "admin-jobs",  # Computer and Information Systems Managers
    "11-9041": "engineering-jobs",  # Architectural and Engineering Managers
    "13-2011": "accounting-finance-jobs",  # Accountants and Auditors
    "13-2051": "accounting-finance-jobs",  # Financial Analysts
    "13-1161": "consultancy-jobs",  # Market Research Analysts
    "29-1141": "healthcare-nursing-jobs",  # Registered Nurses
    "29-1071": "healthcare-nursing-jobs",  # Physician Assistants
    "25-1071": "teaching-jobs",  # Health Specialties Teachers
    "25-1194": "teaching-jobs",  # Vocational Education Teachers
    "27-1024": "creative-arts-design-jobs",  # Graphic Designers
    "27-3031": "pr-advertising-marketing-jobs",  # Public Relations Specialists
}

MAJOR_GROUP_CATEGORY: dict[str, str] = {
    "11": "admin-jobs",
    "13": "accounting-finance-jobs",
    "15": "it-jobs",
    "17": "engineering-jobs",
    "19": "scientific-qa-jobs",
    "25": "teaching-jobs",
    "27": "creative-arts-design-jobs",
    "29": "healthcare-nursing-jobs",
}
GENERAL_CATEGORY = "other-general-jobs"

CATEGORY_TO_SECTOR: dict[str, str] = {
    "Engineering Jobs": "Engineering",
    "IT Jobs": "Technology",
    "Scientific & QA Jobs": "Research & Development",
    "Accounting & Finance Jobs": "Financial Services",
    "Healthcare & Nursing Jobs": "Healthcare",
    "Teaching Jobs": "Education",
    "Manufacturing Jobs": "Manufacturing",
    "Construction Jobs": "Construction",
    "Marketing & PR Jobs": "Marketing & Advertising",
    "Sales Jobs": "Sales",
    "Admin Jobs": "Business Services",
}

SKILL_KEYWORDS = (
    "Python", "Java", "JavaScript", "TypeScript", "C++", "C#", "SQL",
    "AWS", "Azure", "GCP", "Docker", "Kubernetes",
    "React", "Angular", "Vue", "Node.js",
    "Machine Learning", "AI", "Data Science",
    "AutoCAD", "SolidWorks", "MATLAB", "CAD",
    "Agile", "Scrum", "CI/CD",
)

COMPLETENESS_WEIGHTS = {
    "name": 0.20,
    "location": 0.20,
    "sector": 0.15,
    "jobs": 0.25,
    "website": 0.10,
    "contacts": 0.10,
}


def category_for_soc(code: str) -> str:
    detailed = code.split(".")[0]
    if detailed in SOC_TO_CATEGORY:
        return SOC_TO_CATEGORY[detailed]
    return MAJOR_GROUP_CATEGORY.get(code.split("-")[0], GENERAL_CATEGORY)


def size_from_job_count(count: int) -> str:
    if count >= 20:
        return "1000+"
    if count >= 10:
        return "500-1000"
    if count >= 5:
        return "100-500"
    if count >= 2:
        return "50-100"
    return "1-50"


def skills_in_text(text: str) -> list[str]:
    lower = (text or "").lower()
    return [s for s in SKILL_KEYWORDS if s.lower() in lower]


# ---------------------------------------------------------------------------
# Native payloads
# ---------------------------------------------------------------------------

class AdzunaCompany(BaseModel):
    display_name: str = ""


class AdzunaLocation(BaseModel):
    display_name: str = ""
    area: list[str] = []


class AdzunaCategory(BaseModel):
    label: str = ""
    tag: str = ""


class AdzunaJob(BaseModel):
    id: str
    title: str = ""
    description: str = ""
    company: AdzunaCompany = AdzunaCompany()
    location: AdzunaLocation = AdzunaLocation()
    category: AdzunaCategory = AdzunaCategory()
    created: str = ""
    redirect_url: str = ""
    salary_min: float | None = None
    salary_max: float | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, v: Any) -> str:
        return str(v)


class AdzunaSearchPayload(BaseModel):
    results: list[AdzunaJob] = []
    count: int = 0


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _split_location(display: str) -> tuple[str, str]:
    parts = [p.strip() for p in display.split(",")]
    return parts[0], parts[1] if len(parts) > 1 else ""


def infer_sector(jobs: list[AdzunaJob]) -> str:
    labels = Counter(j.category.label for j in jobs if j.category.label)
    if not labels:
        return ""
    label, _ = labels.most_common(1)[0]
    return CATEGORY_TO_SECTOR.get(label, label)


def completeness(company: DiscoveredCompany) -> float:
    checks = {
        "name": bool(company.name),
        "location": bool(company.location),
        "sector": bool(company.sector),
        "jobs": bool(company.job_postings),
        "website": bool(company.website),
        "contacts": company.contact is not None,
    }
    return round(sum(COMPLETENESS_WEIGHTS[k] for k, ok in checks.items() if ok) * 100, 1)


def aggregate_by_company(jobs: list[AdzunaJob], now: datetime | None = None) -> list[DiscoveredCompany]:
    """Group postings by normalized employer name, most openings first."""
    groups: dict[str, tuple[str, list[AdzunaJob]]] = {}
    for job in jobs:
        name = job.company.display_name.strip()
        if not name or name.lower() == "unknown":
            continue
        key = normalize_company_name(name)
        groups.setdefault(key, (name, []))[1].append(job)

    now = now or datetime.now(timezone.utc)
    companies = []
    for name, group in sorted(groups.values(), key=lambda g: len(g[1]), reverse=True):
        first = group[0]
        city, state = _split_location(first.location.display_name)
        postings = [
            JobPosting(
                id=j.id, title=j.title, description=j.description, url=j.redirect_url,
                location=j.location.display_name, posted_at=j.created,
                skills_needed=skills_in_text(j.description),
            )
            for j in group
        ]
        company = DiscoveredCompany(
            name=name,
            sector=infer_sector(group),
            size=size_from_job_count(len(group)),
            address=first.location.display_name,
            city=city,
            state=state,
            location=first.location.display_name,
            technologies=list(dict.fromkeys(s for p in postings for s in p.skills_needed)),
            job_postings=postings,
            discovery_source="adzuna",
            enrichment_level="basic",
            last_enriched_at=now.isoformat(),
        )
        companies.append(company.model_copy(update={"data_completeness_score": completeness(company)}))
    return companies


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class AdzunaProvider(DiscoveryProvider):
    name = "adzuna"

    def __init__(
        self,
        app_id: str | None = None,
        app_key: str | None = None,
        base_url: str | None = None,
        country: str | None = None,
        pages: int | None = None,
        results_per_page: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.app_id = settings.adzuna_app_id if app_id is None else app_id
        self.app_key = settings.adzuna_app_key if app_key is None else app_key
        self.base_url = (base_url or settings.adzuna_base_url).rstrip("/")
        self.country = country or settings.adzuna_country
        self.pages = pages or settings.adzuna_pages
        self.results_per_page = results_per_page or settings.adzuna_results_per_page
        self.max_attempts = max_attempts
        self._client = build_client(self.base_url, transport=transport)

    def required_secrets(self) -> list[str]:
        return ["adzuna_app_id", "adzuna_app_key"]

    def is_configured(self) -> bool:
        return bool(self.app_id and self.app_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_params(self) -> dict[str, str]:
        return {"app_id": self.app_id, "app_key": self.app_key}

    async def health_check(self) -> bool:
        if not self.is_configured():
            return False
        try:
            response = await self._client.get(
                f"/{self.country}/search/1",
                params={**self._auth_params(), "results_per_page": 1, "what": "engineer"},
                timeout=settings.health_check_timeout_seconds,
            )
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("Adzuna health check failed: %s", e)
            return False

    async def search(self, filters: SearchFilters, limit: int) -> ProviderSearchResult:
        if not self.is_configured():
            raise ConfigurationError("Adzuna provider not configured: missing adzuna_app_id/adzuna_app_key")

        params: dict[str, Any] = {
            **self._auth_params(),
            "results_per_page": self.results_per_page,
            "what": " OR ".join(filters.search_terms),
        }
        if filters.locations:
            params["where"] = filters.locations[0]
        category = category_for_soc(filters.occupation_codes[0]) if filters.occupation_codes else GENERAL_CATEGORY
        if category != GENERAL_CATEGORY:
            params["category"] = category
        # without industry keywords the search is location-only
        if not filters.industry_keywords:
            params.pop("category", None)

        jobs: list[AdzunaJob] = []
        pages_fetched = 0
        for page in range(1, self.pages + 1):
            try:
                data = await request_json(
                    self._client, "GET", f"/{self.country}/search/{page}",
                    provider=self.name, max_attempts=self.max_attempts, params=params,
                )
                payload = AdzunaSearchPayload.model_validate(data)
            except (ProviderError, ValidationError) as e:
                if page == 1:
                    if isinstance(e, ValidationError):
                        raise ProviderError(self.name, "malformed search payload") from e
                    raise
                logger.warning("Adzuna page %d failed, keeping %d jobs: %s", page, len(jobs), e)
                break
            pages_fetched += 1
            jobs.extend(payload.results)
            if len(payload.results) < self.results_per_page:
                break

        companies = aggregate_by_company(jobs)
        logger.info("Adzuna: %d jobs from %d employers for %r", len(jobs), len(companies), params.get("where"))
        return ProviderSearchResult(companies=companies[:limit], api_calls=pages_fetched)
