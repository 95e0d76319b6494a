"""Apollo organization-search provider.

Endpoints (API key in the X-Api-Key header, never in the URL):
    POST /v1/mixed_companies/search           organization search
    POST /v1/organizations/enrich             full organization record by domain
    POST /v1/mixed_people/search              decision-maker contact
    GET  /api/v1/organizations/{id}/job_postings
"""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError, field_validator

from config import settings
from models.schemas.company import Contact, DiscoveredCompany, JobPosting, SearchFilters
from services.discovery.base import DiscoveryProvider, ProviderSearchResult
from services.discovery.dedup import canonical_website
from services.discovery.enrichment import finalize_enrichment, format_employee_count
from services.errors import ConfigurationError, ProviderError
from services.http import build_client, request_json

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 100
MAX_JOB_POSTINGS = 25
CONTACT_TITLES = ["Director of Partnerships", "VP of Partnerships", "COO", "CEO", "Owner"]
CONTACT_SENIORITIES = ["c_suite", "vp", "director", "owner"]


# ---------------------------------------------------------------------------
# Native payloads
# ---------------------------------------------------------------------------

class ApolloTechnology(BaseModel):
    uid: str = ""
    name: str = ""
    category: str | None = None


class ApolloOrganization(BaseModel):
    id: str
    name: str
    website_url: str | None = None
    primary_domain: str | None = None
    linkedin_url: str | None = None
    logo_url: str | None = None
    estimated_num_employees: int | None = None
    annual_revenue: float | None = None
    industry: str | None = None
    keywords: list[str] = []
    industry_tag_list: list[str] = []
    short_description: str | None = None
    founded_year: int | None = None
    street_address: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    current_technologies: list[ApolloTechnology] = []
    technology_names: list[str] = []
    latest_funding_stage: str | None = None
    latest_funding_round_date: str | None = None
    total_funding: float | None = None

    @field_validator("annual_revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float | None:
        if v in (None, ""):
            return None
        try:
            return float(str(v).replace("$", "").replace(",", ""))
        except ValueError:
            return None

    @field_validator("keywords", "industry_tag_list", "technology_names", "current_technologies", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return v or []

    @property
    def technologies(self) -> list[str]:
        names = [t.name for t in self.current_technologies if t.name] or self.technology_names
        return list(dict.fromkeys(names))


class ApolloSearchPayload(BaseModel):
    organizations: list[ApolloOrganization] = []
    accounts: list[ApolloOrganization] = []


class ApolloEnrichPayload(BaseModel):
    organization: dict[str, Any] | None = None


class ApolloPhone(BaseModel):
    sanitized_number: str = ""


class ApolloPerson(BaseModel):
    name: str = ""
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    headline: str | None = None
    linkedin_url: str | None = None
    phone_numbers: list[ApolloPhone] = []

    @field_validator("phone_numbers", mode="before")
    @classmethod
    def _none_to_list(cls, v: Any) -> Any:
        return v or []


class ApolloPeoplePayload(BaseModel):
    people: list[ApolloPerson] = []


class ApolloJobPosting(BaseModel):
    id: str = ""
    title: str = ""
    url: str | None = None
    city: str | None = None
    state: str | None = None
    posted_at: str | None = None


class ApolloJobPostingsPayload(BaseModel):
    organization_job_postings: list[ApolloJobPosting] = []


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def _address(org: ApolloOrganization) -> str:
    parts = [org.street_address, org.city, org.state, org.postal_code]
    return ", ".join(p.strip() for p in parts if p and p.strip())


def _location(org: ApolloOrganization) -> str:
    return ", ".join(p for p in (org.city, org.state, org.country) if p)


def organization_to_company(org: ApolloOrganization) -> DiscoveredCompany:
    return DiscoveredCompany(
        name=org.name,
        website=org.website_url or (f"https://{org.primary_domain}" if org.primary_domain else ""),
        provider_id=org.id,
        sector=org.industry or "",
        size=format_employee_count(org.estimated_num_employees),
        description=org.short_description or "",
        address=_address(org),
        city=org.city or "",
        state=org.state or "",
        country=org.country or "",
        location=_location(org),
        technologies=org.technologies,
        industry_keywords=org.industry_tag_list or org.keywords,
        funding_stage=org.latest_funding_stage,
        total_funding_usd=org.total_funding,
        latest_funding_date=org.latest_funding_round_date,
        employee_count=org.estimated_num_employees,
        founded_year=org.founded_year,
        annual_revenue=org.annual_revenue,
        linkedin_url=org.linkedin_url,
        logo_url=org.logo_url,
        discovery_source="apollo_discovery",
    )


def person_to_contact(person: ApolloPerson) -> Contact:
    return Contact(
        name=person.name,
        first_name=person.first_name or "",
        last_name=person.last_name or "",
        title=person.title or "",
        email=person.email or "",
        phone=person.phone_numbers[0].sanitized_number if person.phone_numbers else "",
        linkedin_url=person.linkedin_url or "",
        headline=person.headline or "",
    )


def _is_excluded(company: DiscoveredCompany, excluded: list[str]) -> bool:
    sector = company.sector.lower()
    return bool(sector) and any(e.lower() in sector for e in excluded)


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class ApolloProvider(DiscoveryProvider):
    name = "apollo"
    credits_per_enrichment = 3

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        max_attempts: int | None = None,
    ) -> None:
        self.api_key = settings.apollo_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.apollo_base_url).rstrip("/")
        self.max_attempts = max_attempts
        self._client = build_client(
            self.base_url,
            headers={"X-Api-Key": self.api_key, "Cache-Control": "no-cache"},
            transport=transport,
        )

    def required_secrets(self) -> list[str]:
        return ["apollo_api_key"]

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health_check(self) -> bool:
        if not self.is_configured():
            return False
        try:
            response = await self._client.post(
                "/v1/mixed_companies/search",
                json={"organization_locations": ["United States"], "page": 1, "per_page": 1},
                timeout=settings.health_check_timeout_seconds,
            )
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("Apollo health check failed: %s", e)
            return False

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        return await request_json(
            self._client, "POST", path, provider=self.name, max_attempts=self.max_attempts, json=body
        )

    async def search(self, filters: SearchFilters, limit: int) -> ProviderSearchResult:
        if not self.is_configured():
            raise ConfigurationError("Apollo provider not configured: missing apollo_api_key")

        body: dict[str, Any] = {
            "organization_locations": filters.locations,
            "q_organization_keyword_tags": filters.industry_keywords,
            "q_organization_job_titles": filters.job_titles,
            "organization_num_employees_ranges": filters.employee_ranges,
            "page": 1,
            "per_page": min(limit, MAX_PER_PAGE),
        }
        body = {k: v for k, v in body.items() if v not in ([], None)}
        data = await self._post("/v1/mixed_companies/search", body)
        try:
            payload = ApolloSearchPayload.model_validate(data)
        except ValidationError as e:
            raise ProviderError(self.name, f"malformed search payload: {e.error_count()} errors") from e

        companies = [organization_to_company(o) for o in payload.organizations + payload.accounts]
        kept = [c for c in companies if not _is_excluded(c, filters.excluded_industries)]
        if len(kept) < len(companies):
            logger.info("Apollo: dropped %d candidates in excluded industries", len(companies) - len(kept))
        logger.info("Apollo search %s returned %d organizations", filters.locations, len(kept))
        return ProviderSearchResult(companies=kept[:limit], api_calls=1)

    async def enrich(self, company: DiscoveredCompany) -> DiscoveredCompany:
        """Organization enrich, contact lookup and job postings; each step may fail independently."""
        updated = company
        domain = canonical_website(company.website)

        if domain:
            try:
                data = await self._post("/v1/organizations/enrich", {"domain": domain})
                raw = ApolloEnrichPayload.model_validate(data).organization
                if raw:
                    merged = organization_to_company(ApolloOrganization.model_validate(
                        {"id": company.provider_id, "name": company.name, **raw}
                    ))
                    fields = {k: v for k, v in merged if v not in (None, "", [], "Unknown") and k != "discovery_source"}
                    updated = updated.model_copy(update=fields)
            except (ProviderError, ValidationError) as e:
                logger.warning("Apollo enrich for %s failed: %s", company.name, e)

        if company.provider_id:
            try:
                data = await self._post("/v1/mixed_people/search", {
                    "organization_ids": [company.provider_id],
                    "person_titles": CONTACT_TITLES,
                    "person_seniorities": CONTACT_SENIORITIES,
                    "page": 1,
                    "per_page": 1,
                })
                people = ApolloPeoplePayload.model_validate(data).people
                if people and people[0].name:
                    updated = updated.model_copy(update={"contact": person_to_contact(people[0])})
            except (ProviderError, ValidationError) as e:
                logger.warning("Apollo contact lookup for %s failed: %s", company.name, e)

            try:
                data = await request_json(
                    self._client, "GET", f"/api/v1/organizations/{company.provider_id}/job_postings",
                    provider=self.name, max_attempts=self.max_attempts,
                    params={"page": 1, "per_page": MAX_JOB_POSTINGS},
                )
                postings = ApolloJobPostingsPayload.model_validate(data).organization_job_postings
                updated = updated.model_copy(update={"job_postings": [
                    JobPosting(
                        id=p.id, title=p.title, url=p.url or "",
                        location=", ".join(x for x in (p.city, p.state) if x),
                        posted_at=p.posted_at or "",
                    )
                    for p in postings[:MAX_JOB_POSTINGS]
                ]})
            except (ProviderError, ValidationError) as e:
                logger.warning("Apollo job postings for %s failed: %s", company.name, e)

        return finalize_enrichment(updated)
