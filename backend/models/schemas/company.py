"""Discovery contracts: course context in, discovered companies out."""

from typing import Literal

from pydantic import BaseModel, Field

from models.schemas.domain import CourseDomainClassification
from models.schemas.occupation import CoordinatedOccupation
from models.schemas.skill import ExtractedSkill

EnrichmentLevel = Literal["basic", "apollo_verified", "fully_enriched"]


class JobPosting(BaseModel):
    id: str = ""
    title: str = ""
    description: str = ""
    url: str = ""
    location: str = ""
    posted_at: str = ""
    skills_needed: list[str] = []


class BuyingIntentSignal(BaseModel):
    signal_type: str  # recent_funding, hiring_velocity
    strength: str = "medium"  # low, medium, high
    detail: str = ""


class Contact(BaseModel):
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    title: str = ""
    email: str = ""
    phone: str = ""
    linkedin_url: str = ""
    headline: str = ""


class DiscoveredCompany(BaseModel):
    """A candidate sponsor organization after provider normalization.

    Keyed by canonical website when persisted. Optional fields left as
    None are treated as "not provided" by the store's field-wise merge.
    """
    id: str | None = None
    name: str
    website: str = ""
    provider_id: str = ""  # organization id in the discovery provider
    sector: str = ""
    size: str = ""
    description: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    location: str = ""  # display string used for distance lookups
    technologies: list[str] = []
    industry_keywords: list[str] = []
    job_postings: list[JobPosting] = []
    contact: Contact | None = None
    buying_intent_signals: list[BuyingIntentSignal] = []
    funding_stage: str | None = None
    total_funding_usd: float | None = None
    latest_funding_date: str | None = None
    employee_count: int | None = None
    founded_year: int | None = None
    annual_revenue: float | None = None
    linkedin_url: str | None = None
    logo_url: str | None = None

    discovery_source: str = ""
    enrichment_level: EnrichmentLevel = "basic"
    data_completeness_score: float = 0.0  # 0-100
    distance_miles: float | None = None
    last_enriched_at: str | None = None


class CourseContext(BaseModel):
    """Everything the discovery stage knows about the requesting course."""
    title: str
    level: str = ""
    outcomes: list[str] = []
    topics: list[str] = []
    location: str = ""  # institution location, origin for distance
    search_location: str = ""  # location used for the provider search
    target_count: int = Field(default=10, ge=1, le=100)
    skills: list[ExtractedSkill] = []
    occupations: list[CoordinatedOccupation] = []
    domain: CourseDomainClassification = CourseDomainClassification()


class SearchFilters(BaseModel):
    """Provider-agnostic organization search filter."""
    locations: list[str] = []
    industry_keywords: list[str] = []
    excluded_industries: list[str] = []
    job_titles: list[str] = []
    excluded_titles: list[str] = []
    employee_ranges: list[str] = []  # "51,200" style buckets
    occupation_codes: list[str] = []
    search_terms: list[str] = []  # free-text terms for job-posting providers
    max_results: int = 30
