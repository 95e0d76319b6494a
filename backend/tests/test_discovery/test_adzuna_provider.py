"""Tests for the Adzuna adapter: paging, employer aggregation and failure handling."""

import httpx
import pytest

from models.schemas.company import SearchFilters
from services.discovery.adzuna import (
    AdzunaJob,
    AdzunaProvider,
    aggregate_by_company,
    category_for_soc,
    size_from_job_count,
    skills_in_text,
)
from services.errors import ConfigurationError, ProviderError


def _job(i: int, company: str, label: str = "Engineering Jobs", description: str = "Python and MATLAB"):
    return {
        "id": i,
        "title": f"Engineer {i}",
        "description": description,
        "company": {"display_name": company},
        "location": {"display_name": "Boston, Massachusetts"},
        "category": {"label": label, "tag": "engineering-jobs"},
        "redirect_url": f"https://adzuna.test/{i}",
        "created": "2026-05-01T00:00:00Z",
    }


def _transport(pages: dict[int, httpx.Response], seen: list[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        page = int(request.url.path.rsplit("/", 1)[-1])
        return pages.get(page, httpx.Response(404))
    return httpx.MockTransport(handler)


def _provider(pages, seen, **kwargs):
    return AdzunaProvider(
        app_id="id", app_key="key", base_url="https://adzuna.test/jobs", country="us",
        pages=kwargs.pop("max_pages", 2), results_per_page=kwargs.pop("per_page", 3),
        transport=_transport(pages, seen), max_attempts=1,
    )


FILTERS = SearchFilters(
    locations=["Boston, MA"],
    industry_keywords=["Manufacturing"],
    occupation_codes=["17-2141.00"],
    search_terms=["Mechanical Engineer", "Thermal Engineer"],
)


@pytest.mark.parametrize("code,category", [
    ("17-2141.00", "engineering-jobs"),
    ("15-1252.00", "it-jobs"),
    ("17-9999.00", "engineering-jobs"),
    ("53-3032.00", "other-general-jobs"),
])
def test_category_for_soc(code, category):
    assert category_for_soc(code) == category


@pytest.mark.parametrize("count,size", [(25, "1000+"), (10, "500-1000"), (5, "100-500"), (2, "50-100"), (1, "1-50")])
def test_size_from_job_count(count, size):
    assert size_from_job_count(count) == size


def test_skills_in_text():
    assert skills_in_text("We use Python, SQL and SolidWorks") == ["Python", "SQL", "SolidWorks"]
    assert skills_in_text("") == []


def test_aggregation_groups_by_employer():
    jobs = [AdzunaJob.model_validate(j) for j in (
        _job(1, "Acme Thermal Inc."), _job(2, "Contoso"), _job(3, "ACME Thermal"),
        _job(4, "Unknown"), _job(5, ""),
    )]
    companies = aggregate_by_company(jobs)

    assert [c.name for c in companies] == ["Acme Thermal Inc.", "Contoso"]
    acme = companies[0]
    assert len(acme.job_postings) == 2
    assert acme.size == "50-100"
    assert acme.sector == "Engineering"
    assert acme.city == "Boston" and acme.state == "Massachusetts"
    assert acme.technologies == ["Python", "MATLAB"]
    assert acme.discovery_source == "adzuna"
    # name .2 + location .2 + sector .15 + jobs .25
    assert acme.data_completeness_score == 80.0


@pytest.mark.asyncio
async def test_search_pages_until_short_page():
    seen: list[httpx.Request] = []
    pages = {
        1: httpx.Response(200, json={"results": [_job(1, "Acme"), _job(2, "Contoso"), _job(3, "Acme")]}),
        2: httpx.Response(200, json={"results": [_job(4, "Fabrikam")]}),
    }
    result = await _provider(pages, seen).search(FILTERS, limit=10)

    assert [c.name for c in result.companies] == ["Acme", "Contoso", "Fabrikam"]
    assert result.api_calls == 2
    params = seen[0].url.params
    assert params["what"] == "Mechanical Engineer OR Thermal Engineer"
    assert params["where"] == "Boston, MA"
    assert params["category"] == "engineering-jobs"
    assert params["app_id"] == "id"
    assert seen[0].url.path == "/jobs/us/search/1"


@pytest.mark.asyncio
async def test_search_stops_on_missing_later_page():
    seen: list[httpx.Request] = []
    pages = {1: httpx.Response(200, json={"results": [_job(1, "Acme"), _job(2, "Contoso"), _job(3, "Fabrikam")]})}
    result = await _provider(pages, seen, max_pages=3).search(FILTERS, limit=10)

    assert len(result.companies) == 3
    assert result.api_calls == 1
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_first_page_failure_raises():
    with pytest.raises(ProviderError):
        await _provider({1: httpx.Response(500)}, []).search(FILTERS, limit=10)


@pytest.mark.asyncio
async def test_search_without_industries_drops_category():
    seen: list[httpx.Request] = []
    pages = {1: httpx.Response(200, json={"results": []})}
    result = await _provider(pages, seen).search(FILTERS.model_copy(update={"industry_keywords": []}), limit=10)

    assert result.companies == []
    assert "category" not in seen[0].url.params


@pytest.mark.asyncio
async def test_unconfigured():
    provider = AdzunaProvider(app_id="id", app_key="")
    assert not provider.is_configured()
    assert await provider.health_check() is False
    with pytest.raises(ConfigurationError):
        await provider.search(FILTERS, 10)
