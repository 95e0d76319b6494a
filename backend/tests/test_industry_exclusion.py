"""Tests for context-aware industry exclusion."""

import pytest

from conftest import make_occupation, make_postings
from models.schemas.company import JobPosting
from services.industry_exclusion import (
    analyze_job_postings_for_projects,
    excluded_search_industries,
    sector_relevance_penalty,
    should_exclude_industry,
)

DOMAINS = [
    "business_management", "engineering_technical", "computer_tech",
    "healthcare_science", "hybrid", "unknown",
]

ENGINEERING = [make_occupation(code="17-2141.00", title="Mechanical Engineer")]
BUSINESS = [make_occupation(code="13-1111.00", title="Business Analyst")]


@pytest.mark.parametrize("domain", DOMAINS)
def test_insurance_hard_excluded_for_every_domain(domain):
    decision = should_exclude_industry("Insurance", domain, ENGINEERING)
    assert decision.should_exclude
    assert decision.penalty == 1.0


@pytest.mark.parametrize("sector", ["Legal Services", "Online Gambling", "Tobacco Products"])
def test_other_hard_sectors(sector):
    assert should_exclude_industry(sector, "business_management").penalty == 1.0


def test_staffing_allowed_for_business():
    decision = should_exclude_industry("Staffing & Recruiting", "business_management", BUSINESS)
    assert (decision.should_exclude, decision.penalty) == (False, 0.0)


@pytest.mark.parametrize("domain", ["engineering_technical", "computer_tech", "healthcare_science", "unknown"])
def test_staffing_penalized_for_technical_domains(domain):
    decision = should_exclude_industry("Staffing & Recruiting", domain, ENGINEERING)
    assert (decision.should_exclude, decision.penalty) == (True, 0.8)


def test_hybrid_with_business_primary_allows_staffing():
    decision = should_exclude_industry("Human Resources", "hybrid", BUSINESS + ENGINEERING)
    assert (decision.should_exclude, decision.penalty) == (False, 0.0)


def test_hybrid_with_internal_project_roles_gets_small_penalty():
    postings = [JobPosting(title="Data Engineer", description="Join our team building pipelines")]
    decision = should_exclude_industry("Staffing", "hybrid", ENGINEERING + BUSINESS, postings)
    assert (decision.should_exclude, decision.penalty) == (False, pytest.approx(0.3))


def test_hybrid_without_project_roles_is_excluded():
    decision = should_exclude_industry("Staffing", "hybrid", ENGINEERING, make_postings("Senior Recruiter"))
    assert (decision.should_exclude, decision.penalty) == (True, 0.8)


def test_hybrid_without_postings_is_excluded():
    decision = should_exclude_industry("Staffing", "hybrid", ENGINEERING, [])
    assert decision.should_exclude


def test_unlisted_sector_has_no_penalty():
    decision = should_exclude_industry("Mechanical Or Industrial Engineering", "engineering_technical", ENGINEERING)
    assert (decision.should_exclude, decision.penalty) == (False, 0.0)
    assert should_exclude_industry("", "unknown").penalty == 0.0


class TestJobPostingAnalysis:
    def test_empty(self):
        assert not analyze_job_postings_for_projects([])

    def test_project_role_passes(self):
        assert analyze_job_postings_for_projects(make_postings("Mechanical Engineer II"))

    def test_client_placement_is_not_internal(self):
        postings = [JobPosting(title="Software Engineer", description="Placement with our client in Boston")]
        assert not analyze_job_postings_for_projects(postings)

    def test_recruiting_title_counts_against(self):
        postings = make_postings("Software Engineer", "Technical Recruiter", "Talent Acquisition Partner")
        assert not analyze_job_postings_for_projects(postings)

    def test_tie_passes(self):
        assert analyze_job_postings_for_projects(make_postings("Data Scientist", "Recruiter"))


class TestSectorRelevance:
    def test_empty_sector_or_no_occupations(self):
        assert sector_relevance_penalty(ENGINEERING, "") == 0.0
        assert sector_relevance_penalty([], "Marketing") == 0.0

    def test_expected_industry(self):
        assert sector_relevance_penalty(ENGINEERING, "HVAC Contractors") == 0.0
        assert sector_relevance_penalty(ENGINEERING, "Power Generation") == 0.0

    def test_moderate_mismatch(self):
        assert sector_relevance_penalty(ENGINEERING, "Real Estate") == pytest.approx(0.15)

    def test_generic(self):
        assert sector_relevance_penalty(ENGINEERING, "Business Solutions") == pytest.approx(0.15)

    def test_unrecognized(self):
        assert sector_relevance_penalty(ENGINEERING, "Fisheries") == pytest.approx(0.10)

    def test_software_occupation_expects_technology(self):
        software = [make_occupation(code="15-1252.00", title="Software Developer")]
        assert sector_relevance_penalty(software, "Information Technology") == 0.0


def test_search_exclusions_depend_on_domain():
    assert "Staffing & Recruiting" not in excluded_search_industries("business_management")
    assert "Insurance" in excluded_search_industries("business_management")
    assert "Staffing & Recruiting" in excluded_search_industries("engineering_technical")
    assert "Staffing & Recruiting" in excluded_search_industries("hybrid")
