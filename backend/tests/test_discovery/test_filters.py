"""Tests for search filter construction."""

import pytest

from conftest import make_occupation, make_skill
from models.schemas.company import CourseContext
from models.schemas.domain import CourseDomainClassification
from services.discovery.filters import (
    EMPLOYEE_RANGES,
    RECRUITING_TITLES,
    broader_locations,
    build_search_filters,
    expand_country_codes,
    map_course_to_soc,
    map_industries_to_taxonomy,
    search_terms,
    variety_seed,
)


def _context(**overrides) -> CourseContext:
    fields = dict(
        title="Mechanical Engineering Design",
        level="advanced",
        outcomes=["Apply heat transfer and thermodynamics to design HVAC systems"],
        topics=["thermal", "fluids"],
        location="Boston, MA",
        skills=[make_skill("Heat Transfer")],
        occupations=[make_occupation()],
        domain=CourseDomainClassification(domain="engineering_technical", confidence=1.0),
    )
    fields.update(overrides)
    return CourseContext(**fields)


class TestCountryCodes:
    @pytest.mark.parametrize("location,expected", [
        ("IN", "India"),
        ("Bangalore, KA, IN", "Bangalore, KA, India"),
        ("London, GB", "London, United Kingdom"),
        ("Chicago, IL", "Chicago, IL"),
        ("Sacramento, CA", "Sacramento, CA"),
        ("Boston, Massachusetts", "Boston, Massachusetts"),
        ("", ""),
    ])
    def test_expansion(self, location, expected):
        assert expand_country_codes(location) == expected


def test_broader_locations():
    assert broader_locations("Boston, Massachusetts, United States") == [
        "Massachusetts, United States", "United States",
    ]
    assert broader_locations("Boston, MA") == ["MA"]
    assert broader_locations("Boston") == []


def test_mechanical_course_maps_to_mechanical_engineers_first():
    mappings = map_course_to_soc("Mechanical Engineering Design", ["heat transfer and thermodynamics"])
    assert mappings[0].code == "17-2141.00"
    assert len(mappings) <= 3


def test_unnamed_discipline_falls_back_to_keywords():
    mappings = map_course_to_soc("Introduction to Machine Learning", ["statistics for analytics"])
    assert mappings
    assert mappings[0].code.startswith("15-2051")


def test_no_match_returns_empty():
    assert map_course_to_soc("Medieval Poetry", ["read sonnets"]) == []


def test_taxonomy_mapping_keeps_unmapped_and_caps():
    terms = map_industries_to_taxonomy(["aerospace", "Quantum Widgets"])
    assert terms[:3] == ["Aerospace", "Aviation & Aerospace", "Defense & Space"]
    assert "Quantum Widgets" in terms
    many = map_industries_to_taxonomy(["aerospace", "automotive", "manufacturing", "hvac", "energy", "software"])
    assert len(many) <= 15


def test_seed_is_deterministic():
    assert variety_seed("A", "b", ["c"]) == variety_seed("A", "b", ["c"])
    assert 0 <= variety_seed("A", "b", ["c"]) < 1000


class TestBuildSearchFilters:
    def test_same_course_same_filters(self):
        assert build_search_filters(_context(), 30) == build_search_filters(_context(), 30)

    def test_seed_never_changes_industries_or_location(self):
        a = build_search_filters(_context(topics=["thermal"]), 30)
        b = build_search_filters(_context(topics=["something else entirely"]), 30)
        assert a.industry_keywords == b.industry_keywords
        assert a.locations == b.locations
        assert a.employee_ranges and tuple(a.employee_ranges) in EMPLOYEE_RANGES

    def test_fields(self):
        filters = build_search_filters(_context(), 30)
        assert filters.locations == ["Boston, MA"]
        assert "Aerospace" in filters.industry_keywords
        assert filters.job_titles[0] == "Mechanical Engineer"
        assert filters.occupation_codes == ["17-2141.00"]
        assert filters.search_terms == ["Mechanical Engineer"]
        assert filters.excluded_titles == list(RECRUITING_TITLES)
        assert "Insurance" in filters.excluded_industries
        assert filters.max_results == 30

    def test_search_location_preferred_and_expanded(self):
        filters = build_search_filters(_context(search_location="IN"), 30)
        assert filters.locations == ["India"]

    def test_business_course_keeps_recruiting_titles(self):
        context = _context(domain=CourseDomainClassification(domain="business_management", confidence=1.0))
        assert build_search_filters(context, 10).excluded_titles == []


def test_search_terms_fall_back_to_skills_then_topics():
    assert search_terms(_context(occupations=[])) == ["Heat Transfer"]
    assert search_terms(_context(occupations=[], skills=[])) == ["thermal", "fluids"]
