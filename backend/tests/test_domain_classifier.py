"""Tests for course domain classification."""

import pytest

from conftest import make_occupation
from services.domain_classifier import classify_domain, domain_bucket, major_group


@pytest.mark.parametrize("code,group", [
    ("17-2141.00", "17"),
    ("15-1252", "15"),
    ("2144.1", "21"),
    ("2512", "25"),
    ("http://data.europa.eu/esco/occupation/abc", ""),
    ("", ""),
])
def test_major_group(code, group):
    assert major_group(code) == group


def test_domain_bucket_weights():
    assert domain_bucket("51-4041.00") == ("engineering_technical", 0.8)
    assert domain_bucket("47-2061.00") == ("unknown", 0.5)
    assert domain_bucket("2512.4") == ("computer_tech", 1.0)
    assert domain_bucket("http://data.europa.eu/esco/occupation/abc") == ("unknown", 0.5)


def test_empty_input_is_unknown():
    result = classify_domain([])
    assert result.domain == "unknown"
    assert result.confidence == 0.0


def test_thermal_engineering_is_engineering_technical():
    result = classify_domain([make_occupation(code="17-2141.00", confidence=0.6)])
    assert result.domain == "engineering_technical"
    assert result.confidence == pytest.approx(1.0)
    assert result.reasoning == "Primary domain: engineering_technical (100%)"


@pytest.mark.parametrize("code,domain", [
    ("11-2021.00", "business_management"),
    ("13-2051.00", "business_management"),
    ("15-1252.00", "computer_tech"),
    ("19-2031.00", "healthcare_science"),
    ("29-1141.00", "healthcare_science"),
    ("51-4041.00", "engineering_technical"),
])
def test_single_bucket_gets_full_confidence(code, domain):
    result = classify_domain([make_occupation(code=code, confidence=0.8)])
    assert result.domain == domain
    assert result.confidence == pytest.approx(1.0)


def test_hybrid_when_no_bucket_reaches_sixty_percent():
    result = classify_domain([
        make_occupation(code="13-1111.00", confidence=0.9),
        make_occupation(code="15-2051.00", confidence=0.8),
    ])
    share = 0.9 / 1.7
    assert result.domain == "hybrid"
    assert result.confidence == pytest.approx(1 - share, abs=1e-4)
    assert result.reasoning.startswith("Hybrid course: 53% business_management, 47% computer_tech")


def test_dominant_bucket_is_not_hybrid():
    result = classify_domain([
        make_occupation(code="17-2141.00", confidence=0.9),
        make_occupation(code="17-2051.00", confidence=0.9),
        make_occupation(code="15-1252.00", confidence=0.5),
    ])
    assert result.domain == "engineering_technical"
    assert result.confidence == pytest.approx(1.8 / 2.3, abs=1e-4)
    assert result.votes["computer_tech"] == pytest.approx(0.5)


def test_esco_isco_codes_vote():
    result = classify_domain([make_occupation(code="2144.1", confidence=0.85, provider="esco")])
    assert result.domain == "engineering_technical"
