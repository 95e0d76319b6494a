"""Tests for the in-process occupation catalog."""

import pytest

from conftest import make_skill
from services.occupations.local_catalog import (
    CATALOG,
    LocalCatalogProvider,
    confidence_for,
    match_score,
)


def test_catalog_uses_soc_codes():
    assert len(CATALOG) == 13
    for occ in CATALOG:
        major, _, detail = occ.code.partition("-")
        assert len(major) == 2 and major.isdigit()
        assert detail


def test_match_score_exact_and_partial():
    mech = next(o for o in CATALOG if o.title == "Mechanical Engineer")
    # "heat transfer" is an exact keyword, "fluid" appears only inside other terms
    assert match_score(["heat transfer"], mech) == pytest.approx(1.0)
    assert match_score(["solid"], mech) == pytest.approx(0.5)
    assert match_score(["heat transfer", "pottery"], mech) == pytest.approx(0.5)
    assert match_score([], mech) == 0.0


@pytest.mark.parametrize("score,expected", [(0.8, 0.9), (0.7, 0.9), (0.5, 0.75), (0.3, 0.6), (0.25, 0.5)])
def test_confidence_steps(score, expected):
    assert confidence_for(score) == expected


@pytest.mark.asyncio
async def test_thermal_skills_map_to_mechanical_engineer():
    provider = LocalCatalogProvider()
    skills = [make_skill("Fluid Dynamics"), make_skill("Heat Transfer"), make_skill("HVAC")]
    result = await provider.map_skills_to_occupations(skills)

    assert result.provider == "local_catalog"
    assert result.api_calls == 0
    top = result.occupations[0]
    assert top.code == "17-2141.00"
    assert top.match_score > 0.2
    assert all(s.importance == 80 for s in top.skills)
    assert all(a.importance == 75 for a in top.work_activities)


@pytest.mark.asyncio
async def test_results_capped_and_filtered():
    provider = LocalCatalogProvider()
    skills = [make_skill(n) for n in ("Python", "SQL", "Excel", "Tableau", "Data Analysis")]
    result = await provider.map_skills_to_occupations(skills)
    assert 0 < len(result.occupations) <= 5
    assert all(o.match_score > 0.2 for o in result.occupations)
    scores = [o.match_score for o in result.occupations]
    assert scores == sorted(scores, reverse=True)


@pytest.mark.asyncio
async def test_unrelated_skills_are_unmapped():
    provider = LocalCatalogProvider()
    result = await provider.map_skills_to_occupations([make_skill("Pottery Glazing")])
    assert result.occupations == []
    assert result.unmapped_skills == ["Pottery Glazing"]


@pytest.mark.asyncio
async def test_health_check_follows_catalog():
    assert await LocalCatalogProvider().health_check()
    assert not await LocalCatalogProvider(catalog=()).health_check()
    assert LocalCatalogProvider().is_configured()
