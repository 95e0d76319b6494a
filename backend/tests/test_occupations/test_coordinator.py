"""Tests for multi-provider occupation coordination."""

import pytest

from conftest import FakeOccupationProvider, make_occupation, make_skill
from services.errors import ConfigurationError, ProviderError
from services.occupations import registry
from services.occupations.coordinator import (
    OccupationCoordinator,
    consensus_score,
    merge_occurrences,
    normalize_title,
)

SKILLS = [make_skill("Heat Transfer"), make_skill("Thermodynamics"), make_skill("Pottery")]


def _mech(**kwargs):
    return make_occupation(coordinated=False, **kwargs)


def test_normalize_title():
    assert normalize_title("  Mechanical   Engineer! ") == "mechanical engineer"
    assert normalize_title("Mechanical-Engineer") == "mechanical engineer"


def test_consensus_formula():
    occ = _mech(match_score=0.5, confidence=0.8, provider="a")
    assert consensus_score([occ], 2) == pytest.approx(0.4 * 0.5 + 0.3 * 0.8 + 0.3 * 0.5)


def test_consensus_non_decreasing_in_agreeing_providers():
    scores = []
    for n in range(1, 4):
        occurrences = [_mech(match_score=0.6, confidence=0.8, provider=f"p{i}") for i in range(n)]
        scores.append(consensus_score(occurrences, 3))
    assert scores == sorted(scores)
    assert scores[0] < scores[-1]


def test_merge_unions_collections_and_keeps_highest_importance():
    a = _mech(provider="local_catalog", skills=("Thermodynamics",), tools=["ANSYS"])
    b = _mech(provider="onet", skills=("Thermodynamics", "CAD"), tools=["ANSYS", "MATLAB"],
              description="From O*NET")
    b.skills[0].importance = 95

    merged = merge_occurrences([a, b], providers_queried=2)

    assert merged.providers == ["local_catalog", "onet"]
    assert {s.name for s in merged.skills} == {"Thermodynamics", "CAD"}
    assert next(s for s in merged.skills if s.name == "Thermodynamics").importance == 95
    assert merged.tools == ["ANSYS", "MATLAB"]
    assert merged.description == "From O*NET"


@pytest.mark.asyncio
async def test_coordinate_merges_same_title_across_providers(events, recorder):
    local = FakeOccupationProvider("local_catalog", [_mech(title="Mechanical Engineer")], priority=3)
    onet = FakeOccupationProvider("onet", [
        _mech(title="mechanical engineer"),
        _mech(code="17-2051.00", title="Civil Engineer", match_score=0.3),
    ], priority=1)
    coordinator = OccupationCoordinator([onet, local], events=events)

    result = await coordinator.coordinate(SKILLS)

    assert result.providers_queried == ["local_catalog", "onet"]
    assert result.providers_failed == []
    top = result.occupations[0]
    assert normalize_title(top.title) == "mechanical engineer"
    assert top.providers == ["local_catalog", "onet"]
    assert top.consensus_score > result.occupations[1].consensus_score
    assert result.unmapped_skills == ["Pottery"]
    assert recorder.find("occupation_coordination")[0]["occupations"] == 2


@pytest.mark.asyncio
async def test_failing_provider_is_isolated(events, recorder):
    ok = FakeOccupationProvider("local_catalog", [_mech()], priority=3)
    broken = FakeOccupationProvider("esco", fail=True, priority=2)
    result = await OccupationCoordinator([ok, broken], events=events).coordinate(SKILLS)

    assert result.providers_failed == ["esco"]
    assert result.providers_succeeded == ["local_catalog"]
    assert len(result.occupations) == 1
    assert recorder.find("occupation_provider_failed")[0]["provider"] == "esco"


@pytest.mark.asyncio
async def test_unhealthy_and_unconfigured_providers_are_skipped():
    ok = FakeOccupationProvider("local_catalog", [_mech()])
    sick = FakeOccupationProvider("esco", [_mech()], healthy=False)
    bare = FakeOccupationProvider("onet", [_mech()], configured=False)
    result = await OccupationCoordinator([ok, sick, bare]).coordinate(SKILLS)

    assert result.providers_queried == ["local_catalog"]
    assert sick.calls == 0 and bare.calls == 0


@pytest.mark.asyncio
async def test_no_usable_provider_is_configuration_error():
    coordinator = OccupationCoordinator([FakeOccupationProvider("onet", configured=False)])
    with pytest.raises(ConfigurationError):
        await coordinator.coordinate(SKILLS)


@pytest.mark.asyncio
async def test_all_providers_failing_is_provider_error():
    coordinator = OccupationCoordinator([
        FakeOccupationProvider("local_catalog", fail=True),
        FakeOccupationProvider("esco", fail=True),
    ])
    with pytest.raises(ProviderError):
        await coordinator.coordinate(SKILLS)


@pytest.mark.asyncio
async def test_results_capped():
    many = [_mech(code=f"17-20{i:02d}.00", title=f"Engineer {i}") for i in range(15)]
    result = await OccupationCoordinator([FakeOccupationProvider("local_catalog", many)]).coordinate(SKILLS)
    assert len(result.occupations) == 10


def test_registry_builds_static_provider_list():
    registry.clear()
    coordinator = registry.get_coordinator()
    assert [p.name for p in coordinator.providers] == ["local_catalog", "esco", "onet"]
    assert registry.get_coordinator() is coordinator
    with pytest.raises(ValueError):
        registry._create_provider("lightcast")
    registry.clear()
