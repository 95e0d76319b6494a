"""Tests for the ESCO adapter against a mocked HTTP transport."""

import httpx
import pytest

from conftest import make_skill
from services.cache import TTLCache
from services.errors import ProviderError
from services.occupations.esco import EscoProvider, keyword_match_score

MECH_URI = "http://data.europa.eu/esco/occupation/mech"
HVAC_URI = "http://data.europa.eu/esco/occupation/hvac"

SEARCH_PAYLOAD = {
    "_embedded": {
        "results": [
            {"uri": MECH_URI, "title": "mechanical engineer", "description": "heat transfer and thermodynamics"},
            {"uri": HVAC_URI, "title": "HVAC technician", "description": {"literal": "installs hvac systems"}},
        ]
    }
}

DETAILS = {
    MECH_URI: {
        "uri": MECH_URI,
        "code": "2144.1",
        "title": "mechanical engineer",
        "description": {"literal": "Designs machines"},
        "hasEssentialSkill": [{"preferredLabel": "thermodynamics", "uri": "s1"}],
        "hasOptionalSkill": [{"preferredLabel": "CAD software", "uri": "s2"}],
        "broaderRelations": [{"preferredLabel": "engineering professionals"}],
    },
    HVAC_URI: {
        "uri": HVAC_URI,
        "title": "HVAC technician",
        "_links": {"hasEssentialSkill": [{"title": "install ventilation", "uri": "s3"}]},
    },
}


def _transport(calls: list[str], fail_details: bool = False):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.path.endswith("/search"):
            assert request.url.params["type"] == "occupation"
            return httpx.Response(200, json=SEARCH_PAYLOAD)
        if request.url.path.endswith("/resource/occupation"):
            if fail_details:
                return httpx.Response(500)
            return httpx.Response(200, json=DETAILS[request.url.params["uri"]])
        return httpx.Response(404)
    return httpx.MockTransport(handler)


def _provider(calls, **kwargs):
    return EscoProvider(
        base_url="https://esco.test/api",
        transport=_transport(calls, **kwargs),
        cache=TTLCache(3600),
        max_attempts=1,
    )


def test_keyword_match_score():
    assert keyword_match_score(["heat transfer", "cad"], "Mechanical engineer", "heat transfer") == 0.5
    assert keyword_match_score([], "x", "y") == 0.0


@pytest.mark.asyncio
async def test_maps_search_hits_to_standard_occupations():
    calls: list[str] = []
    provider = _provider(calls)
    skills = [make_skill("Heat Transfer"), make_skill("Thermodynamics"), make_skill("HVAC")]

    result = await provider.map_skills_to_occupations(skills)

    assert result.provider == "esco"
    assert result.api_calls == 3
    mech = next(o for o in result.occupations if o.title == "mechanical engineer")
    assert mech.code == "2144.1"
    assert mech.description == "Designs machines"
    assert mech.confidence == pytest.approx(0.85)
    assert mech.match_score == pytest.approx(2 / 3, abs=1e-3)
    importance = {s.name: s.importance for s in mech.skills}
    assert importance == {"thermodynamics": 90, "CAD software": 60}
    assert mech.work_activities[0].importance == 75

    hvac = next(o for o in result.occupations if o.title == "HVAC technician")
    assert hvac.code == HVAC_URI
    assert hvac.skills[0].name == "install ventilation"


@pytest.mark.asyncio
async def test_second_call_served_from_cache():
    calls: list[str] = []
    provider = _provider(calls)
    skills = [make_skill("Heat Transfer")]

    await provider.map_skills_to_occupations(skills)
    first_calls = len(calls)
    result = await provider.map_skills_to_occupations(skills)

    assert len(calls) == first_calls
    assert result.api_calls == 0
    assert result.cache_hits == 3


@pytest.mark.asyncio
async def test_failed_details_are_skipped():
    calls: list[str] = []
    provider = _provider(calls, fail_details=True)
    result = await provider.map_skills_to_occupations([make_skill("Heat Transfer")])
    assert result.occupations == []


@pytest.mark.asyncio
async def test_search_failure_raises_provider_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    provider = EscoProvider(base_url="https://esco.test/api", transport=transport, max_attempts=1)
    with pytest.raises(ProviderError) as exc:
        await provider.map_skills_to_occupations([make_skill("Heat Transfer")])
    assert exc.value.provider == "esco"


@pytest.mark.asyncio
async def test_malformed_search_payload_raises_provider_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"_embedded": {"results": "nope"}}))
    provider = EscoProvider(base_url="https://esco.test/api", transport=transport, max_attempts=1)
    with pytest.raises(ProviderError):
        await provider.map_skills_to_occupations([make_skill("Heat Transfer")])


@pytest.mark.asyncio
async def test_health_check():
    healthy = EscoProvider(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))
    down = EscoProvider(transport=httpx.MockTransport(lambda r: httpx.Response(500)))
    assert await healthy.health_check()
    assert not await down.health_check()
