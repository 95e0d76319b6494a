"""Tests for the O*NET adapter against a mocked HTTP transport."""

import base64

import httpx
import pytest

from conftest import make_skill
from services.errors import ProviderError
from services.occupations.onet import OnetProvider

CODE = "17-2141.00"

RESPONSES = {
    "/search": {"occupation": [
        {"code": CODE, "title": "Mechanical Engineers", "tags": {"bright_outlook": True, "green": False}},
        {"code": "49-9021.00", "title": "HVAC Mechanics and Installers", "tags": {}},
    ]},
    "work_activities": {"work_activity": [
        {"id": "4.A.2.b.2", "name": "Thinking Creatively", "importance": {"value": 78}},
    ]},
    "skills": {"element": [
        {"id": "2.B.5.a", "name": "Heat Transfer Analysis", "importance": {"value": 72}},
    ]},
    "tools_used": {"tool": [{"name": "Computer aided design CAD software"}]},
    "technology_skills": {"technology": [{"name": "Autodesk AutoCAD"}, {"name": "MathWorks MATLAB"}]},
    "tasks": {"task": [{"statement": "Design thermal systems."}]},
}


def _handler(seen_auth: list[str]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen_auth.append(request.headers.get("Authorization", ""))
        path = request.url.path
        if path.endswith("/search"):
            return httpx.Response(200, json=RESPONSES["/search"])
        if path.endswith("/about"):
            return httpx.Response(200, json={"api_version": "1.9"})
        return httpx.Response(200, json=RESPONSES[path.rsplit("/", 1)[-1]])
    return handler


def _provider(seen_auth, username="user", password="secret"):
    return OnetProvider(
        username=username,
        password=password,
        base_url="https://onet.test/ws/online",
        transport=httpx.MockTransport(_handler(seen_auth)),
        max_attempts=1,
    )


def test_not_configured_without_credentials():
    provider = OnetProvider(username="", password="")
    assert not provider.is_configured()


@pytest.mark.asyncio
async def test_unconfigured_provider_refuses_to_map():
    provider = OnetProvider(username="", password="")
    assert not await provider.health_check()
    with pytest.raises(ProviderError):
        await provider.map_skills_to_occupations([make_skill("Heat Transfer")])


@pytest.mark.asyncio
async def test_maps_occupation_details():
    seen_auth: list[str] = []
    provider = _provider(seen_auth)
    skills = [make_skill("Mechanical"), make_skill("HVAC")]

    result = await provider.map_skills_to_occupations(skills)

    expected = "Basic " + base64.b64encode(b"user:secret").decode()
    assert all(h == expected for h in seen_auth)
    assert result.provider == "onet"
    # 1 search + 5 detail endpoints x 2 occupations
    assert result.api_calls == 11

    mech = next(o for o in result.occupations if o.code == CODE)
    assert mech.confidence == pytest.approx(0.95)
    assert mech.skills[0].name == "Heat Transfer Analysis"
    assert mech.skills[0].importance == 72
    assert mech.work_activities[0].importance == 78
    assert mech.tools == ["Computer aided design CAD software"]
    assert "MathWorks MATLAB" in mech.technologies
    assert mech.tasks == ["Design thermal systems."]


@pytest.mark.asyncio
async def test_search_hits_ranked_by_keyword_overlap():
    provider = _provider([])
    result = await provider.map_skills_to_occupations([make_skill("HVAC"), make_skill("Installers")])
    assert result.occupations[0].code == "49-9021.00"
    assert result.occupations[0].match_score == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_auth_failure_is_provider_error():
    provider = OnetProvider(
        username="user",
        password="wrong",
        base_url="https://onet.test/ws/online",
        transport=httpx.MockTransport(lambda r: httpx.Response(401)),
        max_attempts=1,
    )
    with pytest.raises(ProviderError) as exc:
        await provider.map_skills_to_occupations([make_skill("HVAC")])
    assert "401" in str(exc.value)


@pytest.mark.asyncio
async def test_health_check_uses_about_endpoint():
    assert await _provider([]).health_check()
