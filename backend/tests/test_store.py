"""Tests for the SQLite company and generation-run store."""

import pytest

from conftest import make_company, make_postings
from services.store import CompanyStore, company_key, provided_fields


@pytest.fixture
def store(tmp_path):
    s = CompanyStore(str(tmp_path / "db" / "discovery.sqlite3"))
    yield s
    s.close()


def test_company_key():
    assert company_key(make_company("Acme", website="https://www.acme.com/about")) == "acme.com"
    assert company_key(make_company("Acme Thermal, Inc.")) == "name:acme thermal"


def test_provided_fields_skips_defaults_and_empties():
    fields = provided_fields(make_company("Acme", website="acme.com", sector=""))
    assert fields == {"name": "Acme", "website": "acme.com"}


def test_upsert_twice_yields_one_record_with_field_wise_merge(store):
    store.upsert_company(make_company(
        "Acme Thermal", website="https://acme.com", sector="Mechanical", city="Boston",
        job_postings=make_postings("Thermal Engineer"),
    ))
    merged = store.upsert_company(make_company("Acme Thermal", website="acme.com", city="Cambridge"))

    assert store.count_companies() == 1
    assert merged.city == "Cambridge"
    assert merged.sector == "Mechanical"
    assert [p.title for p in merged.job_postings] == ["Thermal Engineer"]
    assert merged.website == "acme.com"


def test_get_company_by_website_or_name(store):
    store.upsert_company(make_company("Acme Thermal", website="acme.com"))
    store.upsert_company(make_company("Contoso Ltd"))

    assert store.get_company("https://www.acme.com").name == "Acme Thermal"
    assert store.get_company("Contoso").name == "Contoso Ltd"
    assert store.get_company("nobody.example") is None


def test_list_companies_sorted_by_name(store):
    store.upsert_companies([make_company("Zeta", website="zeta.io"), make_company("Alpha", website="alpha.io")])
    assert [c.name for c in store.list_companies()] == ["Alpha", "Zeta"]


def test_generation_run_round_trip(store):
    run_id = store.record_run("Thermal Systems", {"threshold": 0.35, "skills": ["Heat Transfer"]})
    run = store.get_run(run_id)
    assert run["course_title"] == "Thermal Systems"
    assert run["payload"]["threshold"] == 0.35
    assert store.get_run("missing") is None
