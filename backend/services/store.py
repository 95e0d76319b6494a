"""SQLite persistence for discovered companies and generation runs.

Companies are keyed by canonical website (or "name:<normalized name>"
when a candidate has no website). Upserts merge field by field: only
fields the new record actually provides overwrite the stored ones, so a
sparse second write never blanks out earlier enrichment.
"""

import json
import logging
import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from config import settings
from models.schemas.company import DiscoveredCompany
from services.discovery.dedup import canonical_website, normalize_company_name

logger = logging.getLogger(__name__)

_EMPTY = (None, "", [], {})


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def company_key(company: DiscoveredCompany) -> str:
    website = canonical_website(company.website)
    return website or "name:" + normalize_company_name(company.name)


def provided_fields(company: DiscoveredCompany) -> dict[str, Any]:
    """Fields explicitly set on the record and not empty."""
    data = company.model_dump(mode="json", exclude_unset=True)
    return {k: v for k, v in data.items() if v not in _EMPTY}


class CompanyStore:
    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path or settings.database_path
        self._lock = threading.Lock()
        self._conn = self._connect()

    def _connect(self) -> sqlite3.Connection:
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(self.db_path, check_same_thread=False, timeout=5, isolation_level=None)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS companies (
                website TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS generation_runs (
                run_id TEXT PRIMARY KEY,
                course_title TEXT NOT NULL,
                payload_json TEXT NOT NULL,
                created_at TEXT NOT NULL
            );
            """
        )
        return conn

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # -- companies -------------------------------------------------------

    def upsert_company(self, company: DiscoveredCompany) -> DiscoveredCompany:
        """Insert or merge one company; returns the stored record."""
        key = company_key(company)
        now = _utc_now()
        with self._lock:
            row = self._conn.execute(
                "SELECT payload_json FROM companies WHERE website = ?", (key,)
            ).fetchone()
            stored = json.loads(row[0]) if row else {}
            stored.update(provided_fields(company))
            merged = DiscoveredCompany.model_validate(stored)
            payload = json.dumps(stored, ensure_ascii=False)
            if row:
                self._conn.execute(
                    "UPDATE companies SET name = ?, payload_json = ?, updated_at = ? WHERE website = ?",
                    (merged.name, payload, now, key),
                )
            else:
                self._conn.execute(
                    """
                    INSERT INTO companies (website, name, payload_json, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (key, merged.name, payload, now, now),
                )
        logger.debug("Upserted company %s (%s)", merged.name, key)
        return merged

    def upsert_companies(self, companies: list[DiscoveredCompany]) -> int:
        for company in companies:
            self.upsert_company(company)
        return len(companies)

    def get_company(self, website_or_name: str) -> DiscoveredCompany | None:
        key = canonical_website(website_or_name)
        with self._lock:
            row = self._conn.execute(
                "SELECT payload_json FROM companies WHERE website IN (?, ?)",
                (key, "name:" + normalize_company_name(website_or_name)),
            ).fetchone()
        if not row:
            return None
        return DiscoveredCompany.model_validate(json.loads(row[0]))

    def list_companies(self) -> list[DiscoveredCompany]:
        with self._lock:
            rows = self._conn.execute("SELECT payload_json FROM companies ORDER BY name").fetchall()
        return [DiscoveredCompany.model_validate(json.loads(r[0])) for r in rows]

    def count_companies(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM companies").fetchone()[0]

    # -- generation runs -------------------------------------------------

    def record_run(self, course_title: str, payload: dict[str, Any]) -> str:
        run_id = uuid.uuid4().hex
        with self._lock:
            self._conn.execute(
                "INSERT INTO generation_runs (run_id, course_title, payload_json, created_at) VALUES (?, ?, ?, ?)",
                (run_id, course_title, json.dumps(payload, ensure_ascii=False, default=str), _utc_now()),
            )
        logger.info("Recorded generation run %s for %r", run_id, course_title)
        return run_id

    def get_run(self, run_id: str) -> dict[str, Any] | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT run_id, course_title, payload_json, created_at FROM generation_runs WHERE run_id = ?",
                (run_id,),
            ).fetchone()
        if not row:
            return None
        return {
            "run_id": row[0],
            "course_title": row[1],
            "payload": json.loads(row[2]),
            "created_at": datetime.fromisoformat(row[3]),
        }
