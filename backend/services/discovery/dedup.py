"""Candidate de-duplication by canonical website, then fuzzy company name."""

import logging
import re
from urllib.parse import urlsplit

from rapidfuzz import fuzz

from models.schemas.company import DiscoveredCompany

logger = logging.getLogger(__name__)

NAME_SIMILARITY_THRESHOLD = 92

_LEGAL_SUFFIXES = re.compile(
    r"\b(inc|llc|ltd|limited|corporation|corp|company|co|gmbh|plc|pvt|the)\b\.?", re.IGNORECASE
)


def canonical_website(url: str | None) -> str:
    """Lowercase host without scheme, "www." or path ("https://www.Acme.com/about" -> "acme.com")."""
    url = (url or "").strip().lower()
    if not url:
        return ""
    if "://" not in url:
        url = "//" + url
    host = urlsplit(url).hostname or ""
    return host.removeprefix("www.")


def normalize_company_name(name: str) -> str:
    """Lowercase name with legal suffixes and punctuation removed ("The Boeing Co." -> "boeing")."""
    name = _LEGAL_SUFFIXES.sub("", (name or "").lower())
    name = re.sub(r"[^a-z0-9\s]", "", name)
    return re.sub(r"\s+", " ", name).strip()


def _merge(kept: DiscoveredCompany, duplicate: DiscoveredCompany) -> DiscoveredCompany:
    """Fill kept's empty fields from the duplicate and union postings and technologies."""
    updates = {}
    for field, value in duplicate:
        current = getattr(kept, field)
        if current in (None, "", []) and value not in (None, "", []):
            updates[field] = value
    seen_titles = {(p.id, p.title) for p in kept.job_postings}
    extra_postings = [p for p in duplicate.job_postings if (p.id, p.title) not in seen_titles]
    if kept.job_postings and extra_postings:
        updates["job_postings"] = kept.job_postings + extra_postings
    if kept.technologies and duplicate.technologies:
        updates["technologies"] = list(dict.fromkeys(kept.technologies + duplicate.technologies))
    return kept.model_copy(update=updates) if updates else kept


def dedupe_companies(companies: list[DiscoveredCompany]) -> list[DiscoveredCompany]:
    """Collapse duplicates, keeping the first occurrence's position and identity."""
    result: list[DiscoveredCompany] = []
    by_website: dict[str, int] = {}
    names: list[str] = []

    for company in companies:
        website = canonical_website(company.website)
        name = normalize_company_name(company.name)

        index = by_website.get(website) if website else None
        if index is None and name:
            for i, existing in enumerate(names):
                if existing and fuzz.ratio(name, existing) >= NAME_SIMILARITY_THRESHOLD:
                    index = i
                    break

        if index is None:
            if website:
                by_website[website] = len(result)
            result.append(company)
            names.append(name)
            continue

        result[index] = _merge(result[index], company)
        if website and website not in by_website:
            by_website[website] = index

    if len(result) < len(companies):
        logger.info("Deduplicated %d candidates to %d", len(companies), len(result))
    return result
