"""Similarity ranking of discovered companies against the course profile.

Course text (skills, occupation titles, high-importance work activities,
technologies) is compared with company text (description, job titles,
technologies). Embedding cosine similarity is used when the embedding
provider is available and its circuit breaker is closed; otherwise a
deterministic keyword score stands in.

Per candidate:
    penalized = raw * (1 - penalty)
    final     = min(1, penalized * (1 + hiring_boost))
"""

import logging
import re

from config import settings
from models.schemas.company import DiscoveredCompany, JobPosting
from models.schemas.domain import CourseDomain, ExclusionDecision
from models.schemas.match import ConfidenceTier, RankedCompany, RankingResult, SemanticMatch
from models.schemas.occupation import StandardOccupation
from models.schemas.skill import ExtractedSkill
from services.circuit_breaker import CircuitBreaker
from services.embeddings import EmbeddingProvider
from services.errors import DegradedModeWarning
from services.events import EventEmitter, default_emitter
from services.industry_exclusion import (
    is_soft_excluded_sector,
    sector_relevance_penalty,
    should_exclude_industry,
)

logger = logging.getLogger(__name__)

IMPORTANT_ACTIVITY = 70  # work activities above this importance describe the course
MAX_ACTIVITIES = 10
MAX_TECHNOLOGIES = 10
HIRING_SATURATION = 10  # postings at which the hiring boost is at full strength

_STOP_WORDS = frozenset({
    "the", "and", "for", "with", "this", "that", "from", "have", "will",
    "can", "are", "was", "were", "been", "has", "had", "does", "did",
    "should", "could", "would", "may", "might", "must", "shall",
})

_IMPORTANT_TERM_PATTERNS = [
    re.compile(r"\b(python|java|javascript|typescript|c\+\+|sql|excel|matlab|ansys|tensorflow|pytorch|react"
               r"|angular|vue)\b", re.IGNORECASE),
    re.compile(r"\b(machine learning|deep learning|data analysis|cloud computing|devops|agile|scrum)\b",
               re.IGNORECASE),
    re.compile(r"\b(engineering|software|hardware|mechanical|thermal|fluid|structural|civil)\b", re.IGNORECASE),
    re.compile(r"\b(analysis|design|development|modeling|simulation|optimization)\b", re.IGNORECASE),
]


# ---------------------------------------------------------------------------
# Text construction
# ---------------------------------------------------------------------------

def build_course_text(skills: list[ExtractedSkill], occupations: list[StandardOccupation]) -> str:
    parts = ["Skills required:", ", ".join(s.name for s in skills)]
    if occupations:
        parts += ["\nRelevant occupations:", ", ".join(o.title for o in occupations)]
        activities = [
            a.description or a.name
            for o in occupations for a in o.work_activities
            if a.importance > IMPORTANT_ACTIVITY
        ][:MAX_ACTIVITIES]
        parts += ["\nWork activities:", "; ".join(activities)]
        technologies = list(dict.fromkeys(t for o in occupations for t in o.technologies))
        parts += ["\nTechnologies:", ", ".join(technologies[:MAX_TECHNOLOGIES])]
    return " ".join(parts)


def build_company_text(company: DiscoveredCompany) -> str:
    parts = []
    if company.description:
        parts.append(company.description)
    if company.job_postings:
        parts += ["\nJob openings:", ", ".join(p.title for p in company.job_postings)]
    if company.technologies:
        parts += ["\nTechnologies used:", ", ".join(company.technologies)]
    return " ".join(parts)


# ---------------------------------------------------------------------------
# Keyword similarity
# ---------------------------------------------------------------------------

def tokenize(text: str) -> set[str]:
    words = re.sub(r"[^\w\s]", " ", text.lower()).split()
    return {w for w in words if len(w) > 3 and w not in _STOP_WORDS}


def important_terms(text: str) -> set[str]:
    return {m.group(0).lower() for p in _IMPORTANT_TERM_PATTERNS for m in p.finditer(text)}


def keyword_similarity(text_a: str, text_b: str) -> float:
    """Jaccard token overlap plus a bonus for shared technical terms."""
    tokens_a, tokens_b = tokenize(text_a), tokenize(text_b)
    union = tokens_a | tokens_b
    jaccard = len(tokens_a & tokens_b) / len(union) if union else 0.0

    shared = len(important_terms(text_a) & important_terms(text_b))
    bonus = min(settings.keyword_important_bonus_cap, shared * settings.keyword_important_bonus_step)
    floor = settings.keyword_floor_score if shared > 0 else 0.0
    return max(floor, min(1.0, jaccard + bonus))


# ---------------------------------------------------------------------------
# Scoring helpers
# ---------------------------------------------------------------------------

def adaptive_threshold(pool_size: int, table: list[tuple[int, float]] | None = None) -> float:
    """Smaller pools get a lower bar so a thin market still yields candidates."""
    table = table or settings.threshold_table
    for min_exclusive, threshold in table:
        if pool_size > min_exclusive:
            return threshold
    return table[-1][1]


def hiring_boost(postings: list[JobPosting], factor: float | None = None) -> float:
    if not postings:
        return 0.0
    factor = settings.hiring_boost_factor if factor is None else factor
    return factor * (0.5 + 0.5 * min(1.0, len(postings) / HIRING_SATURATION))


def confidence_tier(score: float) -> ConfidenceTier:
    if score >= 0.8:
        return "high"
    if score >= 0.65:
        return "medium"
    return "low"


def explanation(score: float, matching_skills: list[str], matching_activities: list[str]) -> str:
    if score >= 0.8:
        return (f"Excellent match: {len(matching_skills)} matching skills ({', '.join(matching_skills[:3])}) "
                f"and {len(matching_activities)} matching work activities.")
    if score >= 0.65:
        return f"Good match: {len(matching_skills)} matching skills ({', '.join(matching_skills[:2])})."
    if score >= 0.5:
        return "Moderate match: Some skill overlap but may not be ideal fit."
    return "Poor match: Limited skill/activity alignment with course requirements."


def matching_skills(skills: list[ExtractedSkill], company: DiscoveredCompany) -> list[str]:
    text = " ".join(
        [company.description] + [p.title for p in company.job_postings] + company.technologies
    ).lower()
    return [s.name for s in skills if any(tok in text for tok in s.name.lower().split())]


def matching_activities(occupations: list[StandardOccupation], company: DiscoveredCompany) -> list[str]:
    text = " ".join([company.description] + [p.title for p in company.job_postings]).lower()
    found = [
        a.name
        for o in occupations for a in o.work_activities
        if a.importance > IMPORTANT_ACTIVITY and any(tok in text for tok in a.name.lower().split())
    ]
    return list(dict.fromkeys(found))


def should_skip_ranking(skills: list[ExtractedSkill], occupations: list[StandardOccupation]) -> bool:
    """Nothing to compare against: no skills and no occupation skills or activities."""
    if skills:
        return False
    return not any(o.skills or o.work_activities for o in occupations)


def effective_penalty(
    decision: ExclusionDecision,
    occupations: list[StandardOccupation],
    sector: str,
) -> float:
    """Exclusion penalty when the engine flags the sector, else the mild relevance penalty."""
    if decision.penalty > 0:
        return decision.penalty
    if is_soft_excluded_sector(sector):
        # explicitly allowed for this course
        return 0.0
    return sector_relevance_penalty(occupations, sector)


# ---------------------------------------------------------------------------
# Ranker
# ---------------------------------------------------------------------------

class SimilarityRanker:
    def __init__(
        self,
        embeddings: EmbeddingProvider | None = None,
        breaker: CircuitBreaker | None = None,
        events: EventEmitter | None = None,
        threshold_table: list[tuple[int, float]] | None = None,
    ) -> None:
        self.embeddings = embeddings
        self.breaker = breaker or CircuitBreaker(
            "embeddings",
            threshold=settings.circuit_breaker_threshold,
            reset_seconds=settings.circuit_breaker_reset_seconds,
        )
        self.events = events or default_emitter()
        self.threshold_table = threshold_table or settings.threshold_table

    def _degraded(self, reason: str) -> None:
        logger.warning("%s: %s; using keyword similarity", DegradedModeWarning.__name__, reason)
        self.events.emit("degraded_mode", warning=DegradedModeWarning.__name__, reason=reason)

    def similarities(self, course_text: str, company_texts: list[str]) -> tuple[list[float], str]:
        """Raw similarity per company text, and the method that produced it."""
        if self.embeddings is not None:
            if not self.breaker.is_closed():
                self._degraded("embedding circuit open")
            else:
                try:
                    scores = self.embeddings.batch_similarity(course_text, company_texts)
                    self.breaker.record_success()
                    return scores, "embedding"
                except Exception as e:
                    self.breaker.record_failure()
                    self._degraded(f"embedding similarity failed: {e}")
        return [keyword_similarity(course_text, t) for t in company_texts], "keyword"

    def rank(
        self,
        companies: list[DiscoveredCompany],
        skills: list[ExtractedSkill],
        occupations: list[StandardOccupation],
        domain: CourseDomain,
    ) -> RankingResult:
        if should_skip_ranking(skills, occupations):
            logger.info("No skills or occupation data; returning %d companies unranked", len(companies))
            self.events.emit("ranking_skipped", candidates=len(companies))
            return RankingResult(
                kept=[RankedCompany(company=c) for c in companies],
                threshold=None,
                skipped=True,
                method="skipped",
            )
        if not companies:
            return RankingResult(threshold=adaptive_threshold(0, self.threshold_table))

        course_text = build_course_text(skills, occupations)
        raw_scores, method = self.similarities(course_text, [build_company_text(c) for c in companies])

        ranked: list[RankedCompany] = []
        for company, raw in zip(companies, raw_scores):
            ranked.append(RankedCompany(company=company, match=self._score(company, raw, skills, occupations, domain)))
        ranked.sort(key=lambda r: r.match.final_score, reverse=True)

        threshold = adaptive_threshold(len(ranked), self.threshold_table)
        kept = [r for r in ranked if r.match.final_score >= threshold]
        filtered = [r for r in ranked if r.match.final_score < threshold]
        average = sum(r.match.final_score for r in ranked) / len(ranked)

        logger.info("Ranked %d companies (%s): %d kept at threshold %.2f, average %.2f",
                    len(ranked), method, len(kept), threshold, average)
        self.events.emit("ranking", candidates=len(ranked), kept=len(kept), threshold=threshold, method=method)
        return RankingResult(
            kept=kept, filtered=filtered, threshold=threshold, method=method, average_score=round(average, 4)
        )

    def _score(
        self,
        company: DiscoveredCompany,
        raw: float,
        skills: list[ExtractedSkill],
        occupations: list[StandardOccupation],
        domain: CourseDomain,
    ) -> SemanticMatch:
        raw = max(0.0, min(1.0, raw))
        decision = should_exclude_industry(company.sector, domain, occupations, company.job_postings)
        penalty = effective_penalty(decision, occupations, company.sector)
        boost = hiring_boost(company.job_postings)
        final = max(0.0, min(1.0, raw * (1 - penalty) * (1 + boost)))

        skill_hits = matching_skills(skills, company)
        activity_hits = matching_activities(occupations, company)
        return SemanticMatch(
            company_id=company.id or company.website or company.name,
            company_name=company.name,
            raw_score=round(raw, 4),
            penalty=penalty,
            hiring_boost=round(boost, 4),
            final_score=final,
            confidence=confidence_tier(final),
            matching_skills=skill_hits,
            matching_activities=activity_hits,
            explanation=explanation(final, skill_hits, activity_hits),
            exclusion=decision,
        )
