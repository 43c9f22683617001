"""Match job listings to imported connections and rank them by relevance."""
from __future__ import annotations

import threading

from jobconnect.log import get_logger
from jobconnect.models import Connection, JobConnectionMatch, JobListing
from jobconnect.normalize import normalize_company_name
from jobconnect.store import ConnectionStore

log = get_logger(__name__)

BASE_SCORE = 1.0
ROLE_MATCH_BOOST = 0.5
RELEVANT_POSITION_BOOST = 0.3

TECH_KEYWORDS: tuple[str, ...] = (
    "software", "engineer", "developer", "programmer", "architect",
    "data", "machine learning", "ml", "ai", "frontend", "backend",
    "fullstack", "full stack", "devops", "sre", "qa", "test", "mobile",
    "ios", "android", "web",
)

SENIORITY_KEYWORDS: tuple[str, ...] = (
    "intern", "junior", "senior", "lead", "principal", "staff",
    "manager", "director", "vp", "head", "chief",
)

SPECIALIZATION_KEYWORDS: tuple[str, ...] = (
    "security", "cloud", "infrastructure", "platform",
    "embedded", "systems", "network", "database",
)

ROLE_KEYWORDS: tuple[str, ...] = TECH_KEYWORDS + SENIORITY_KEYWORDS + SPECIALIZATION_KEYWORDS

# Titles whose holders can refer, hire, or route a candidate.
RELEVANT_POSITION_TERMS: tuple[str, ...] = (
    "recruiter", "recruiting", "talent", "hr", "human resources",
    "hiring", "manager", "director", "lead", "head", "vp",
    "chief", "cto", "ceo", "founder",
)


def extract_role_keywords(role: str) -> list[str]:
    """Vocabulary terms occurring anywhere in *role* (substring match)."""
    role = role.lower()
    return [kw for kw in ROLE_KEYWORDS if kw in role]


def is_role_similar(role: str, title: str) -> bool:
    if role in title or title in role:
        return True

    role_keywords = extract_role_keywords(role)
    title_keywords = extract_role_keywords(title)
    common = [kw for kw in role_keywords if kw in title_keywords]
    return len(common) >= min(len(role_keywords), len(title_keywords)) / 2


def is_relevant_position(title: str) -> bool:
    title = title.lower()
    return any(term in title for term in RELEVANT_POSITION_TERMS)


def score_connection(job: JobListing, connection: Connection) -> JobConnectionMatch:
    score = BASE_SCORE
    reason = f"Works at {connection.company_name_raw}"

    title = connection.job_title_normalized
    role = (job.role or "").lower()
    if title and role and is_role_similar(role, title):
        score += ROLE_MATCH_BOOST
        reason = f"{connection.job_title_raw} at {connection.company_name_raw}"

    if title and is_relevant_position(title):
        score += RELEVANT_POSITION_BOOST
        reason += " (Hiring/Recruiting)"

    return JobConnectionMatch(connection=connection, match_score=score, match_reason=reason)


class ConnectionMatcher:
    """Ranks a store's connections against job listings.

    Holds two derived caches: a company lookup index built from the store,
    and per-(company, role) match results. Both go stale when the stored
    contact set changes, so callers must invoke :meth:`clear_match_cache`
    after every import or delete. The index is additionally rebuilt whenever
    the stored contact count differs from the count it was built from.
    """

    def __init__(self, store: ConnectionStore) -> None:
        self.store = store
        self._lock = threading.RLock()
        self._match_cache: dict[tuple[str, str], list[JobConnectionMatch]] = {}
        self._company_lookup: dict[str, list[Connection]] | None = None
        self._lookup_size = 0

    def _build_company_lookup(self) -> dict[str, list[Connection]]:
        connections = self.store.get_connections()
        with self._lock:
            if self._company_lookup is not None and len(connections) == self._lookup_size:
                return self._company_lookup

            lookup: dict[str, list[Connection]] = {}
            for conn in connections:
                lookup.setdefault(conn.company_name_normalized, []).append(conn)

            self._company_lookup = lookup
            self._lookup_size = len(connections)
            log.debug("Built company lookup: %d companies, %d connections", len(lookup), len(connections))
            return lookup

    def clear_match_cache(self) -> None:
        with self._lock:
            self._match_cache = {}
            self._company_lookup = None
            self._lookup_size = 0

    def match_job_to_connections(self, job: JobListing) -> list[JobConnectionMatch]:
        key = (job.company, job.role)
        with self._lock:
            cached = self._match_cache.get(key)
            if cached is not None:
                return cached

            lookup = self._build_company_lookup()
            company_connections = lookup.get(normalize_company_name(job.company), [])

            matches = [score_connection(job, conn) for conn in company_connections]
            # sorted() is stable: equal scores keep store order.
            matches = sorted(matches, key=lambda m: m.match_score, reverse=True)

            self._match_cache[key] = matches
            return matches

    def get_connection_count_for_company(self, company_name: str) -> int:
        lookup = self._build_company_lookup()
        return len(lookup.get(normalize_company_name(company_name), []))

    def get_connections_by_company(self) -> dict[str, list[Connection]]:
        grouped: dict[str, list[Connection]] = {}
        for conn in self.store.get_connections():
            grouped.setdefault(conn.company_name_raw, []).append(conn)
        return grouped
