"""Upstream internship listings feed → JobListing objects annotated with connections.

The feed is a JSON array of listing objects (SimplifyJobs format). Only
active, visible listings in the selected categories are kept.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from jobconnect.config import LISTINGS_URL
from jobconnect.errors import NetworkError
from jobconnect.fetch import fetch_with_retry
from jobconnect.log import get_logger
from jobconnect.matcher import ConnectionMatcher
from jobconnect.models import JobListing

log = get_logger(__name__)

# Selectable category -> substrings that identify it in a listing's category.
CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "Software Engineering": [
        "Software Engineering", "Software", "SWE", "Backend",
        "Frontend", "Full Stack", "Full-Stack",
    ],
    "Data Science": [
        "Data Science", "AI/ML/Data", "Data Analyst", "Data Engineer",
        "Machine Learning", "Data",
    ],
    "Hardware": ["Hardware", "Electrical", "Embedded"],
    "Product Management": ["Product Management", "Product", "PM"],
    "Design": ["Design", "UX", "UI"],
    "Quant": ["Quant", "Quantitative"],
}

# Numeric timestamps below this are epoch seconds, otherwise milliseconds.
_EPOCH_MS_THRESHOLD = 10_000_000_000

_SLUG_WS_RE = re.compile(r"\s+")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9-]")


def parse_listing_date(value: Any) -> datetime | None:
    """Epoch seconds, epoch milliseconds or ISO string → aware UTC datetime."""
    if value is None or value == "" or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if not value:
            return None
        ts = float(value)
        if ts >= _EPOCH_MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        value = value.strip()
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

    return None


def _locations(listing: dict[str, Any]) -> list[str]:
    locs = listing.get("locations") or []
    if isinstance(locs, str):
        return [locs]
    return [str(loc) for loc in locs]


def _job_id(company: str, title: str, first_location: str) -> str:
    slug = _SLUG_WS_RE.sub("-", f"{company}-{title}-{first_location}".lower())
    return _SLUG_STRIP_RE.sub("", slug)


def listing_to_job(listing: dict[str, Any]) -> JobListing:
    company = listing.get("company_name", "")
    title = listing.get("title", "")
    locations = _locations(listing)
    return JobListing(
        id=_job_id(company, title, locations[0] if locations else ""),
        company=company,
        role=title,
        location=", ".join(locations),
        url=listing.get("url") or None,
        category=listing.get("category"),
        date_posted=parse_listing_date(listing.get("date_posted") or listing.get("date_updated")),
        date_updated=parse_listing_date(listing.get("date_updated")),
    )


def matches_categories(listing: dict[str, Any], categories: list[str]) -> bool:
    category = (listing.get("category") or "").lower()
    if not category:
        return False
    for selected in categories:
        keywords = CATEGORY_KEYWORDS.get(selected, [selected])
        if any(kw.lower() in category for kw in keywords):
            return True
    return False


def filter_listings(listings: list[dict[str, Any]], categories: list[str]) -> list[dict[str, Any]]:
    if not categories:
        return []
    return [
        listing
        for listing in listings
        if listing.get("active") and listing.get("is_visible") and matches_categories(listing, categories)
    ]


def annotate_jobs(jobs: list[JobListing], matcher: ConnectionMatcher) -> list[JobListing]:
    """Attach (or refresh) connection matches on every job, in place."""
    for job in jobs:
        # Own copy per job; the matcher keeps the cached list.
        job.connection_matches = list(matcher.match_job_to_connections(job))
    return jobs


def load_jobs(
    categories: list[str],
    *,
    url: str = LISTINGS_URL,
    matcher: ConnectionMatcher | None = None,
    retries: int = 3,
    base_delay_ms: int = 1000,
    timeout: float = 20.0,
    session: Any = None,
) -> list[JobListing]:
    """Fetch, filter and map the feed; annotate with matches when connections exist."""
    if not categories:
        return []

    r = fetch_with_retry(url, retries, base_delay_ms, session=session, timeout=timeout)
    try:
        payload = r.json()
    except ValueError as exc:
        raise NetworkError(f"Invalid JSON from listings feed: {exc}", status_code=r.status_code) from exc
    if not isinstance(payload, list):
        raise NetworkError("Listings feed did not return a list", status_code=r.status_code)

    jobs = [listing_to_job(listing) for listing in filter_listings(payload, categories)]
    log.info("Loaded %d of %d listings for %s", len(jobs), len(payload), ", ".join(categories))

    if matcher is not None and matcher.store.has_connections():
        annotate_jobs(jobs, matcher)
        with_connections = sum(1 for j in jobs if j.connection_count)
        log.info("%d jobs have at least one connection", with_connections)
    return jobs
