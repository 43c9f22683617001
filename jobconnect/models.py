"""Data models for connections, imports and job listings."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

CSV_SOURCE = "linkedin_csv"


@dataclass
class Connection:
    id: str
    user_id: str
    connection_name: str
    company_name_raw: str
    company_name_normalized: str
    job_title_raw: str
    job_title_normalized: str
    last_updated_at: str
    connection_date: str | None = None
    linkedin_url: str | None = None
    source: str = CSV_SOURCE

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("connection_date", "linkedin_url"):
            if not data[key]:
                data.pop(key)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Connection:
        return cls(
            id=data["id"],
            user_id=data.get("user_id", ""),
            connection_name=data["connection_name"],
            company_name_raw=data["company_name_raw"],
            company_name_normalized=data["company_name_normalized"],
            job_title_raw=data.get("job_title_raw", ""),
            job_title_normalized=data.get("job_title_normalized", ""),
            last_updated_at=data.get("last_updated_at", ""),
            connection_date=data.get("connection_date") or None,
            linkedin_url=data.get("linkedin_url") or None,
            source=data.get("source", CSV_SOURCE),
        )


@dataclass
class ImportMetadata:
    imported_at: str
    connection_count: int
    source: str = CSV_SOURCE

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ImportMetadata:
        return cls(
            imported_at=data["imported_at"],
            connection_count=int(data["connection_count"]),
            source=data.get("source", CSV_SOURCE),
        )


@dataclass
class JobListing:
    company: str
    role: str
    location: str
    url: str | None = None
    id: str | None = None
    category: str | None = None
    date_posted: datetime | None = None
    date_updated: datetime | None = None
    connection_matches: list[JobConnectionMatch] = field(default_factory=list)

    @property
    def connection_count(self) -> int:
        return len(self.connection_matches)


@dataclass
class JobConnectionMatch:
    connection: Connection
    match_score: float
    match_reason: str
