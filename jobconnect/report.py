"""Markdown report of job listings where the user has connections."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

from jobconnect.config import REPORTS_DIR
from jobconnect.log import get_logger
from jobconnect.models import JobListing

log = get_logger(__name__)


def _short_url_label(url: str) -> str:
    host = (urlparse(url).hostname or "").replace("www.", "")
    parts = host.split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _clip(text: str, width: int) -> str:
    return text[:width] + ("…" if len(text) > width else "")


def build_match_report(jobs: list[JobListing], *, top: int = 25, per_job: int = 3) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    lines: list[str] = [f"# Connections Report — {date}", ""]

    connected = sorted(
        (j for j in jobs if j.connection_count),
        key=lambda j: j.connection_count,
        reverse=True,
    )
    lines.append(f"**{len(jobs)}** listings | **{len(connected)}** with connections")
    lines.append("")

    if not connected:
        lines.append("_No listings at companies where you have connections._")
        return "\n".join(lines)

    lines.append("## Best Leads")
    lines.append("")
    for job in connected[:top]:
        lines.append(f"### {job.role} @ {job.company}")
        lines.append(f"- **Location:** {job.location or '—'}")
        lines.append(f"- **Connections:** {job.connection_count}")
        for m in job.connection_matches[:per_job]:
            profile = f" ([profile]({m.connection.linkedin_url}))" if m.connection.linkedin_url else ""
            lines.append(f"  - {m.connection.connection_name} — {m.match_reason} ({m.match_score:.1f}){profile}")
        if job.url:
            lines.append(f"- **Apply:** [{_short_url_label(job.url)}]({job.url})")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("## Quick Reference")
    lines.append("")
    lines.append("| # | Role | Company | Location | Connections | Top contact |")
    lines.append("|--:|------|---------|----------|------------:|-------------|")
    for i, job in enumerate(connected[:top], 1):
        best = job.connection_matches[0].connection.connection_name
        loc = _clip(job.location.split(",")[0], 18)
        lines.append(
            f"| {i} | {_clip(job.role, 40)} | {_clip(job.company, 22)} | {loc} | {job.connection_count} | {best} |"
        )
    lines.append("")

    log.info("Built connections report: %d listings, %d with connections", len(jobs), len(connected))
    return "\n".join(lines)


def write_match_report(content: str, reports_dir: Path = REPORTS_DIR) -> Path:
    reports_dir.mkdir(parents=True, exist_ok=True)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    path = reports_dir / f"connections_{date}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
