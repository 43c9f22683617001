#!/usr/bin/env python3
"""Entry point: import connections and match them against internship listings.

Examples:
    python run_match.py import ~/Downloads/Connections.csv
    python run_match.py reimport
    python run_match.py status
    python run_match.py jobs -c "Software Engineering" --report
    python run_match.py delete
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobconnect.config import DATA_DIR, ensure_dirs, load_settings
from jobconnect.errors import JobConnectError, format_error_message
from jobconnect.log import get_logger
from jobconnect.store import JsonFileStore

log = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="See which of your connections work where you're applying.")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Import a connections CSV export (replaces existing).")
    imp.add_argument("path", type=str, help="Path to the exported CSV file.")
    sub.add_parser("reimport", help="Re-parse the cached CSV from the last import.")
    sub.add_parser("delete", help="Delete all imported connections.")
    sub.add_parser("status", help="Show what is currently imported.")

    jobs = sub.add_parser("jobs", help="Fetch listings and show connections per job.")
    jobs.add_argument(
        "-c", "--category", action="append", default=None,
        help="Job category to include (repeatable). Defaults to settings.",
    )
    jobs.add_argument("--limit", type=int, default=20, help="Max jobs to print.")
    jobs.add_argument("--report", action="store_true", help="Also write a markdown report.")
    return p.parse_args(argv)


def _cmd_jobs(args: argparse.Namespace, settings: dict, matcher) -> None:
    from jobconnect.listings import load_jobs
    from jobconnect.report import build_match_report, write_match_report

    categories = args.category or settings["default_categories"]
    jobs = load_jobs(
        categories,
        url=settings["listings_url"],
        matcher=matcher,
        retries=settings["fetch_retries"],
        base_delay_ms=settings["fetch_base_delay_ms"],
        timeout=settings["fetch_timeout_s"],
    )
    ranked = sorted(jobs, key=lambda j: j.connection_count, reverse=True)
    for job in ranked[: args.limit]:
        print(f"{job.connection_count:>3}  {job.role} @ {job.company} ({job.location})")
        for m in job.connection_matches[:3]:
            print(f"       {m.match_score:.1f}  {m.connection.connection_name}: {m.match_reason}")

    if args.report:
        write_match_report(build_match_report(jobs))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings()
    ensure_dirs()

    from jobconnect.service import ConnectionsService

    store = JsonFileStore(DATA_DIR)
    service = ConnectionsService(
        store, user_id=settings["user_id"], max_csv_bytes=settings["max_csv_bytes"]
    )

    try:
        if args.command == "import":
            connections = service.import_file(args.path)
            print(f"Imported {len(connections)} connections.")
        elif args.command == "reimport":
            connections = service.reimport_cached()
            print(f"Re-imported {len(connections)} connections from cache.")
        elif args.command == "delete":
            service.delete_all()
            print("Deleted all connections.")
        elif args.command == "status":
            st = service.status()
            meta = st["metadata"]
            print(f"Connections: {st['connection_count']}")
            if meta:
                print(f"Last import: {meta.imported_at} ({meta.connection_count} from {meta.source})")
            print(f"Cached CSV: {'yes' if st['has_cached_csv'] else 'no'}")
        elif args.command == "jobs":
            _cmd_jobs(args, settings, service.matcher)
    except JobConnectError as exc:
        log.error("%s failed: %r", args.command, exc)
        print(format_error_message(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
