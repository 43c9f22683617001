"""Parse a professional-network connections export (CSV) into Connection records."""
from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from jobconnect.config import MAX_CSV_BYTES
from jobconnect.errors import ParseError, ValidationError
from jobconnect.log import get_logger
from jobconnect.models import CSV_SOURCE, Connection
from jobconnect.normalize import normalize_company_name, normalize_job_title
from jobconnect.store import ConnectionStore

log = get_logger(__name__)

DEFAULT_USER_ID = "current_user"

# Export formats vary between LinkedIn versions and hand-edited files; header
# cells are compared case-insensitively against these, first hit wins.
REQUIRED_COLUMNS: dict[str, tuple[str, ...]] = {
    "First Name": ("first name", "firstname"),
    "Last Name": ("last name", "lastname"),
    "Company": ("company", "organization"),
    "Position": ("position", "title", "job title"),
}
OPTIONAL_COLUMNS: dict[str, tuple[str, ...]] = {
    "Connected On": ("connected on", "date"),
    "URL": ("url", "profile url", "linkedin url"),
}


@dataclass
class ColumnMapping:
    """Header index of each logical field; optional fields may be None."""

    first_name: int
    last_name: int
    company: int
    position: int
    connected_on: int | None = None
    url: int | None = None


def parse_csv_line(line: str) -> list[str]:
    """Split one CSV line on commas, honouring double-quoted fields.

    ``""`` inside quotes is a literal quote. Every field is trimmed.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current).strip())
    return fields


def _find_column(headers: list[str], candidates: tuple[str, ...]) -> int | None:
    lowered = [h.lower().strip() for h in headers]
    for name in candidates:
        if name in lowered:
            return lowered.index(name)
    return None


def resolve_columns(headers: list[str]) -> tuple[ColumnMapping | None, list[str]]:
    """Map header cells to logical fields.

    Returns ``(mapping, [])`` on success or ``(None, missing_fields)`` when any
    required column is absent.
    """
    found = {field: _find_column(headers, names) for field, names in REQUIRED_COLUMNS.items()}
    missing = [field for field, idx in found.items() if idx is None]
    if missing:
        return None, missing

    return (
        ColumnMapping(
            first_name=found["First Name"],
            last_name=found["Last Name"],
            company=found["Company"],
            position=found["Position"],
            connected_on=_find_column(headers, OPTIONAL_COLUMNS["Connected On"]),
            url=_find_column(headers, OPTIONAL_COLUMNS["URL"]),
        ),
        [],
    )


def _string_hash(data: str) -> int:
    """31-multiplier rolling hash folded to a signed 32-bit int."""
    h = 0
    for ch in data:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h - 0x100000000 if h & 0x80000000 else h


def generate_connection_id(name: str, company: str, title: str) -> str:
    digest = abs(_string_hash(f"{name}-{company}-{title}".lower()))
    return f"conn_{digest}_{int(time.time() * 1000)}"


def deduplicate_connections(connections: list[Connection]) -> list[Connection]:
    """Keep the first record per (name, normalized company); titles are ignored."""
    seen: set[str] = set()
    unique: list[Connection] = []
    for conn in connections:
        key = f"{conn.connection_name.lower()}-{conn.company_name_normalized}"
        if key in seen:
            log.debug("Dropping duplicate connection %s @ %s", conn.connection_name, conn.company_name_raw)
            continue
        seen.add(key)
        unique.append(conn)
    return unique


def _row_to_connection(
    values: list[str], cols: ColumnMapping, user_id: str, now: str
) -> Connection | None:
    first = values[cols.first_name]
    last = values[cols.last_name]
    company = values[cols.company].strip()
    title = values[cols.position].strip()
    if not first or not last or not company:
        return None

    name = f"{first} {last}".strip()
    connected_on = values[cols.connected_on] if cols.connected_on is not None else ""
    url = values[cols.url].strip() if cols.url is not None else ""

    return Connection(
        id=generate_connection_id(name, company, title),
        user_id=user_id,
        connection_name=name,
        company_name_raw=company,
        company_name_normalized=normalize_company_name(company),
        job_title_raw=title,
        job_title_normalized=normalize_job_title(title),
        connection_date=connected_on or None,
        linkedin_url=url or None,
        source=CSV_SOURCE,
        last_updated_at=now,
    )


def parse_csv_text(
    csv_text: str,
    *,
    user_id: str = DEFAULT_USER_ID,
    now: datetime | None = None,
) -> list[Connection]:
    """Parse export text into deduplicated connections.

    Missing required columns abort the whole import; incomplete or unusable
    rows are skipped.
    """
    lines = [
        (lineno, line)
        for lineno, line in enumerate(csv_text.lstrip("\ufeff").split("\n"), 1)
        if line.strip()
    ]
    if not lines:
        raise ParseError("CSV file is empty")

    header_lineno, header_line = lines[0]
    headers = parse_csv_line(header_line)
    cols, missing = resolve_columns(headers)
    if cols is None:
        raise ParseError(
            f"Missing required columns: {', '.join(missing)}. "
            f"Found columns: {', '.join(headers)}",
            line_number=header_lineno,
        )
    log.debug("CSV headers %s resolved to %s", headers, cols)

    stamp = (now or datetime.now(timezone.utc)).isoformat()
    connections: list[Connection] = []
    skipped = 0
    for lineno, line in lines[1:]:
        try:
            values = parse_csv_line(line)
            if len(values) < len(headers):
                skipped += 1
                continue
            conn = _row_to_connection(values, cols, user_id, stamp)
        except (IndexError, ValueError) as exc:
            log.warning("Skipping row at line %d: %s", lineno, exc)
            skipped += 1
            continue
        if conn is None:
            skipped += 1
            continue
        connections.append(conn)

    unique = deduplicate_connections(connections)
    if not unique:
        raise ParseError("No valid connections found in CSV")

    with_urls = sum(1 for c in unique if c.linkedin_url)
    log.info(
        "Parsed %d connections (%d with profile URLs, %d rows skipped, %d duplicates)",
        len(unique), with_urls, skipped, len(connections) - len(unique),
    )
    return unique


def validate_csv_file(path: str | Path, max_bytes: int = MAX_CSV_BYTES) -> tuple[bool, str | None]:
    """Pre-flight check before a full parse: returns ``(ok, error_message)``."""
    path = Path(path)
    if not path.name.endswith(".csv"):
        return False, "Please upload a valid CSV file"
    try:
        size = path.stat().st_size
    except OSError:
        return False, "Failed to read file"
    if size > max_bytes:
        return False, f"File size exceeds {max_bytes // (1024 * 1024)}MB limit"
    if size == 0:
        return False, "File is empty"
    return True, None


def parse_linkedin_csv(
    path: str | Path,
    store: ConnectionStore,
    *,
    user_id: str = DEFAULT_USER_ID,
    max_bytes: int = MAX_CSV_BYTES,
) -> list[Connection]:
    """Validate, cache and parse an export file. Does not save the connections."""
    ok, error = validate_csv_file(path, max_bytes=max_bytes)
    if not ok:
        raise ValidationError(error or "Invalid CSV file")

    try:
        text = Path(path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError("Failed to read file") from exc

    store.cache_csv(text)
    return parse_csv_text(text, user_id=user_id)


def parse_from_cached_csv(store: ConnectionStore, *, user_id: str = DEFAULT_USER_ID) -> list[Connection]:
    cached = store.get_cached_csv()
    if not cached:
        raise ParseError("No cached CSV found")
    return parse_csv_text(cached, user_id=user_id)
