"""Tests for the connections CSV import pipeline."""

from datetime import datetime, timezone

import pytest

from jobconnect.csv_import import (
    deduplicate_connections,
    parse_csv_line,
    parse_csv_text,
    parse_from_cached_csv,
    parse_linkedin_csv,
    resolve_columns,
    validate_csv_file,
)
from jobconnect.errors import ErrorKind, ParseError, ValidationError
from jobconnect.store import MemoryStore


def test_parse_csv_line_handles_quotes_and_commas():
    assert parse_csv_line('a, "b, c" ,d') == ["a", "b, c", "d"]
    assert parse_csv_line('"Acme ""Rockets"" LLC",x') == ['Acme "Rockets" LLC', "x"]
    assert parse_csv_line("a,,b,") == ["a", "", "b", ""]


def test_resolve_columns_is_case_insensitive_and_order_independent():
    headers = ["Job Title", "ORGANIZATION", "lastname", "first name", "Profile URL"]
    cols, missing = resolve_columns(headers)
    assert missing == []
    assert (cols.first_name, cols.last_name, cols.company, cols.position) == (3, 2, 1, 0)
    assert cols.url == 4
    assert cols.connected_on is None


def test_parse_csv_text_builds_connections(linkedin_csv):
    now = datetime(2024, 6, 1, tzinfo=timezone.utc)
    connections = parse_csv_text(linkedin_csv, user_id="u1", now=now)

    assert [c.connection_name for c in connections] == ["John Doe", "Jane Smith", "Bob Johnson"]
    jane = connections[1]
    assert jane.company_name_raw == "Google LLC"
    assert jane.company_name_normalized == "google"
    assert jane.job_title_normalized == "senior recruiter"
    assert jane.linkedin_url == "https://www.linkedin.com/in/janesmith"
    assert jane.connection_date == "15 Feb 2024"
    assert jane.user_id == "u1"
    assert jane.source == "linkedin_csv"
    assert jane.last_updated_at == now.isoformat()
    assert jane.id.startswith("conn_")

    assert connections[2].company_name_normalized == "microsoft"
    assert connections[2].linkedin_url is None


def test_parse_csv_text_tolerates_bom_and_crlf():
    text = "\ufeffFirst Name,Last Name,Company,Position\r\nAda,Lovelace,Analytical Engines Ltd,Programmer\r\n"
    (conn,) = parse_csv_text(text)
    assert conn.connection_name == "Ada Lovelace"
    assert conn.company_name_normalized == "analytical engines"
    assert conn.job_title_raw == "Programmer"


def test_missing_position_column_is_reported():
    text = "First Name,Last Name,Company\nJohn,Doe,Google\n"
    with pytest.raises(ParseError) as exc_info:
        parse_csv_text(text)
    message = str(exc_info.value)
    assert "Missing required columns: Position" in message
    assert "Found columns: First Name, Last Name, Company" in message
    assert exc_info.value.kind is ErrorKind.PARSE


def test_empty_csv():
    with pytest.raises(ParseError, match="CSV file is empty"):
        parse_csv_text("  \n\n   \n")


def test_header_only_has_no_valid_connections():
    with pytest.raises(ParseError, match="No valid connections found"):
        parse_csv_text("First Name,Last Name,Company,Position\n")


def test_bad_rows_are_skipped_not_fatal():
    text = (
        "First Name,Last Name,Company,Position\n"
        "Short,Row\n"
        ",Nobody,Google,Engineer\n"
        "No,Company,,Engineer\n"
        "Grace,Hopper,US Navy,Rear Admiral\n"
    )
    connections = parse_csv_text(text)
    assert [c.connection_name for c in connections] == ["Grace Hopper"]


def test_duplicates_collapse_first_wins():
    text = (
        "First Name,Last Name,Company,Position\n"
        "John,Doe,Google,Software Engineer\n"
        "john,doe,Google Inc.,Engineering Manager\n"
        "John,Doe,Microsoft,Engineer\n"
    )
    connections = parse_csv_text(text)
    assert len(connections) == 2
    assert connections[0].job_title_raw == "Software Engineer"
    assert connections[1].company_name_raw == "Microsoft"


def test_deduplicate_preserves_order(sample_connections):
    doubled = sample_connections + sample_connections[:1]
    assert deduplicate_connections(doubled) == sample_connections


def test_validate_csv_file(tmp_path):
    good = tmp_path / "Connections.csv"
    good.write_text("First Name,Last Name,Company,Position\n")
    assert validate_csv_file(good) == (True, None)

    txt = tmp_path / "connections.txt"
    txt.write_text("x")
    assert validate_csv_file(txt) == (False, "Please upload a valid CSV file")

    empty = tmp_path / "empty.csv"
    empty.write_text("")
    assert validate_csv_file(empty) == (False, "File is empty")

    ok, error = validate_csv_file(good, max_bytes=4)
    assert ok is False
    assert "exceeds" in error


def test_parse_linkedin_csv_caches_raw_text(tmp_path, linkedin_csv):
    path = tmp_path / "Connections.csv"
    path.write_text(linkedin_csv, encoding="utf-8")
    store = MemoryStore()

    connections = parse_linkedin_csv(path, store)

    assert len(connections) == 3
    assert store.get_cached_csv() == linkedin_csv
    # Parsing alone does not replace the stored contact list.
    assert store.get_connections() == []


def test_parse_linkedin_csv_rejects_wrong_extension(tmp_path):
    path = tmp_path / "connections.xlsx"
    path.write_text("First Name,Last Name,Company,Position\n")
    with pytest.raises(ValidationError) as exc_info:
        parse_linkedin_csv(path, MemoryStore())
    assert exc_info.value.kind is ErrorKind.VALIDATION


def test_parse_linkedin_csv_rejects_oversize(tmp_path, linkedin_csv):
    path = tmp_path / "Connections.csv"
    path.write_text(linkedin_csv)
    with pytest.raises(ValidationError, match="exceeds"):
        parse_linkedin_csv(path, MemoryStore(), max_bytes=10)


def test_parse_from_cached_csv(linkedin_csv):
    store = MemoryStore()
    with pytest.raises(ParseError, match="No cached CSV"):
        parse_from_cached_csv(store)

    store.cache_csv(linkedin_csv)
    assert len(parse_from_cached_csv(store)) == 3
