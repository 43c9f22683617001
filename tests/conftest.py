import json

import pytest
import requests

from jobconnect.models import Connection
from jobconnect.normalize import normalize_company_name, normalize_job_title
from jobconnect.store import MemoryStore


def make_connection(cid, name, company, title):
    return Connection(
        id=cid,
        user_id="test",
        connection_name=name,
        company_name_raw=company,
        company_name_normalized=normalize_company_name(company),
        job_title_raw=title,
        job_title_normalized=normalize_job_title(title),
        last_updated_at="2024-01-01T00:00:00+00:00",
    )


class CountingStore(MemoryStore):
    """MemoryStore that counts contact-list reads."""

    def __init__(self, connections=None):
        super().__init__(connections)
        self.reads = 0

    def get_connections(self):
        self.reads += 1
        return super().get_connections()


def make_response(status_code, payload=None, reason=""):
    r = requests.Response()
    r.status_code = status_code
    r.reason = reason
    r.url = "https://feed.example.com/listings.json"
    r.encoding = "utf-8"
    r._content = json.dumps(payload if payload is not None else {}).encode("utf-8")
    return r


class FakeSession:
    """Replays queued responses (or exceptions) for successive GETs."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def sample_connections():
    return [
        make_connection("1", "John Doe", "Google", "Software Engineer"),
        make_connection("2", "Jane Smith", "Google LLC", "Senior Recruiter"),
        make_connection("3", "Bob Johnson", "Microsoft", "Product Manager"),
    ]


@pytest.fixture
def store(sample_connections):
    return CountingStore(sample_connections)


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr("jobconnect.retry.time.sleep", delays.append)
    return delays


@pytest.fixture
def linkedin_csv():
    return (
        "First Name,Last Name,URL,Email Address,Company,Position,Connected On\n"
        "John,Doe,https://www.linkedin.com/in/johndoe,,Google,Software Engineer,01 Jan 2024\n"
        'Jane,Smith,https://www.linkedin.com/in/janesmith,jane@example.com,"Google LLC","Senior Recruiter",15 Feb 2024\n'
        "Bob,Johnson,,,Microsoft Corporation,Product Manager,03 Mar 2024\n"
    )
