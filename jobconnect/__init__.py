"""Match imported professional-network connections to job listings."""
from .errors import (
    ErrorKind,
    JobConnectError,
    NetworkError,
    ParseError,
    StorageError,
    ValidationError,
    format_error_message,
)
from .matcher import ConnectionMatcher
from .models import Connection, ImportMetadata, JobConnectionMatch, JobListing
from .normalize import fuzzy_match_company, normalize_company_name, normalize_job_title
from .store import ConnectionStore, JsonFileStore, MemoryStore

__all__ = [
    "ErrorKind", "JobConnectError", "NetworkError", "ParseError",
    "StorageError", "ValidationError", "format_error_message",
    "ConnectionMatcher",
    "Connection", "ImportMetadata", "JobConnectionMatch", "JobListing",
    "fuzzy_match_company", "normalize_company_name", "normalize_job_title",
    "ConnectionStore", "JsonFileStore", "MemoryStore",
]
