"""Typed errors raised by the import, storage and fetch layers.

Every error carries a ``kind`` discriminator so callers can branch on the
failure class without isinstance chains, plus a kind-specific payload:

- ``ValidationError``: bad file type, oversize or empty upload
- ``ParseError``: unusable CSV content; ``line_number`` when tied to a row
- ``StorageError``: the persisted store could not save or delete
- ``NetworkError``: HTTP/transport failure; ``status_code`` and ``retryable``
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    PARSE = "parse"
    STORAGE = "storage"
    NETWORK = "network"


class JobConnectError(Exception):
    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(JobConnectError):
    kind = ErrorKind.VALIDATION


class ParseError(JobConnectError):
    kind = ErrorKind.PARSE

    def __init__(self, message: str, line_number: int | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number


class StorageError(JobConnectError):
    kind = ErrorKind.STORAGE


class NetworkError(JobConnectError):
    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable

    def __repr__(self) -> str:
        return (
            f"NetworkError({self.message!r}, status_code={self.status_code}, "
            f"retryable={self.retryable})"
        )


def is_retryable_status(status_code: int) -> bool:
    """Server errors and rate limiting are worth another attempt."""
    return status_code >= 500 or status_code == 429


def format_error_message(error: object) -> str:
    """User-facing message for any error the engine can raise."""
    if isinstance(error, NetworkError):
        if error.status_code == 404:
            return "The requested resource was not found. Please try again later."
        if error.status_code == 429:
            return "Too many requests. Please wait a moment and try again."
        if error.status_code is not None and error.status_code >= 500:
            return "Server error occurred. Please try again later."
        return error.message

    if isinstance(error, ParseError):
        where = f" at line {error.line_number}" if error.line_number else ""
        return f"CSV parsing error{where}: {error.message}"

    if isinstance(error, BaseException):
        return str(error)

    return "An unexpected error occurred. Please try again."
