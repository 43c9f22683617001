"""Persisted store for imported connections, import metadata and the raw CSV.

The engine only talks to ``ConnectionStore``; the medium behind it is opaque.
Two implementations ship: ``JsonFileStore`` (files under the data directory,
advisory-locked) and ``MemoryStore`` (process-local, used by tests and
one-shot runs).
"""
from __future__ import annotations

import fcntl
import json
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from jobconnect.errors import StorageError
from jobconnect.log import get_logger
from jobconnect.models import Connection, ImportMetadata

log = get_logger(__name__)

CONNECTIONS_FILE = "linkedin_connections.json"
METADATA_FILE = "linkedin_connections_metadata.json"
CSV_CACHE_FILE = "linkedin_csv_cache.csv"
LOCK_FILE = ".store.lock"


class ConnectionStore(ABC):
    @abstractmethod
    def get_connections(self) -> list[Connection]:
        pass

    @abstractmethod
    def save_connections(self, connections: list[Connection]) -> None:
        """Replace the whole contact list. Raises StorageError on failure."""

    @abstractmethod
    def get_metadata(self) -> ImportMetadata | None:
        pass

    @abstractmethod
    def save_metadata(self, metadata: ImportMetadata) -> None:
        pass

    @abstractmethod
    def get_cached_csv(self) -> str | None:
        pass

    @abstractmethod
    def cache_csv(self, csv_text: str) -> None:
        """Keep the raw export for re-import. Never raises."""

    @abstractmethod
    def delete_all(self) -> None:
        """Drop contacts, metadata and the CSV cache. Raises StorageError on failure."""

    def has_cached_csv(self) -> bool:
        return bool(self.get_cached_csv())

    def has_connections(self) -> bool:
        return len(self.get_connections()) > 0


class MemoryStore(ConnectionStore):
    def __init__(self, connections: list[Connection] | None = None) -> None:
        self._connections: list[Connection] = list(connections or [])
        self._metadata: ImportMetadata | None = None
        self._csv: str | None = None

    def get_connections(self) -> list[Connection]:
        return list(self._connections)

    def save_connections(self, connections: list[Connection]) -> None:
        self._connections = list(connections)

    def get_metadata(self) -> ImportMetadata | None:
        return self._metadata

    def save_metadata(self, metadata: ImportMetadata) -> None:
        self._metadata = metadata

    def get_cached_csv(self) -> str | None:
        return self._csv

    def cache_csv(self, csv_text: str) -> None:
        self._csv = csv_text

    def delete_all(self) -> None:
        self._connections = []
        self._metadata = None
        self._csv = None


@contextmanager
def _locked(lock_path: Path, exclusive: bool = True) -> Iterator[None]:
    """Advisory lock (Unix fcntl) on a sidecar file; writers exclude readers."""
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with open(lock_path, "a") as f:
        try:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
        except OSError:
            pass
        try:
            yield
        finally:
            try:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            except OSError:
                pass


class JsonFileStore(ConnectionStore):
    """Three independent files in ``data_dir``; each write is an atomic replace."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self.connections_path = self.data_dir / CONNECTIONS_FILE
        self.metadata_path = self.data_dir / METADATA_FILE
        self.csv_path = self.data_dir / CSV_CACHE_FILE
        self.lock_path = self.data_dir / LOCK_FILE

    def _read(self, path: Path) -> str | None:
        if not path.exists():
            return None
        with _locked(self.lock_path, exclusive=False):
            return path.read_text(encoding="utf-8")

    def _write(self, path: Path, content: str) -> None:
        with _locked(self.lock_path):
            fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise

    def get_connections(self) -> list[Connection]:
        try:
            raw = self._read(self.connections_path)
            if not raw:
                return []
            return [Connection.from_dict(d) for d in json.loads(raw)]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log.error("Error reading connections from %s: %s", self.connections_path.name, exc)
            return []

    def save_connections(self, connections: list[Connection]) -> None:
        payload = json.dumps([c.to_dict() for c in connections], ensure_ascii=False)
        try:
            self._write(self.connections_path, payload)
        except OSError as exc:
            log.error("Error saving connections: %s", exc)
            raise StorageError("Failed to save connections") from exc
        log.debug("Saved %d connections → %s", len(connections), self.connections_path)

    def get_metadata(self) -> ImportMetadata | None:
        try:
            raw = self._read(self.metadata_path)
            return ImportMetadata.from_dict(json.loads(raw)) if raw else None
        except (OSError, ValueError, KeyError, TypeError) as exc:
            log.error("Error reading metadata: %s", exc)
            return None

    def save_metadata(self, metadata: ImportMetadata) -> None:
        try:
            self._write(self.metadata_path, json.dumps(metadata.to_dict()))
        except OSError as exc:
            log.error("Error saving metadata: %s", exc)

    def get_cached_csv(self) -> str | None:
        try:
            return self._read(self.csv_path)
        except OSError as exc:
            log.error("Error reading cached CSV: %s", exc)
            return None

    def cache_csv(self, csv_text: str) -> None:
        try:
            self._write(self.csv_path, csv_text)
        except OSError as exc:
            log.warning("CSV cache not saved (%s); re-import will need the file again", exc)

    def delete_all(self) -> None:
        try:
            for path in (self.connections_path, self.metadata_path, self.csv_path):
                path.unlink(missing_ok=True)
        except OSError as exc:
            log.error("Error deleting connections: %s", exc)
            raise StorageError("Failed to delete connections") from exc
        log.info("Deleted stored connections in %s", self.data_dir)
