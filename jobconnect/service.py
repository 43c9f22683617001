"""Import / re-import / delete workflow for a user's connections."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jobconnect.config import MAX_CSV_BYTES
from jobconnect.csv_import import DEFAULT_USER_ID, parse_from_cached_csv, parse_linkedin_csv
from jobconnect.log import get_logger
from jobconnect.matcher import ConnectionMatcher
from jobconnect.models import CSV_SOURCE, Connection, ImportMetadata
from jobconnect.store import ConnectionStore

log = get_logger(__name__)


class ConnectionsService:
    """Keeps the store and the matcher's caches in step.

    Every mutation of the stored contact set clears the matcher caches.
    """

    def __init__(
        self,
        store: ConnectionStore,
        matcher: ConnectionMatcher | None = None,
        *,
        user_id: str = DEFAULT_USER_ID,
        max_csv_bytes: int = MAX_CSV_BYTES,
    ) -> None:
        self.store = store
        self.matcher = matcher or ConnectionMatcher(store)
        self.user_id = user_id
        self.max_csv_bytes = max_csv_bytes

    def _replace(self, connections: list[Connection]) -> list[Connection]:
        # A write that fails partway may still have changed the stored set.
        try:
            self.store.save_connections(connections)
            self.store.save_metadata(
                ImportMetadata(
                    imported_at=datetime.now(timezone.utc).isoformat(),
                    connection_count=len(connections),
                    source=CSV_SOURCE,
                )
            )
        finally:
            self.matcher.clear_match_cache()
        log.info("Imported %d connections", len(connections))
        return connections

    def import_file(self, path: str | Path) -> list[Connection]:
        connections = parse_linkedin_csv(
            path, self.store, user_id=self.user_id, max_bytes=self.max_csv_bytes
        )
        return self._replace(connections)

    def reimport_cached(self) -> list[Connection]:
        return self._replace(parse_from_cached_csv(self.store, user_id=self.user_id))

    def delete_all(self) -> None:
        try:
            self.store.delete_all()
        finally:
            self.matcher.clear_match_cache()
        log.info("All connections deleted")

    def status(self) -> dict[str, Any]:
        connections = self.store.get_connections()
        return {
            "has_connections": bool(connections),
            "connection_count": len(connections),
            "metadata": self.store.get_metadata(),
            "has_cached_csv": self.store.has_cached_csv(),
        }
