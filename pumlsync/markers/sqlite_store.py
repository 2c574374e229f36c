"""MarkerStore implementation backed by a local SQLite database."""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Any

from pumlsync.errors import MarkerError
from pumlsync.markers.models import Marker

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS markers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    path TEXT NOT NULL,
    kind TEXT NOT NULL,
    attributes_json TEXT NOT NULL DEFAULT '{}'
);
CREATE INDEX IF NOT EXISTS idx_markers_path_kind ON markers(path, kind);
"""


def _clean(attributes: dict[str, Any]) -> dict[str, Any]:
    # A None value removes the attribute.
    return {k: v for k, v in attributes.items() if v is not None}


class SQLiteMarkerStore:
    """MarkerStore using SQLite with WAL mode.

    One row per marker; attributes live in a JSON column. Setting an
    attribute map replaces the previous one, and ``None`` values drop the
    key entirely.

    The connection is shared across threads (the watcher calls in from its
    observer thread) and every statement runs under one lock.
    """

    def __init__(self, db_path: str | Path = ".pumlsync/markers.db") -> None:
        path = Path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        self.db_path = str(path)
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                isolation_level=None,
                timeout=5,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error as e:
            raise MarkerError(f"Cannot open marker store {self.db_path}: {e}") from e

    # -- helpers ---------------------------------------------------------------

    def _row_to_marker(self, row: tuple) -> Marker:
        id_, path, kind, attributes_json = row
        return Marker(id=id_, path=path, kind=kind, attributes=json.loads(attributes_json))

    def _query(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise MarkerError(str(e)) from e

    def _write(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            with self._lock:
                return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise MarkerError(str(e)) from e

    # -- MarkerStore protocol --------------------------------------------------

    def find(self, path: str, kind: str) -> list[Marker]:
        rows = self._query(
            "SELECT id, path, kind, attributes_json FROM markers "
            "WHERE path = ? AND kind = ? ORDER BY id",
            (path, kind),
        )
        return [self._row_to_marker(r) for r in rows]

    def create(self, path: str, kind: str) -> Marker:
        cursor = self._write(
            "INSERT INTO markers (path, kind, attributes_json) VALUES (?, ?, '{}')",
            (path, kind),
        )
        return Marker(id=cursor.lastrowid, path=path, kind=kind)

    def get_attribute(self, marker: Marker, key: str) -> Any:
        rows = self._query(
            "SELECT id, path, kind, attributes_json FROM markers WHERE id = ?",
            (marker.id,),
        )
        if not rows:
            raise MarkerError(f"Marker {marker.id} does not exist")
        return self._row_to_marker(rows[0]).attributes.get(key)

    def set_attributes(self, marker: Marker, attributes: dict[str, Any]) -> Marker:
        cleaned = _clean(attributes)
        try:
            payload = json.dumps(cleaned)
        except (TypeError, ValueError) as e:
            raise MarkerError(f"Attributes are not serializable: {e}") from e
        cursor = self._write(
            "UPDATE markers SET attributes_json = ? WHERE id = ?",
            (payload, marker.id),
        )
        if cursor.rowcount == 0:
            raise MarkerError(f"Marker {marker.id} does not exist")
        return marker.model_copy(update={"attributes": cleaned})

    def all(self, kind: str | None = None) -> list[Marker]:
        query = "SELECT id, path, kind, attributes_json FROM markers"
        params: tuple = ()
        if kind is not None:
            query += " WHERE kind = ?"
            params = (kind,)
        rows = self._query(query + " ORDER BY path, id", params)
        return [self._row_to_marker(r) for r in rows]

    def delete(self, marker: Marker) -> None:
        self._write("DELETE FROM markers WHERE id = ?", (marker.id,))

    def close(self) -> None:
        with self._lock:
            self._conn.close()
