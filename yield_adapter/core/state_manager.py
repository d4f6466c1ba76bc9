"""SQLite-backed state management for adapter latches and the operation log."""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Dict, List, Optional

from yield_adapter.core.utils import utc_now


class StateManager:
    """Coordinates every read/write against the local SQLite database."""

    def __init__(self, db_path: Path) -> None:
        """Store the path to the SQLite file; call `init_db()` before use."""
        self.db_path = Path(db_path)

    # ------------------------------------------------------------------ #
    # DB bootstrap helpers
    # ------------------------------------------------------------------ #
    def init_db(self) -> None:
        """Create the SQLite database and tables if missing."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with closing(self._get_connection()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS system_parameters (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS adapter_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    event_time TEXT NOT NULL,
                    adapter TEXT NOT NULL,
                    operation TEXT NOT NULL,
                    amount INTEGER,
                    logical_time INTEGER,
                    metadata TEXT,
                    created_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_adapter_events_adapter ON adapter_events (adapter, id);"
            )

    def reset_db(self) -> None:
        """Drop all rows while keeping the schema."""
        with closing(self._get_connection()) as conn, conn:
            conn.execute("DELETE FROM system_parameters;")
            conn.execute("DELETE FROM adapter_events;")

    # ------------------------------------------------------------------ #
    # Parameters
    # ------------------------------------------------------------------ #
    def save_parameters(self, params: Dict[str, Any]) -> None:
        """Persist the provided parameter dictionary using an UPSERT."""
        timestamp = utc_now()
        records = [
            (key, json.dumps(value), timestamp)
            for key, value in params.items()
        ]
        with closing(self._get_connection()) as conn, conn:
            conn.executemany(
                """
                INSERT INTO system_parameters (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at;
                """,
                records,
            )

    def load_parameters(self) -> Dict[str, Any]:
        """Return all stored parameters as a dictionary."""
        with closing(self._get_connection()) as conn, conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute("SELECT key, value FROM system_parameters;").fetchall()
        return {row["key"]: json.loads(row["value"]) for row in rows}

    # ------------------------------------------------------------------ #
    # Adapter events
    # ------------------------------------------------------------------ #
    def save_adapter_event(self, event: Dict[str, Any]) -> None:
        """Append one adapter operation outcome to the event log."""
        amount = event.get("amount")
        logical_time = event.get("logical_time")
        normalized = {
            "event_time": event.get("event_time", utc_now()),
            "adapter": str(event.get("adapter", "")),
            "operation": str(event.get("operation", "")).lower(),
            "amount": int(amount) if amount is not None else None,
            "logical_time": int(logical_time) if logical_time is not None else None,
            "metadata": json.dumps(event.get("metadata", {})),
            "created_at": utc_now(),
        }
        with closing(self._get_connection()) as conn, conn:
            conn.execute(
                """
                INSERT INTO adapter_events (
                    event_time, adapter, operation, amount, logical_time, metadata, created_at
                ) VALUES (
                    :event_time, :adapter, :operation, :amount, :logical_time, :metadata, :created_at
                );
                """,
                normalized,
            )

    def get_recent_events(
        self,
        *,
        adapter: Optional[str] = None,
        operation: Optional[str] = None,
        limit: int = 100,
    ) -> List[Dict[str, Any]]:
        """Return the newest events first, optionally filtered by adapter/operation."""
        clauses: List[str] = []
        params: List[Any] = []
        if adapter:
            clauses.append("adapter = ?")
            params.append(adapter)
        if operation:
            clauses.append("operation = ?")
            params.append(operation.lower())
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(max(1, int(limit)))
        with closing(self._get_connection()) as conn, conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                f"SELECT * FROM adapter_events {where} ORDER BY id DESC LIMIT ?;",
                params,
            ).fetchall()
        return [self._row_to_dict(row) for row in rows]

    def count_events(self, *, operation: Optional[str] = None) -> int:
        with closing(self._get_connection()) as conn, conn:
            if operation:
                row = conn.execute(
                    "SELECT COUNT(*) FROM adapter_events WHERE operation = ?;", (operation.lower(),)
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM adapter_events;").fetchone()
        return int(row[0] if row else 0)

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    def _get_connection(self) -> sqlite3.Connection:
        """Return a new SQLite connection with WAL enabled."""
        conn = sqlite3.connect(self.db_path.as_posix(), detect_types=sqlite3.PARSE_DECLTYPES)
        conn.execute("PRAGMA journal_mode = WAL;")
        return conn

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Dict[str, Any]:
        """Convert sqlite3.Row into a plain dict decoding JSON fields."""
        result = {key: row[key] for key in row.keys()}
        if "metadata" in result and isinstance(result["metadata"], str):
            try:
                result["metadata"] = json.loads(result["metadata"])
            except json.JSONDecodeError:
                result["metadata"] = {}
        return result
