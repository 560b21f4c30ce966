"""SQLite client utilities.

Updates:
    v0.1.0 - 2026-09-14 - Feedback table schema with generated artifact columns.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

FEEDBACK_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS feedback (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    rating INTEGER NOT NULL CHECK(rating >= 1 AND rating <= 5),
    review TEXT NOT NULL DEFAULT '',
    ai_response TEXT,
    ai_summary TEXT,
    ai_actions TEXT,
    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

FEEDBACK_CREATED_INDEX = """
CREATE INDEX IF NOT EXISTS idx_feedback_created_at ON feedback(created_at);
"""


class SQLiteClient:
    """Lightweight wrapper around sqlite3 for stored feedback."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the SQLite client.

        Args:
            db_path (str | Path): Path to the SQLite database file, or ``:memory:``.
        """

        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Return or lazily initialize the SQLite connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(self._db_path)
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize_schema(self) -> None:
        """Ensure the feedback table and its index exist."""
        with self.connection as conn:
            conn.execute(FEEDBACK_TABLE_SCHEMA)
            conn.execute(FEEDBACK_CREATED_INDEX)

    def close(self) -> None:
        """Close and discard the active SQLite connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
