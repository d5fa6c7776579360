"""SQLite database helpers for the local record backend."""

from __future__ import annotations

from pathlib import Path
import sqlite3
from typing import Iterable

from ..models.record import RECORD_TABLES
from .config import DEFAULT_DB_PATH

def _record_table_ddl(table: str) -> tuple[str, ...]:
    return (
        f"""
        CREATE TABLE IF NOT EXISTS {table} (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL DEFAULT '',
            content TEXT NOT NULL DEFAULT '',
            user_id TEXT NOT NULL,
            description TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"CREATE INDEX IF NOT EXISTS idx_{table}_user ON {table}(user_id)",
    )

DDL_STATEMENTS: tuple[str, ...] = tuple(
    statement
    for table in RECORD_TABLES.values()
    for statement in _record_table_ddl(table)
)

class DatabaseService:
    """Manage SQLite connections and schema initialization."""

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    def _ensure_directory(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        """Return a sqlite3 connection with the proper data directory created."""
        self._ensure_directory()
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self, statements: Iterable[str] | None = None) -> Path:
        """Create the record tables if they do not exist yet."""
        conn = self.connect()
        try:
            with conn:
                for statement in statements or DDL_STATEMENTS:
                    conn.execute(statement)
        finally:
            conn.close()
        return self.db_path


__all__ = ["DatabaseService", "DDL_STATEMENTS", "DEFAULT_DB_PATH"]
