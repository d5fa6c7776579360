"""Record backends for test documents, notes and workspaces.

Two interchangeable stores implement the same handful of operations:

* ``SupabaseRecordStore`` talks to a hosted Supabase project through its
  PostgREST endpoint (``/rest/v1/<table>``).
* ``SQLiteRecordStore`` keeps the same three tables in a local SQLite file,
  which is what local development and the tests use.

Every operation is a single round trip. There is no retry, pagination or
version check; concurrent writers simply overwrite each other.
"""

from __future__ import annotations

import abc
import logging
import sqlite3
import uuid
from functools import lru_cache
from typing import Any, Dict, List, Optional

import httpx

from ..models.record import Record, RecordCreate, RecordKind
from .config import AppConfig, get_config
from .database import DatabaseService

logger = logging.getLogger(__name__)


class RecordStoreError(Exception):
    """Raised when the record backend rejects or fails a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecordStore(abc.ABC):
    """Owner-scoped CRUD over the three record tables."""

    @abc.abstractmethod
    def list_by_owner(self, kind: RecordKind, user_id: str) -> List[Record]:
        """Return every record of ``kind`` owned by ``user_id``."""

    @abc.abstractmethod
    def get(self, kind: RecordKind, user_id: str, record_id: str) -> Optional[Record]:
        """Return a single owned record, or None if it does not exist."""

    @abc.abstractmethod
    def insert(self, kind: RecordKind, user_id: str, data: RecordCreate) -> Record:
        """Insert a new row and return it as stored."""

    @abc.abstractmethod
    def _update_field(
        self, kind: RecordKind, user_id: str, record_id: str, field: str, value: str
    ) -> None:
        """Set one column on one row."""

    @abc.abstractmethod
    def delete(self, kind: RecordKind, user_id: str, record_id: str) -> None:
        """Delete one row by id."""

    def update_title(
        self, kind: RecordKind, user_id: str, record_id: str, title: str
    ) -> bool:
        """Rename a record. Blank titles are ignored and no request is sent."""
        if not record_id or not title.strip():
            return False
        self._update_field(kind, user_id, record_id, "title", title)
        return True

    def update_content(
        self, kind: RecordKind, user_id: str, record_id: str, content: str
    ) -> None:
        """Replace a record's markdown content."""
        self._update_field(kind, user_id, record_id, "content", content)

    def close(self) -> None:
        """Release connections held by the backend."""


class SupabaseRecordStore(RecordStore):
    """Record store backed by Supabase's PostgREST API."""

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.base_url = url.rstrip("/") + self.REST_PATH
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=timeout)

    def _headers(self, **extra: str) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Dict[str, str],
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        try:
            response = self._client.request(
                method,
                f"{self.base_url}/{table}",
                params=params,
                json=json,
                headers=headers or self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RecordStoreError(
                f"{method} {table} failed with {exc.response.status_code}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise RecordStoreError(f"{method} {table} failed: {exc}") from exc
        return response

    @staticmethod
    def _rows(response: httpx.Response) -> List[Dict[str, Any]]:
        try:
            data = response.json()
        except ValueError as exc:
            raise RecordStoreError(f"Malformed response from Supabase: {exc}") from exc
        if not isinstance(data, list):
            raise RecordStoreError("Malformed response from Supabase: expected a list of rows")
        return data

    def list_by_owner(self, kind: RecordKind, user_id: str) -> List[Record]:
        response = self._request(
            "GET", kind.table, params={"select": "*", "user_id": f"eq.{user_id}"}
        )
        return [Record(**row) for row in self._rows(response)]

    def get(self, kind: RecordKind, user_id: str, record_id: str) -> Optional[Record]:
        response = self._request(
            "GET",
            kind.table,
            params={"select": "*", "id": f"eq.{record_id}", "user_id": f"eq.{user_id}"},
        )
        rows = self._rows(response)
        return Record(**rows[0]) if rows else None

    def insert(self, kind: RecordKind, user_id: str, data: RecordCreate) -> Record:
        payload = data.model_dump(exclude_none=True)
        payload["user_id"] = user_id
        response = self._request(
            "POST",
            kind.table,
            params={},
            json=[payload],
            headers=self._headers(Prefer="return=representation"),
        )
        rows = self._rows(response)
        if not rows:
            raise RecordStoreError(f"Insert into {kind.table} returned no row")
        logger.info("Inserted %s record %s for user %s", kind.value, rows[0].get("id"), user_id)
        return Record(**rows[0])

    def _update_field(
        self, kind: RecordKind, user_id: str, record_id: str, field: str, value: str
    ) -> None:
        self._request(
            "PATCH",
            kind.table,
            params={"id": f"eq.{record_id}", "user_id": f"eq.{user_id}"},
            json={field: value},
        )

    def delete(self, kind: RecordKind, user_id: str, record_id: str) -> None:
        self._request(
            "DELETE",
            kind.table,
            params={"id": f"eq.{record_id}", "user_id": f"eq.{user_id}"},
        )
        logger.info("Deleted %s record %s for user %s", kind.value, record_id, user_id)

    def close(self) -> None:
        self._client.close()


class SQLiteRecordStore(RecordStore):
    """Record store backed by a local SQLite database."""

    COLUMNS = "id, title, content, user_id, description"

    def __init__(self, db_service: DatabaseService | None = None) -> None:
        self._db = db_service or DatabaseService()
        self._db.initialize()

    def _execute(self, sql: str, params: tuple) -> List[sqlite3.Row]:
        conn = self._db.connect()
        try:
            with conn:
                cursor = conn.execute(sql, params)
                return cursor.fetchall()
        except sqlite3.Error as exc:
            raise RecordStoreError(f"SQLite error: {exc}") from exc
        finally:
            conn.close()

    def list_by_owner(self, kind: RecordKind, user_id: str) -> List[Record]:
        rows = self._execute(
            f"SELECT {self.COLUMNS} FROM {kind.table} WHERE user_id = ? ORDER BY created_at, rowid",
            (user_id,),
        )
        return [Record(**dict(row)) for row in rows]

    def get(self, kind: RecordKind, user_id: str, record_id: str) -> Optional[Record]:
        rows = self._execute(
            f"SELECT {self.COLUMNS} FROM {kind.table} WHERE id = ? AND user_id = ?",
            (record_id, user_id),
        )
        return Record(**dict(rows[0])) if rows else None

    def insert(self, kind: RecordKind, user_id: str, data: RecordCreate) -> Record:
        record = Record(
            id=uuid.uuid4().hex,
            title=data.title,
            content=data.content,
            user_id=user_id,
            description=data.description,
        )
        self._execute(
            f"INSERT INTO {kind.table} (id, title, content, user_id, description) VALUES (?, ?, ?, ?, ?)",
            (record.id, record.title, record.content, record.user_id, record.description),
        )
        logger.info("Inserted %s record %s for user %s", kind.value, record.id, user_id)
        return record

    def _update_field(
        self, kind: RecordKind, user_id: str, record_id: str, field: str, value: str
    ) -> None:
        if field not in {"title", "content"}:
            raise ValueError(f"Unsupported field: {field}")
        self._execute(
            f"UPDATE {kind.table} SET {field} = ? WHERE id = ? AND user_id = ?",
            (value, record_id, user_id),
        )

    def delete(self, kind: RecordKind, user_id: str, record_id: str) -> None:
        self._execute(
            f"DELETE FROM {kind.table} WHERE id = ? AND user_id = ?",
            (record_id, user_id),
        )
        logger.info("Deleted %s record %s for user %s", kind.value, record_id, user_id)


def build_record_store(config: AppConfig | None = None) -> RecordStore:
    """Construct the record store selected by ``RECORD_BACKEND``."""
    config = config or get_config()
    if config.record_backend == "supabase":
        return SupabaseRecordStore(config.supabase_url, config.supabase_api_key)
    return SQLiteRecordStore(DatabaseService(config.database_path))


@lru_cache(maxsize=1)
def get_record_store() -> RecordStore:
    """Get the cached record store for the running application."""
    return build_record_store()


__all__ = [
    "RecordStore",
    "RecordStoreError",
    "SupabaseRecordStore",
    "SQLiteRecordStore",
    "build_record_store",
    "get_record_store",
]
