import asyncio
import logging
from io import BytesIO
from pathlib import Path
from unittest.mock import Mock

import pytest
from docx import Document
from fastapi.testclient import TestClient

from backend.src.api import main as api_main
from backend.src.api.main import app
from backend.src.api.middleware import AuthContext, get_auth_context
from backend.src.models.record import RecordCreate, RecordKind
from backend.src.services.ai_edit import ProposalStore, get_proposal_store
from backend.src.services.database import DatabaseService
from backend.src.services.records import (
    RecordStore,
    RecordStoreError,
    SQLiteRecordStore,
    get_record_store,
)

client = TestClient(app)


def auth_as(user_id: str):
    mock_auth = Mock(spec=AuthContext)
    mock_auth.user_id = user_id
    return lambda: mock_auth


@pytest.fixture
def store(tmp_path: Path) -> SQLiteRecordStore:
    sqlite_store = SQLiteRecordStore(DatabaseService(tmp_path / "api.db"))
    app.dependency_overrides[get_record_store] = lambda: sqlite_store
    app.dependency_overrides[get_auth_context] = auth_as("alice")
    yield sqlite_store
    app.dependency_overrides = {}


def test_requires_bearer_token():
    response = client.get("/api/tests")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_list_returns_only_callers_records(store):
    store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Quiz", content="Q1 - ?"))
    store.insert(RecordKind.TESTS, "bob", RecordCreate(title="Bob's"))

    response = client.get("/api/tests")

    assert response.status_code == 200
    assert [r["title"] for r in response.json()] == ["Quiz"]


def test_unknown_kind_is_404(store):
    response = client.get("/api/folders")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_create_record(store):
    response = client.post("/api/notes", json={"title": "Cells", "content": "- nucleus"})

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "Cells"
    assert body["user_id"] == "alice"
    assert store.get(RecordKind.NOTES, "alice", body["id"]).content == "- nucleus"


def test_create_without_title_is_blocked():
    mock_store = Mock(spec=RecordStore)
    app.dependency_overrides[get_record_store] = lambda: mock_store
    app.dependency_overrides[get_auth_context] = auth_as("alice")
    try:
        response = client.post("/api/tests", json={"title": "  ", "content": "Q1 - x"})
    finally:
        app.dependency_overrides = {}

    assert response.status_code == 400
    assert response.json() == {
        "error": "missing_title",
        "message": "Please enter a title",
        "detail": None,
    }
    mock_store.insert.assert_not_called()


def test_update_title_and_content(store):
    record = store.insert(RecordKind.WORKSPACES, "alice", RecordCreate(title="Bio"))

    assert client.patch(
        f"/api/workspaces/{record.id}/title", json={"title": "Biology"}
    ).status_code == 204
    assert client.put(
        f"/api/workspaces/{record.id}/content", json={"content": "# Term 1"}
    ).status_code == 204

    stored = store.get(RecordKind.WORKSPACES, "alice", record.id)
    assert (stored.title, stored.content) == ("Biology", "# Term 1")


def test_blank_title_update_is_rejected(store):
    record = store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Quiz"))

    response = client.patch(f"/api/tests/{record.id}/title", json={"title": ""})

    assert response.status_code == 400
    assert store.get(RecordKind.TESTS, "alice", record.id).title == "Quiz"


def test_delete_record(store):
    keep = store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Keep"))
    drop = store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Drop"))

    response = client.delete(f"/api/tests/{drop.id}")

    assert response.status_code == 204
    assert [r["id"] for r in client.get("/api/tests").json()] == [keep.id]


def test_backend_failure_is_502():
    mock_store = Mock(spec=RecordStore)
    mock_store.delete.side_effect = RecordStoreError("connection refused")
    app.dependency_overrides[get_record_store] = lambda: mock_store
    app.dependency_overrides[get_auth_context] = auth_as("alice")
    try:
        response = client.delete("/api/tests/1")
    finally:
        app.dependency_overrides = {}

    assert response.status_code == 502
    assert response.json()["error"] == "upstream_error"
    mock_store.delete.assert_called_once_with(RecordKind.TESTS, "alice", "1")


def test_export_docx(store):
    record = store.insert(
        RecordKind.TESTS, "alice", RecordCreate(title="Biology Quiz", content="Q1 - What is a cell?")
    )

    response = client.get(f"/api/tests/{record.id}/export.docx")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    )
    assert 'filename="Biology-Quiz.docx"' in response.headers["content-disposition"]
    texts = [p.text for p in Document(BytesIO(response.content)).paragraphs]
    assert texts == ["Biology Quiz", "Q1 - What is a cell?"]


def test_export_missing_record_is_404(store):
    assert client.get("/api/tests/nope/export.docx").status_code == 404


def test_me_and_health(store):
    assert client.get("/api/me").json() == {"user_id": "alice"}
    assert client.get("/health").json() == {"status": "healthy"}


def test_system_logs_include_recent_entries(store):
    logging.getLogger("backend.src.services.records").info("Deleted tests record 42")

    response = client.get("/api/system/logs")

    assert response.status_code == 200
    messages = [entry["message"] for entry in response.json()]
    assert "Deleted tests record 42" in messages


def running_on_event_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


class LoopRecordingStore(SQLiteRecordStore):
    """SQLite store that notes whether each query ran on the event loop thread."""

    def __init__(self, db_service: DatabaseService) -> None:
        super().__init__(db_service)
        self.on_loop: list[bool] = []

    def _execute(self, sql, params):
        self.on_loop.append(running_on_event_loop())
        return super()._execute(sql, params)


def test_record_routes_keep_backend_calls_off_the_event_loop(tmp_path: Path):
    recording = LoopRecordingStore(DatabaseService(tmp_path / "loop.db"))
    app.dependency_overrides[get_record_store] = lambda: recording
    app.dependency_overrides[get_auth_context] = auth_as("alice")
    try:
        created = client.post("/api/tests", json={"title": "Quiz", "content": "Q1 - x"}).json()
        client.get("/api/tests")
        client.patch(f"/api/tests/{created['id']}/title", json={"title": "Quiz 2"})
        client.put(f"/api/tests/{created['id']}/content", json={"content": "Q1 - y"})
        client.get(f"/api/tests/{created['id']}/export.docx")
        client.delete(f"/api/tests/{created['id']}")
    finally:
        app.dependency_overrides = {}

    assert len(recording.on_loop) == 6
    assert not any(recording.on_loop)


def test_delete_discards_pending_proposal(store):
    record = store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Quiz"))
    proposals = ProposalStore()
    proposals.put("alice", RecordKind.TESTS, record.id, "Q1 - revised")
    app.dependency_overrides[get_proposal_store] = lambda: proposals

    assert client.delete(f"/api/tests/{record.id}").status_code == 204

    assert len(proposals) == 0


def test_shutdown_closes_record_backend(monkeypatch):
    backend = Mock(spec=RecordStore)
    monkeypatch.setattr(api_main, "get_record_store", lambda: backend)

    with TestClient(app) as started:
        assert started.get("/health").status_code == 200
        backend.close.assert_not_called()

    backend.close.assert_called_once_with()
