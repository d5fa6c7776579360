import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from backend.src.api.main import app
from backend.src.api.middleware import AuthContext, get_auth_context
from backend.src.models.ai import NO_RESPONSE_TEXT, GenerateResponse
from backend.src.models.record import Record, RecordCreate, RecordKind
from backend.src.services.ai_edit import (
    AIEditService,
    ProposalStore,
    get_ai_edit_service,
    get_proposal_store,
)
from backend.src.services.database import DatabaseService
from backend.src.services.records import RecordStore, SQLiteRecordStore, get_record_store

client = TestClient(app)


@pytest.fixture
def ai() -> Mock:
    mock = Mock(spec=AIEditService)
    mock.propose = AsyncMock(return_value="Q1 - Harder question")
    mock.generate = AsyncMock(
        return_value=GenerateResponse(response="Q1 - Generated", generated=True)
    )
    return mock


@pytest.fixture
def proposals() -> ProposalStore:
    return ProposalStore()


@pytest.fixture
def store(tmp_path: Path, ai, proposals) -> SQLiteRecordStore:
    sqlite_store = SQLiteRecordStore(DatabaseService(tmp_path / "ai.db"))
    mock_auth = Mock(spec=AuthContext)
    mock_auth.user_id = "alice"

    app.dependency_overrides[get_record_store] = lambda: sqlite_store
    app.dependency_overrides[get_auth_context] = lambda: mock_auth
    app.dependency_overrides[get_ai_edit_service] = lambda: ai
    app.dependency_overrides[get_proposal_store] = lambda: proposals
    yield sqlite_store
    app.dependency_overrides = {}


@pytest.fixture
def quiz(store):
    store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Other", content="untouched"))
    return store.insert(RecordKind.TESTS, "alice", RecordCreate(title="Quiz", content="Q1 - Easy"))


def test_generate_returns_first_candidate(store, ai):
    response = client.post("/api/generate", json={"prompt": "Ten algebra questions"})

    assert response.status_code == 200
    assert response.json() == {"response": "Q1 - Generated", "generated": True}
    ai.generate.assert_awaited_once_with("Ten algebra questions")


def test_generate_failure_returns_placeholder(store, ai):
    ai.generate.return_value = GenerateResponse(response=NO_RESPONSE_TEXT, generated=False)

    response = client.post("/api/generate", json={"prompt": "anything"})

    assert response.status_code == 200
    assert response.json() == {"response": "No response", "generated": False}


def test_propose_then_accept_replaces_only_target(store, ai, proposals, quiz):
    proposed = client.post(f"/api/tests/{quiz.id}/ai-edit", json={"instruction": "Harder"})

    assert proposed.status_code == 200
    assert proposed.json() == {"record_id": quiz.id, "proposal": "Q1 - Harder question"}
    ai.propose.assert_awaited_once_with("Q1 - Easy", "Harder")
    assert store.get(RecordKind.TESTS, "alice", quiz.id).content == "Q1 - Easy"

    accepted = client.post(f"/api/tests/{quiz.id}/ai-edit/accept")

    assert accepted.status_code == 200
    assert accepted.json()["content"] == "Q1 - Harder question"
    contents = {r.title: r.content for r in store.list_by_owner(RecordKind.TESTS, "alice")}
    assert contents == {"Other": "untouched", "Quiz": "Q1 - Harder question"}
    assert len(proposals) == 0


def test_reject_discards_proposal(store, proposals, quiz):
    client.post(f"/api/tests/{quiz.id}/ai-edit", json={"instruction": "Harder"})

    assert client.post(f"/api/tests/{quiz.id}/ai-edit/reject").status_code == 204

    assert store.get(RecordKind.TESTS, "alice", quiz.id).content == "Q1 - Easy"
    assert client.post(f"/api/tests/{quiz.id}/ai-edit/accept").status_code == 404


def test_failed_model_call_leaves_proposal_unset(store, ai, proposals, quiz):
    ai.propose.return_value = None

    response = client.post(f"/api/tests/{quiz.id}/ai-edit", json={"instruction": "Harder"})

    assert response.status_code == 200
    assert response.json()["proposal"] is None
    assert len(proposals) == 0
    assert client.post(f"/api/tests/{quiz.id}/ai-edit/accept").json()["error"] == "no_proposal"


def test_ai_edit_unknown_record_is_404(store, ai):
    response = client.post("/api/notes/missing/ai-edit", json={"instruction": "x"})

    assert response.status_code == 404
    ai.propose.assert_not_awaited()


def test_edit_routes_keep_backend_calls_off_the_event_loop(ai, proposals):
    on_loop = []

    def lookup(kind, user_id, record_id):
        try:
            asyncio.get_running_loop()
            on_loop.append(True)
        except RuntimeError:
            on_loop.append(False)
        return Record(id=record_id, title="Quiz", content="Q1 - Easy", user_id=user_id)

    backend = Mock(spec=RecordStore)
    backend.get.side_effect = lookup
    mock_auth = Mock(spec=AuthContext)
    mock_auth.user_id = "alice"
    app.dependency_overrides[get_record_store] = lambda: backend
    app.dependency_overrides[get_auth_context] = lambda: mock_auth
    app.dependency_overrides[get_ai_edit_service] = lambda: ai
    app.dependency_overrides[get_proposal_store] = lambda: proposals
    try:
        client.post("/api/tests/1/ai-edit", json={"instruction": "Harder"})
        accepted = client.post("/api/tests/1/ai-edit/accept")
    finally:
        app.dependency_overrides = {}

    assert accepted.status_code == 200
    assert on_loop == [False, False]
    backend.update_content.assert_called_once_with(
        RecordKind.TESTS, "alice", "1", "Q1 - Harder question"
    )
