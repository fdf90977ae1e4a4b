"""Shared test fixtures for Healthdesk unit tests."""

import os
import tempfile

import httpx
import pytest

from healthdesk.agent.graph import build_graph
from healthdesk.agent.orchestrator import ChatOrchestrator
from healthdesk.config import Settings
from healthdesk.main import app
from healthdesk.persistence.records import RecordStore
from healthdesk.persistence.seed import seed_catalog
from healthdesk.persistence.store import ChatStore, Database, UserRecord
from healthdesk.streaming.resumable import ResumableStreamContext
from healthdesk.tools import ALL_TOOLS
from healthdesk.tools.base import set_store
from tests.fakes import ALICE, BOB, GUEST, ScriptedChatModel


@pytest.fixture(autouse=True)
def log_dir(tmp_path, monkeypatch):
    """Keep JSONL audit and cost logs inside the test's temp dir."""
    monkeypatch.setattr("healthdesk.agent.cost_tracker.LOG_DIR", tmp_path)
    monkeypatch.setattr(
        "healthdesk.agent.cost_tracker.LOG_FILE", tmp_path / "cost_log.jsonl"
    )
    monkeypatch.setattr("healthdesk.middleware.audit_logger.LOG_DIR", tmp_path)
    monkeypatch.setattr(
        "healthdesk.middleware.audit_logger.AUDIT_LOG_FILE", tmp_path / "audit_log.jsonl"
    )
    return tmp_path


@pytest.fixture
async def db():
    """Create a temporary SQLite database for testing."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    database = Database(db_path)
    await database.init_db()
    yield database
    await database.close()
    os.unlink(db_path)


@pytest.fixture
def chat_store(db):
    return ChatStore(db)


@pytest.fixture
def records(db):
    return RecordStore(db)


@pytest.fixture
async def seeded(records, chat_store):
    """Demo catalog plus three users: two regular, one guest."""
    await seed_catalog(records, chat_store)
    await chat_store.upsert_user(UserRecord(id=ALICE, email="alice@example.com"))
    await chat_store.upsert_user(UserRecord(id=BOB, email="bob@example.com"))
    await chat_store.upsert_user(UserRecord(id=GUEST, email="guest@example.com", type="guest"))
    return records


@pytest.fixture
def tool_store(seeded):
    """Inject the seeded record store into the tool modules."""
    set_store(seeded)
    yield seeded
    set_store(None)


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        regular_max_messages_per_day=100,
        guest_max_messages_per_day=20,
        max_request_seconds=10.0,
        tool_timeout_seconds=5.0,
    )


@pytest.fixture
def chat_model():
    return ScriptedChatModel()


@pytest.fixture
def reasoning_model():
    return ScriptedChatModel()


@pytest.fixture
def orchestrator(chat_store, tool_store, chat_model, reasoning_model, settings):
    graphs = {
        "chat-model": build_graph(chat_model, tools=ALL_TOOLS, max_steps=settings.max_steps),
        "chat-model-reasoning": build_graph(reasoning_model, tools=[], max_steps=1),
    }
    return ChatOrchestrator(
        chat_store,
        graphs,
        settings,
        streams=ResumableStreamContext(retention_seconds=60),
    )


@pytest.fixture
async def client(orchestrator, chat_store, tool_store):
    """In-process HTTP client against the real app with test state injected."""
    app.state.chat_store = chat_store
    app.state.records = tool_store
    app.state.orchestrator = orchestrator
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await orchestrator.background.drain()
