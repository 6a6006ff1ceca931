"""Test configuration and fixtures."""
import os
import tempfile

# Keep tests off the on-disk database and log directory
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="url_inbox_logs_"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from url_inbox.core.db import Base
from url_inbox.core.deps import get_pending_buffer
from url_inbox.models import schema  # noqa: F401
from url_inbox.services.kv_store import InMemoryKeyValueStore, SqlKeyValueStore
from url_inbox.services.pending_buffer import PendingBuffer
from url_inbox.services.share_intake import ShareIntakeOrchestrator
from url_inbox.services.title_inference import TitleHeuristics


@pytest.fixture
def test_db():
    """Create a test database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(test_db):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db)


@pytest.fixture
def sql_store(session_factory):
    return SqlKeyValueStore(session_factory)


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def pending_buffer(memory_store):
    return PendingBuffer(memory_store, slot_key="pending_data")


@pytest.fixture
def orchestrator(pending_buffer):
    return ShareIntakeOrchestrator(pending_buffer, heuristics=TitleHeuristics())


@pytest.fixture
def client(pending_buffer):
    """Create a test client backed by the in-memory buffer."""
    from url_inbox.main import app

    app.dependency_overrides[get_pending_buffer] = lambda: pending_buffer

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
