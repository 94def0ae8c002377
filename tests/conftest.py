"""Pytest fixtures and configuration for taskmatrix tests."""

import pytest
import uuid
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from taskmatrix.database.database import Base
from taskmatrix.database import models  # noqa: F401
from taskmatrix.database.repository import TaskRecordRepository, SessionScopedRepository
from taskmatrix.engine.board import TaskBoard
from taskmatrix.engine.quadrant import classify_quadrant, quadrant_label
from taskmatrix.models.classification import RawClassification
from taskmatrix.models.task import ClassificationRecord, Explanation, TaskStatus


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# 2026-01-26 12:00:00 UTC
NOW_MS = int(datetime(2026, 1, 26, 12, 0, 0, tzinfo=timezone.utc).timestamp() * 1000)


class FakeClassifier:
    """Stand-in for the remote classifier: returns a fixed result or raises."""

    def __init__(self, result=None, error=None):
        self.result = result or RawClassification(
            quadrant="Q4 - 暂不处理",
            u=30,
            i=50,
            explanation=Explanation(
                urgency="原始紧急度分析",
                importance="原始重要性分析",
                next_action="建议：安排时间块处理 (Time-block)",
            ),
        )
        self.error = error
        self.calls = []

    def classify(self, text, due_at, now):
        self.calls.append((text, due_at, now))
        if self.error is not None:
            raise self.error
        return self.result


class InMemoryPersistence:
    """Load/save collaborator that keeps the saved list in memory."""

    def __init__(self, records=None):
        self.records = records
        self.save_count = 0

    def load(self):
        return self.records

    def save(self, records):
        self.records = list(records)
        self.save_count += 1


@pytest.fixture
def now():
    """Fixed current time (ms since epoch)."""
    return NOW_MS


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine shared across threads, created fresh for each test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def record_repository(db_session: Session):
    """Create a TaskRecordRepository instance for testing."""
    return TaskRecordRepository(db_session)


@pytest.fixture
def make_record(now):
    """Factory for valid records; quadrant and label follow the scores."""

    def _make(**overrides) -> ClassificationRecord:
        data = {
            "id": str(uuid.uuid4()),
            "original_text": "Test task",
            "u_score": 40,
            "i_score": 40,
            "due_at": None,
            "status": TaskStatus.OPEN,
            "completed_at": None,
            "explanation": Explanation(urgency="u", importance="i", next_action="n"),
            "corrections": [],
            "timestamp": now,
        }
        data.update(overrides)
        quadrant = classify_quadrant(data["u_score"], data["i_score"])
        data.setdefault("quadrant", quadrant)
        data.setdefault("quadrant_label", quadrant_label(quadrant))
        return ClassificationRecord(**data)

    return _make


@pytest.fixture
def fake_classifier():
    return FakeClassifier()


@pytest.fixture
def persistence():
    return InMemoryPersistence()


@pytest.fixture
def board(fake_classifier, persistence, now):
    """Board with a fake classifier, in-memory persistence and a fixed clock."""
    return TaskBoard(
        classifier=fake_classifier,
        persistence=persistence,
        clock=lambda: now,
        time_zone="UTC",
        locale="zh",
    )


@pytest.fixture
def make_board(now):
    """Factory for boards with a fixed clock and in-memory persistence."""

    def _make(classifier=None, error=None, records=None) -> TaskBoard:
        return TaskBoard(
            classifier=classifier or FakeClassifier(error=error),
            persistence=InMemoryPersistence(records),
            clock=lambda: now,
            time_zone="UTC",
            locale="zh",
        )

    return _make


@pytest.fixture
def api_board(fake_classifier, session_factory, now):
    """Board persisted to the test database, as wired in the API."""
    board = TaskBoard(
        classifier=fake_classifier,
        persistence=SessionScopedRepository(session_factory),
        clock=lambda: now,
        time_zone="UTC",
        locale="zh",
    )
    board.load()
    return board


@pytest.fixture
def test_client(api_board):
    """Create a FastAPI test client with the board dependency overridden."""
    from taskmatrix.api.app import app, get_board

    app.dependency_overrides[get_board] = lambda: api_board

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
