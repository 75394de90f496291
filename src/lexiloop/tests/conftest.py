"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
_db_dir = tempfile.mkdtemp(prefix="lexiloop-test-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{Path(_db_dir) / 'test.db'}")
os.environ.setdefault("DATA_DIR", str(Path(_db_dir) / "data"))

# Import after environment setup
from sqlalchemy.orm import Session  # noqa: E402

from lexiloop.config import ensure_directories  # noqa: E402
from lexiloop.models.base import SessionLocal, drop_db, engine, init_db  # noqa: E402
from lexiloop.models.models import (  # noqa: E402
    Learner,
    LearnerWordState,
    VocabularyEntry,
    WordStatus,
)
from lexiloop.services.word_store import SqlWordStore  # noqa: E402

fake = Faker()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    fake.unique.clear()
    engine.dispose()
    drop_db()
    init_db()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def store(db: Session) -> SqlWordStore:
    return SqlWordStore(db)


@pytest.fixture
def learner(db: Session) -> Learner:
    """Create a test learner."""
    learner = Learner(
        external_id=fake.uuid4(),
        display_name=fake.first_name(),
        language="he",
        english_level="beginner",
        interests="food,travel",
        audience_type="students",
    )
    db.add(learner)
    db.commit()
    db.refresh(learner)
    return learner


@pytest.fixture
def make_entry(db: Session) -> Callable[..., VocabularyEntry]:
    """Factory for catalog entries."""

    def _make_entry(
        priority: int = 0,
        category: str = "food",
        level: str = "basic",
        source_text: str = None,
        example_sentence: str = "",
    ) -> VocabularyEntry:
        entry = VocabularyEntry(
            source_text=source_text or fake.unique.word(),
            target_text=fake.unique.word(),
            category=category,
            level=level,
            example_sentence=example_sentence,
            priority=priority,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    return _make_entry


@pytest.fixture
def make_state(db: Session) -> Callable[..., LearnerWordState]:
    """Factory for learner word states."""

    def _make_state(
        learner: Learner,
        entry: VocabularyEntry,
        status: WordStatus = WordStatus.NEW,
        last_practiced_at=None,
    ) -> LearnerWordState:
        state = LearnerWordState(
            learner_id=learner.id,
            entry_id=entry.id,
            status=status.value,
            view_count=0,
            last_practiced_at=last_practiced_at,
        )
        db.add(state)
        db.commit()
        db.refresh(state)
        return state

    return _make_state
