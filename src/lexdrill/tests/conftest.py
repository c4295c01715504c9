"""Test configuration."""
import os
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Callable, Generator, Optional

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)
os.environ.setdefault("DATABASE_URL", "sqlite:///test_lexdrill.db")

# Import after environment setup
from sqlalchemy.orm import Session

from lexdrill.models.base import Base, SessionLocal, engine, init_db
from lexdrill.models.models import Lecture, PartOfSpeech, UserWordLog, Word

fake = Faker()

TODAY = date(2024, 5, 20)
NOW = datetime(2024, 5, 20, 15, 30, tzinfo=UTC)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database and a session on it for each test."""
    engine.dispose()
    Base.metadata.drop_all(bind=engine)
    init_db()

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def make_word() -> Callable[..., Word]:
    """Build catalog words without touching the database."""
    counter = iter(range(1, 10_000))

    def _make_word(lecture_id: str = "L001", word_id: Optional[str] = None, **kwargs) -> Word:
        n = next(counter)
        return Word(
            word_id=word_id or f"W{n:03d}",
            class_name=kwargs.pop("class_name", "Standard"),
            lecture_id=lecture_id,
            word=kwargs.pop("word", f"{fake.word()}{n}"),
            pos=kwargs.pop("pos", PartOfSpeech.NOUN),
            meaning=kwargs.pop("meaning", fake.sentence(nb_words=2)),
            **kwargs,
        )

    return _make_word


@pytest.fixture
def make_log() -> Callable[..., UserWordLog]:
    """Build word logs without touching the database."""

    def _make_log(
        word_id: str,
        user_id: str = "student-1",
        correct: int = 0,
        wrong: int = 0,
        last_seen: date = TODAY,
        last_correct: date = date(2000, 1, 1),
    ) -> UserWordLog:
        return UserWordLog(
            user_id=user_id,
            word_id=word_id,
            correct_count=correct,
            wrong_count=wrong,
            last_seen=last_seen,
            last_correct=last_correct,
        )

    return _make_log


@pytest.fixture
def lecture(db: Session) -> Lecture:
    """Create a test lecture."""
    lecture = Lecture(lecture_id="L001", class_name="Standard", lecture_name="Unit 1", order=1)
    db.add(lecture)
    db.commit()
    return lecture
