"""Catalog and accuracy-log store for vocabulary practice."""
import logging
import threading
import weakref
from collections import defaultdict
from datetime import date
from typing import ClassVar, Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lexdrill.models.models import Lecture, UserWordLog, Word
from lexdrill.monitoring import db_errors, db_operations
from lexdrill.services.spaced_repetition import update_log

logger = logging.getLogger(__name__)

ALL_CLASSES = "All"


class VocabStore:
    """Store for lectures, words and per-user word logs.

    ``apply_outcome`` is the only supported way to grade a word: it runs the
    read-modify-write of a log while holding a lock for that (user, word)
    pair, and reads the row ``FOR UPDATE`` on databases that support it.
    Writing logs computed elsewhere with ``save_user_log`` replaces the
    stored record wholesale and is last-write-wins.
    """

    # Entries vanish once no caller holds the lock
    _key_locks: ClassVar["weakref.WeakValueDictionary[Tuple[str, str], threading.Lock]"] = (
        weakref.WeakValueDictionary()
    )
    _key_locks_guard: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    @classmethod
    def _lock_for(cls, user_id: str, word_id: str) -> threading.Lock:
        with cls._key_locks_guard:
            return cls._key_locks.setdefault((user_id, word_id), threading.Lock())

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            db_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Database error during {operation}: {e}")
            raise
        db_operations.labels(operation_type=operation).inc()

    # Lectures

    def list_lectures_by_class(self, class_name: str) -> List[Lecture]:
        """Get the lectures of a class in display order."""
        query = self.db.query(Lecture)
        if class_name != ALL_CLASSES:
            query = query.filter(Lecture.class_name == class_name)
        return query.order_by(Lecture.order, Lecture.lecture_id).all()

    def get_lecture(self, lecture_id: str) -> Optional[Lecture]:
        """Get a lecture by its ID."""
        return self.db.query(Lecture).filter(Lecture.lecture_id == lecture_id).first()

    def add_lecture(self, lecture: Lecture) -> Lecture:
        """Add a new lecture."""
        self.db.add(lecture)
        self._commit("add_lecture")
        return lecture

    def update_lecture(self, lecture_id: str, **kwargs) -> Lecture:
        """Update a lecture's attributes."""
        lecture = self.get_lecture(lecture_id)
        if not lecture:
            raise ValueError(f"Lecture {lecture_id} not found")

        for key, value in kwargs.items():
            if hasattr(lecture, key):
                setattr(lecture, key, value)

        self._commit("update_lecture")
        return lecture

    # Words

    def list_words_by_lecture(self, lecture_id: str) -> List[Word]:
        """Get all words of a lecture."""
        return (
            self.db.query(Word)
            .filter(Word.lecture_id == lecture_id)
            .order_by(Word.word_id)
            .all()
        )

    def list_words_by_class(self, class_name: str) -> List[Word]:
        """Get the full word catalog of a class."""
        query = self.db.query(Word)
        if class_name != ALL_CLASSES:
            query = query.filter(Word.class_name == class_name)
        return query.order_by(Word.word_id).all()

    def add_words(self, words: Iterable[Word]) -> List[Word]:
        """Add words to the catalog."""
        words = list(words)
        self.db.add_all(words)
        self._commit("add_words")
        return words

    def delete_words(self, word_ids: Iterable[str]) -> int:
        """Delete words from the catalog. Their logs are kept."""
        word_ids = list(word_ids)
        if not word_ids:
            return 0
        deleted = (
            self.db.query(Word)
            .filter(Word.word_id.in_(word_ids))
            .delete(synchronize_session=False)
        )
        self._commit("delete_words")
        return deleted

    # Logs

    def list_user_logs(self, user_id: str) -> List[UserWordLog]:
        """Get every word log of a user."""
        return (
            self.db.query(UserWordLog)
            .filter(UserWordLog.user_id == user_id)
            .all()
        )

    def get_user_log(self, user_id: str, word_id: str) -> Optional[UserWordLog]:
        """Get the log of a user for one word."""
        return self.db.get(UserWordLog, (user_id, word_id))

    def save_user_log(self, log: UserWordLog) -> UserWordLog:
        """Insert a log or replace the stored one for the same user and word."""
        merged = self.db.merge(log)
        self._commit("save_user_log")
        return merged

    def apply_outcome(
        self,
        user_id: str,
        word_id: str,
        correct: bool,
        today: Optional[date] = None,
    ) -> UserWordLog:
        """Record one graded attempt and return the stored log."""
        with self._lock_for(user_id, word_id):
            prior = (
                self.db.query(UserWordLog)
                .filter(
                    UserWordLog.user_id == user_id,
                    UserWordLog.word_id == word_id,
                )
                .with_for_update()
                .first()
            )
            log = update_log(prior, user_id, word_id, correct, today=today)
            return self.save_user_log(log)

    def get_all_student_logs(self, class_name: str) -> Dict[str, List[UserWordLog]]:
        """Get the logs of every user for words of a class, grouped by user."""
        query = self.db.query(UserWordLog)
        if class_name != ALL_CLASSES:
            query = query.join(Word, Word.word_id == UserWordLog.word_id).filter(
                Word.class_name == class_name
            )

        grouped: Dict[str, List[UserWordLog]] = defaultdict(list)
        for log in query.order_by(UserWordLog.user_id, UserWordLog.word_id).all():
            grouped[log.user_id].append(log)
        return dict(grouped)
