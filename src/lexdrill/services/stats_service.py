"""Accuracy statistics for students and classes."""
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from lexdrill.models.models import UserWordLog, Word
from lexdrill.services.vocab_store import VocabStore

WEAK_WORDS_SHOWN = 5
CLASS_WEAK_WORDS_SHOWN = 3


@dataclass
class WeakWord:
    word_id: str
    word: str
    meaning: Optional[str]
    wrong_count: int


@dataclass
class StudentSummary:
    """Aggregated vocabulary statistics for one student."""
    user_id: str
    accuracy: int  # percent, rounded
    total_attempts: int
    mastered_count: int  # words answered correctly at least once
    practiced_today: bool
    weak_words: List[WeakWord] = field(default_factory=list)


def student_summary(
    user_id: str,
    logs: Sequence[UserWordLog],
    catalog: Iterable[Word],
    today: Optional[date] = None,
    weak_words_shown: int = WEAK_WORDS_SHOWN,
) -> StudentSummary:
    """Summarize a student's logs. Words missing from the catalog show their id."""
    if today is None:
        today = datetime.now(UTC).date()

    total_correct = sum(log.correct_count for log in logs)
    total_attempts = sum(log.attempts for log in logs)
    accuracy = round(total_correct / total_attempts * 100) if total_attempts else 0

    words_by_id = {w.word_id: w for w in catalog}
    weak_logs = sorted(
        (log for log in logs if log.wrong_count > 0),
        key=lambda log: (-log.wrong_count, log.word_id),
    )[:weak_words_shown]
    weak_words = []
    for log in weak_logs:
        word = words_by_id.get(log.word_id)
        weak_words.append(WeakWord(
            word_id=log.word_id,
            word=word.word if word else log.word_id,
            meaning=word.meaning if word else None,
            wrong_count=log.wrong_count,
        ))

    return StudentSummary(
        user_id=user_id,
        accuracy=accuracy,
        total_attempts=total_attempts,
        mastered_count=sum(1 for log in logs if log.correct_count > 0),
        practiced_today=any(log.last_seen == today for log in logs),
        weak_words=weak_words,
    )


def class_overview(
    store: VocabStore,
    class_name: str,
    today: Optional[date] = None,
    weak_words_shown: int = CLASS_WEAK_WORDS_SHOWN,
) -> Dict[str, StudentSummary]:
    """Summarize every student with logs on the words of a class.

    The class view lists fewer weak words per student than a student's own view.
    """
    catalog = store.list_words_by_class(class_name)
    return {
        user_id: student_summary(user_id, logs, catalog, today=today, weak_words_shown=weak_words_shown)
        for user_id, logs in store.get_all_student_logs(class_name).items()
    }
