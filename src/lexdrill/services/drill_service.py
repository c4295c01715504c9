"""Two-phase vocabulary drills: recognition, then recall."""
import logging
import random
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import Enum
from typing import Dict, List, Optional

from lexdrill.models.models import Word
from lexdrill.monitoring import answers_recorded, outcome_label, sessions_started, words_selected
from lexdrill.services.spaced_repetition import select_session
from lexdrill.services.vocab_store import VocabStore

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Drill phases for a single word."""
    RECOGNITION = "recognition"  # word -> meaning
    RECALL = "recall"  # meaning -> word


@dataclass
class GradeResult:
    """What a grade did to the session."""
    word: Word
    phase: Phase
    outcome: Optional[bool] = None  # final result for the word, None while it continues
    finished: bool = False


@dataclass
class DrillSession:
    """State of one drill over a fixed list of words.

    A miss during recognition fails the word outright. A hit moves the same
    word on to recall, whose grade is the word's final outcome either way.
    """
    user_id: str
    words: List[Word]
    current_index: int = 0
    phase: Phase = Phase.RECOGNITION
    show_answer: bool = False
    results: Dict[str, bool] = field(default_factory=dict)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.words)

    @property
    def current_word(self) -> Optional[Word]:
        if self.is_complete:
            return None
        return self.words[self.current_index]

    @property
    def progress(self) -> float:
        """Share of words already finished, between 0 and 1."""
        if not self.words:
            return 1.0
        return self.current_index / len(self.words)

    def reveal(self) -> None:
        """Flip the card to show the answer."""
        if self.is_complete:
            raise ValueError("Session is already complete")
        self.show_answer = True

    def evaluate(self, correct: bool) -> GradeResult:
        """Work out what a grade would do to the current word without applying it."""
        word = self.current_word
        if word is None:
            raise ValueError("Session is already complete")

        if self.phase is Phase.RECOGNITION and correct:
            return GradeResult(word=word, phase=self.phase)
        return GradeResult(
            word=word,
            phase=self.phase,
            outcome=correct,
            finished=self.current_index + 1 >= len(self.words),
        )

    def apply(self, result: GradeResult) -> None:
        """Move the session on according to an evaluated grade."""
        if result.word is not self.current_word or result.phase is not self.phase:
            raise ValueError("Grade does not belong to the current card")

        if result.outcome is None:
            self.phase = Phase.RECALL
            self.show_answer = False
            return

        self.results[result.word.word_id] = result.outcome
        self._next_word()

    def grade(self, correct: bool) -> GradeResult:
        """Apply a grade to the current word."""
        result = self.evaluate(correct)
        self.apply(result)
        return result

    def _next_word(self) -> None:
        self.current_index += 1
        self.phase = Phase.RECOGNITION
        self.show_answer = False

    @property
    def correct_count(self) -> int:
        return sum(1 for outcome in self.results.values() if outcome)


class DrillService:
    """Runs vocabulary drills and records their outcomes."""

    def __init__(self, store: VocabStore, rng: Optional[random.Random] = None):
        """Initialize the service with a vocabulary store."""
        self.store = store
        self.rng = rng or random.Random()

    def start_session(
        self,
        user_id: str,
        class_name: str,
        lecture_id: str,
        limit: Optional[int] = None,
        today: Optional[date] = None,
    ) -> DrillSession:
        """Select words for a user and open a drill over them."""
        catalog = self.store.list_words_by_class(class_name)
        logs = self.store.list_user_logs(user_id)
        words = select_session(
            catalog, logs, lecture_id, limit=limit, rng=self.rng, today=today
        )

        sessions_started.labels(kind="vocab").inc()
        words_selected.observe(len(words))
        logger.info(f"Started drill for user {user_id} on lecture {lecture_id} with {len(words)} words")
        return DrillSession(user_id=user_id, words=words)

    def grade(self, session: DrillSession, correct: bool, today: Optional[date] = None) -> GradeResult:
        """Grade the current word and persist its outcome once it is final.

        The session only moves on after the outcome is stored, so a failed
        write leaves the same card up to be graded again.
        """
        result = session.evaluate(correct)
        if result.outcome is not None:
            self.store.apply_outcome(session.user_id, result.word.word_id, result.outcome, today=today)
            answers_recorded.labels(kind="vocab", outcome=outcome_label(result.outcome)).inc()
            logger.debug(
                f"Recorded {outcome_label(result.outcome)} for word {result.word.word_id} "
                f"after {result.phase.value}"
            )
        session.apply(result)
        if result.finished:
            logger.info(
                f"Drill finished for user {session.user_id}: "
                f"{session.correct_count}/{len(session.words)} correct"
            )
        return result
