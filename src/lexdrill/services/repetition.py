"""Streak-based repetition rules for grammar questions."""
import logging
from datetime import UTC, date, datetime, timedelta
from typing import Optional, Sequence

from lexdrill.config import settings
from lexdrill.models.models import LearningStatus, QuestionProgress

logger = logging.getLogger(__name__)


def review_interval_days(streak: int, intervals: Optional[Sequence[int]] = None) -> int:
    """Days until the next review for a known question with the given streak.

    Intervals saturate at the last configured entry.
    """
    if intervals is None:
        intervals = settings.scheduler.review_intervals
    index = min(max(streak, 1), len(intervals)) - 1
    return intervals[index]


def advance(
    prior: Optional[QuestionProgress],
    correct: bool,
    now: Optional[datetime] = None,
    intervals: Optional[Sequence[int]] = None,
) -> QuestionProgress:
    """Compute the progress record that follows a graded answer.

    The prior record is never modified; the caller persists the returned one.
    A missing prior is the first attempt. Any miss resets the streak and marks
    the question weak, and a hit after a miss or on an unlearned question
    starts again from a streak of one. The next review date is counted from
    the start of the current day so that repeated reviews on one day do not
    push it further out.
    """
    if now is None:
        now = datetime.now(UTC)
    today: date = now.date()

    if prior is None or prior.status != LearningStatus.KNOWN:
        streak = 1 if correct else 0
    else:
        streak = prior.streak + 1 if correct else 0

    if correct:
        status = LearningStatus.KNOWN
        days = review_interval_days(streak, intervals)
    else:
        status = LearningStatus.WEAK
        days = review_interval_days(1, intervals)

    progress = QuestionProgress(
        status=status,
        streak=streak,
        last_reviewed_at=now,
        next_review_date=today + timedelta(days=days),
    )
    if prior is not None:
        progress.student_id = prior.student_id
        progress.course_id = prior.course_id
        progress.question_id = prior.question_id

    logger.debug(
        f"Advanced question {progress.question_id}: correct={correct}, "
        f"status={status.value}, streak={streak}, next={progress.next_review_date}"
    )
    return progress
