"""Vocabulary session selection and accuracy-log updates.

A session mixes three pools drawn from the learner's catalog:

* wrong words, most-missed first,
* words from the lecture the learner picked, in shuffled order,
* words not seen for longer than the stale window, stalest first.

Quotas are taken from the wrong and new ratios (40% each by default) with
the old pool absorbing the remainder. Pools may overlap; a word is counted
once, by the first pool that picks it. Short pools are backfilled from the
target lecture and then from the whole catalog.
"""
import logging
import math
import random
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Dict, Iterable, List, Optional, Sequence

from lexdrill.config import settings
from lexdrill.models.models import UserWordLog, Word

logger = logging.getLogger(__name__)


@dataclass
class SessionQuotas:
    """Number of words requested from each pool."""
    wrong: int
    new: int
    old: int

    @classmethod
    def for_limit(
        cls,
        limit: int,
        wrong_ratio: Optional[float] = None,
        new_ratio: Optional[float] = None,
    ) -> "SessionQuotas":
        if wrong_ratio is None:
            wrong_ratio = settings.scheduler.wrong_ratio
        if new_ratio is None:
            new_ratio = settings.scheduler.new_ratio
        wrong = math.floor(limit * wrong_ratio)
        new = math.floor(limit * new_ratio)
        return cls(wrong=wrong, new=new, old=limit - wrong - new)


@dataclass
class SessionPools:
    """Candidate pools in the order they are drawn from."""
    wrong: List[Word] = field(default_factory=list)
    new: List[Word] = field(default_factory=list)
    old: List[Word] = field(default_factory=list)


def index_logs(logs: Iterable[UserWordLog]) -> Dict[str, UserWordLog]:
    """Index logs by word id; the last log for a word wins."""
    return {log.word_id: log for log in logs}


def build_pools(
    catalog: Sequence[Word],
    logs: Iterable[UserWordLog],
    target_lecture_id: str,
    today: Optional[date] = None,
    stale_after_days: Optional[int] = None,
) -> SessionPools:
    """Rank the catalog into the wrong, new and old pools.

    The new pool keeps catalog order here; ``select_session`` shuffles it.
    Ties in the wrong and old pools are broken by word id.
    """
    if today is None:
        today = datetime.now(UTC).date()
    if stale_after_days is None:
        stale_after_days = settings.scheduler.stale_after_days

    logs_by_word = index_logs(logs)

    def wrong_count(word: Word) -> int:
        log = logs_by_word.get(word.word_id)
        return log.wrong_count if log else 0

    wrong = sorted(
        (w for w in catalog if wrong_count(w) > 0),
        key=lambda w: (-wrong_count(w), w.word_id),
    )

    new = [w for w in catalog if w.lecture_id == target_lecture_id]

    # Words without a log are unstudied, not old
    old = sorted(
        (
            w for w in catalog
            if w.word_id in logs_by_word
            and (today - logs_by_word[w.word_id].last_seen).days > stale_after_days
        ),
        key=lambda w: (logs_by_word[w.word_id].last_seen, w.word_id),
    )

    return SessionPools(wrong=wrong, new=new, old=old)


def _fill(selected: Dict[str, Word], source: Iterable[Word], count: int) -> None:
    """Add up to ``count`` words from ``source`` that are not selected yet."""
    added = 0
    for word in source:
        if added >= count:
            break
        if word.word_id not in selected:
            selected[word.word_id] = word
            added += 1


def select_session(
    catalog: Sequence[Word],
    logs: Iterable[UserWordLog],
    target_lecture_id: str,
    limit: Optional[int] = None,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> List[Word]:
    """Choose up to ``limit`` distinct words for a practice session.

    Never raises: when the catalog holds fewer distinct words than ``limit``
    the whole catalog is returned. The result is in random order.
    """
    if limit is None:
        limit = settings.scheduler.session_size
    if rng is None:
        rng = random.Random()

    pools = build_pools(catalog, logs, target_lecture_id, today=today)
    quotas = SessionQuotas.for_limit(limit)

    shuffled_new = list(pools.new)
    rng.shuffle(shuffled_new)

    selected: Dict[str, Word] = {}
    _fill(selected, pools.wrong, quotas.wrong)
    _fill(selected, shuffled_new, quotas.new)
    _fill(selected, pools.old, quotas.old)

    if len(selected) < limit:
        _fill(selected, shuffled_new, limit - len(selected))
    if len(selected) < limit:
        everything = list(catalog)
        rng.shuffle(everything)
        _fill(selected, everything, limit - len(selected))

    words = list(selected.values())
    rng.shuffle(words)

    logger.info(
        f"Selected {len(words)}/{limit} words for lecture {target_lecture_id} "
        f"(pools: wrong={len(pools.wrong)}, new={len(pools.new)}, old={len(pools.old)})"
    )
    return words


def update_log(
    prior: Optional[UserWordLog],
    user_id: str,
    word_id: str,
    correct: bool,
    today: Optional[date] = None,
) -> UserWordLog:
    """Return the log that results from one graded attempt.

    Exactly one counter grows by one. ``last_seen`` always moves to today and
    ``last_correct`` only on a correct answer. The prior log is left untouched.
    """
    if today is None:
        today = datetime.now(UTC).date()

    if prior is None:
        return UserWordLog(
            user_id=user_id,
            word_id=word_id,
            correct_count=1 if correct else 0,
            wrong_count=0 if correct else 1,
            last_seen=today,
            last_correct=today if correct else settings.scheduler.never_correct_date,
        )

    return UserWordLog(
        user_id=prior.user_id,
        word_id=prior.word_id,
        correct_count=prior.correct_count + (1 if correct else 0),
        wrong_count=prior.wrong_count + (0 if correct else 1),
        last_seen=today,
        last_correct=today if correct else prior.last_correct,
    )
