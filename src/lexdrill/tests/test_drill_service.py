"""Tests for the two-phase vocabulary drill."""
import random
from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from lexdrill.models.models import Lecture
from lexdrill.services.drill_service import DrillService, DrillSession, Phase
from lexdrill.services.vocab_store import VocabStore

TODAY = date(2024, 5, 20)


@pytest.fixture
def words(make_word):
    return [make_word(word_id=f"W{i:03d}") for i in range(1, 4)]


@pytest.fixture
def mock_store(mocker, words):
    store = mocker.Mock(spec=VocabStore)
    store.list_words_by_class.return_value = words
    store.list_user_logs.return_value = []
    return store


def test_recognition_hit_moves_to_recall(words) -> None:
    """Test a correct recognition keeps the word and resets the reveal state."""
    session = DrillSession(user_id="student-1", words=words)
    session.reveal()

    result = session.grade(True)

    assert result.outcome is None
    assert result.phase is Phase.RECOGNITION
    assert session.current_word is words[0]
    assert session.phase is Phase.RECALL
    assert session.show_answer is False
    assert session.results == {}


def test_recognition_miss_fails_word(words) -> None:
    """Test a wrong recognition fails the word without a recall attempt."""
    session = DrillSession(user_id="student-1", words=words)

    result = session.grade(False)

    assert result.outcome is False
    assert session.results == {"W001": False}
    assert session.current_word is words[1]
    assert session.phase is Phase.RECOGNITION


@pytest.mark.parametrize("recall_correct", [True, False])
def test_recall_grade_is_final(words, recall_correct: bool) -> None:
    session = DrillSession(user_id="student-1", words=words)
    session.grade(True)

    result = session.grade(recall_correct)

    assert result.phase is Phase.RECALL
    assert result.outcome is recall_correct
    assert session.results == {"W001": recall_correct}
    assert session.current_index == 1


def test_session_completion(words) -> None:
    session = DrillSession(user_id="student-1", words=words)
    session.grade(False)
    session.grade(True)
    session.grade(True)
    assert session.progress == pytest.approx(2 / 3)

    result = session.grade(False)

    assert result.finished is True
    assert session.is_complete
    assert session.current_word is None
    assert session.correct_count == 1
    with pytest.raises(ValueError):
        session.grade(True)
    with pytest.raises(ValueError):
        session.reveal()


def test_empty_session_is_complete() -> None:
    session = DrillSession(user_id="student-1", words=[])
    assert session.is_complete
    assert session.progress == 1.0


def test_start_session_selects_from_class_catalog(mock_store, words) -> None:
    service = DrillService(mock_store, rng=random.Random(1))

    session = service.start_session("student-1", "Standard", "L001", limit=20, today=TODAY)

    mock_store.list_words_by_class.assert_called_once_with("Standard")
    mock_store.list_user_logs.assert_called_once_with("student-1")
    assert sorted(w.word_id for w in session.words) == ["W001", "W002", "W003"]
    assert session.user_id == "student-1"


def test_recognition_miss_records_one_failure(mock_store, words) -> None:
    """Test a word failed at recognition is logged exactly once."""
    service = DrillService(mock_store)
    session = DrillSession(user_id="student-1", words=words)

    service.grade(session, False, today=TODAY)

    mock_store.apply_outcome.assert_called_once_with("student-1", "W001", False, today=TODAY)


def test_recall_records_only_final_outcome(mock_store, words) -> None:
    service = DrillService(mock_store)
    session = DrillSession(user_id="student-1", words=words)

    service.grade(session, True, today=TODAY)
    mock_store.apply_outcome.assert_not_called()

    service.grade(session, True, today=TODAY)
    mock_store.apply_outcome.assert_called_once_with("student-1", "W001", True, today=TODAY)


def test_full_drill_updates_stored_logs(db: Session, lecture: Lecture, make_word) -> None:
    """Test a drill run end to end against the database."""
    store = VocabStore(db)
    store.add_words([make_word(word_id=f"W{i:03d}", lecture_id=lecture.lecture_id) for i in range(1, 4)])
    service = DrillService(store, rng=random.Random(3))

    session = service.start_session("student-1", "Standard", lecture.lecture_id, today=TODAY)
    assert len(session.words) == 3
    first, second, third = (w.word_id for w in session.words)

    service.grade(session, False, today=TODAY)  # fails at recognition
    service.grade(session, True, today=TODAY)
    service.grade(session, True, today=TODAY)  # passes recall
    service.grade(session, True, today=TODAY)
    result = service.grade(session, False, today=TODAY)  # fails recall
    assert result.finished

    logs = {log.word_id: log for log in store.list_user_logs("student-1")}
    assert (logs[first].correct_count, logs[first].wrong_count) == (0, 1)
    assert (logs[second].correct_count, logs[second].wrong_count) == (1, 0)
    assert (logs[third].correct_count, logs[third].wrong_count) == (0, 1)
    assert logs[second].last_correct == TODAY
    assert logs[third].last_correct == date(2000, 1, 1)

    # A second drill the next week starts from the stored logs
    session = service.start_session("student-1", "Standard", lecture.lecture_id, today=TODAY + timedelta(days=8))
    assert len(session.words) == 3


def test_evaluate_leaves_session_untouched(words) -> None:
    session = DrillSession(user_id="student-1", words=words)
    session.reveal()

    result = session.evaluate(False)

    assert result.outcome is False
    assert result.finished is False
    assert session.current_index == 0
    assert session.show_answer is True
    assert session.results == {}


def test_failed_save_keeps_the_card(mock_store, words) -> None:
    """Test a word whose outcome cannot be stored is graded again, not skipped."""
    mock_store.apply_outcome.side_effect = OperationalError("UPDATE", {}, Exception("database is locked"))
    service = DrillService(mock_store)
    session = DrillSession(user_id="student-1", words=words)

    with pytest.raises(OperationalError):
        service.grade(session, False, today=TODAY)

    assert session.current_index == 0
    assert session.phase is Phase.RECOGNITION
    assert session.results == {}

    mock_store.apply_outcome.side_effect = None
    service.grade(session, False, today=TODAY)

    assert session.current_word is words[1]
    assert session.results == {"W001": False}
    assert mock_store.apply_outcome.call_count == 2
    mock_store.apply_outcome.assert_called_with("student-1", "W001", False, today=TODAY)


def test_failed_save_during_recall_stays_in_recall(mock_store, words) -> None:
    mock_store.apply_outcome.side_effect = OperationalError("UPDATE", {}, Exception("disk I/O error"))
    service = DrillService(mock_store)
    session = DrillSession(user_id="student-1", words=words)
    service.grade(session, True, today=TODAY)

    with pytest.raises(OperationalError):
        service.grade(session, True, today=TODAY)

    assert session.current_word is words[0]
    assert session.phase is Phase.RECALL


def test_apply_rejects_stale_result(words) -> None:
    session = DrillSession(user_id="student-1", words=words)
    stale = session.evaluate(False)
    session.grade(False)

    with pytest.raises(ValueError):
        session.apply(stale)
