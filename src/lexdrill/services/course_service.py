"""Service for grammar courses and students' progress through them."""
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy.orm import Session

from lexdrill.models.models import (
    Course,
    LearningStatus,
    Question,
    QuestionProgress,
    StudentCourseProgress,
)
from lexdrill.monitoring import answers_recorded, db_operations, outcome_label, sessions_started
from lexdrill.services.repetition import advance

logger = logging.getLogger(__name__)


class SessionMode(Enum):
    """Which questions a grammar session goes through."""
    NORMAL = "normal"  # every question, by number
    WEAK_ONLY = "weak_only"  # questions last answered wrong
    DUE = "due"  # unseen questions and those due for review


@dataclass
class CourseSummary:
    """Mastery counts for one student in one course."""
    total_questions: int
    known_count: int
    weak_count: int

    @property
    def unlearned_count(self) -> int:
        return self.total_questions - self.known_count - self.weak_count


class CourseService:
    """Service for managing courses and grammar progress."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def list_courses(self) -> List[Course]:
        """Get all courses, oldest first."""
        return self.db.query(Course).order_by(Course.created_at, Course.id).all()

    def get_course(self, course_id: str) -> Optional[Course]:
        """Get a course by its ID."""
        return self.db.get(Course, course_id)

    def save_course(self, course: Course) -> Course:
        """Insert a course or replace the stored one with the same ID."""
        course.questions.sort(key=lambda q: q.number)
        merged = self.db.merge(course)
        self.db.commit()
        db_operations.labels(operation_type="save_course").inc()
        return merged

    def delete_course(self, course_id: str) -> bool:
        """Delete a course together with all progress recorded on it."""
        course = self.get_course(course_id)
        if not course:
            return False

        for progress in self.db.query(StudentCourseProgress).filter(
            StudentCourseProgress.course_id == course_id
        ):
            self.db.delete(progress)
        self.db.delete(course)
        self.db.commit()
        db_operations.labels(operation_type="delete_course").inc()
        return True

    def get_progress(self, student_id: str, course_id: str) -> Optional[StudentCourseProgress]:
        """Get a student's progress on a course, if any."""
        return self.db.get(StudentCourseProgress, (student_id, course_id))

    def get_or_create_progress(self, student_id: str, course_id: str) -> StudentCourseProgress:
        """Get a student's progress on a course, creating an empty one if needed."""
        progress = self.get_progress(student_id, course_id)
        if progress:
            return progress

        if not self.get_course(course_id):
            raise ValueError(f"Course {course_id} not found")

        progress = StudentCourseProgress(
            student_id=student_id,
            course_id=course_id,
            total_time_ms=0,
        )
        self.db.add(progress)
        self.db.commit()
        logger.info(f"Created progress for student {student_id} on course {course_id}")
        return progress

    def build_queue(
        self,
        student_id: str,
        course_id: str,
        mode: SessionMode = SessionMode.NORMAL,
        now: Optional[datetime] = None,
    ) -> List[Question]:
        """Get the questions for a grammar session in the order they are asked.

        An empty list means there is nothing to practise in this mode.
        """
        course = self.get_course(course_id)
        if not course:
            raise ValueError(f"Course {course_id} not found")
        progress = self.get_or_create_progress(student_id, course_id)
        states = progress.question_progress

        questions = sorted(course.questions, key=lambda q: q.number)
        if mode is SessionMode.WEAK_ONLY:
            questions = [
                q for q in questions
                if q.id in states and states[q.id].status == LearningStatus.WEAK
            ]
        elif mode is SessionMode.DUE:
            today = (now or datetime.now(UTC)).date()
            questions = [
                q for q in questions
                if q.id not in states
                or states[q.id].next_review_date is None
                or states[q.id].next_review_date <= today
            ]

        sessions_started.labels(kind="grammar").inc()
        logger.info(
            f"Built {mode.value} queue of {len(questions)} questions "
            f"for student {student_id} on course {course_id}"
        )
        return questions

    def record_answer(
        self,
        student_id: str,
        course_id: str,
        question_id: str,
        correct: bool,
        time_spent_ms: int = 0,
        now: Optional[datetime] = None,
    ) -> QuestionProgress:
        """Grade a question for a student and store the resulting progress."""
        course = self.get_course(course_id)
        if not course:
            raise ValueError(f"Course {course_id} not found")
        if not any(q.id == question_id for q in course.questions):
            raise ValueError(f"Question {question_id} not found in course {course_id}")

        progress = self.get_or_create_progress(student_id, course_id)
        prior = progress.question_progress.get(question_id)

        state = advance(prior, correct, now=now)
        if prior is None:
            state.student_id = student_id
            state.course_id = course_id
            state.question_id = question_id
            progress.question_progress[question_id] = state
        else:
            prior.status = state.status
            prior.streak = state.streak
            prior.last_reviewed_at = state.last_reviewed_at
            prior.next_review_date = state.next_review_date
            state = prior

        progress.total_time_ms += max(time_spent_ms, 0)
        self.db.commit()

        answers_recorded.labels(kind="grammar", outcome=outcome_label(correct)).inc()
        return state

    def summarize(self, student_id: str, course_id: str) -> CourseSummary:
        """Count known and weak questions of a course for a student."""
        course = self.get_course(course_id)
        if not course:
            raise ValueError(f"Course {course_id} not found")

        progress = self.get_progress(student_id, course_id)
        states = progress.question_progress if progress else {}

        known = weak = 0
        for question in course.questions:
            state = states.get(question.id)
            if state is None:
                continue
            if state.status == LearningStatus.KNOWN:
                known += 1
            elif state.status == LearningStatus.WEAK:
                weak += 1

        return CourseSummary(
            total_questions=len(course.questions),
            known_count=known,
            weak_count=weak,
        )
