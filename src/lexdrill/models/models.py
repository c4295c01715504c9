"""Database models for vocabulary and grammar practice."""
import enum

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import attribute_keyed_dict, relationship

from lexdrill.models.base import Base, TimestampMixin


class PartOfSpeech(str, enum.Enum):
    """Parts of speech a vocabulary word can be tagged with."""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PREPOSITION = "preposition"
    CONJUNCTION = "conjunction"
    PRONOUN = "pronoun"
    INTERJECTION = "interjection"
    PHRASE = "phrase"


class LearningStatus(str, enum.Enum):
    """Mastery state of a grammar question."""

    UNLEARNED = "unlearned"
    KNOWN = "known"
    WEAK = "weak"


class Lecture(Base, TimestampMixin):
    """Named grouping of vocabulary words within a class."""

    __tablename__ = "lectures"

    lecture_id = Column(String, primary_key=True)
    class_name = Column(String, nullable=False, index=True)
    lecture_name = Column(String, nullable=False)
    order = Column(Integer, nullable=False, default=0)

    # Relationships
    words = relationship("Word", back_populates="lecture")


class Word(Base, TimestampMixin):
    """Vocabulary catalog entry."""

    __tablename__ = "words"

    word_id = Column(String, primary_key=True)
    class_name = Column(String, nullable=False, index=True)
    lecture_id = Column(String, ForeignKey("lectures.lecture_id"), nullable=False, index=True)
    word = Column(String, nullable=False)
    pos = Column(Enum(PartOfSpeech), nullable=False, default=PartOfSpeech.VERB)
    meaning = Column(String, nullable=False)
    etymology = Column(String)
    derivation = Column(String)
    example = Column(Text)
    pronunciation = Column(String)  # IPA or plain text for TTS
    image_prompt = Column(String)

    # Relationships
    lecture = relationship("Lecture", back_populates="words")

    def __repr__(self) -> str:
        return f"<Word {self.word_id} {self.word!r}>"


class UserWordLog(Base):
    """Per-user accuracy counters for a single word.

    Logs are keyed by (user_id, word_id) and outlive the catalog entry they
    refer to.
    """

    __tablename__ = "user_word_logs"

    user_id = Column(String, primary_key=True)
    word_id = Column(String, primary_key=True)
    correct_count = Column(Integer, nullable=False, default=0)
    wrong_count = Column(Integer, nullable=False, default=0)
    last_seen = Column(Date, nullable=False)
    last_correct = Column(Date, nullable=False)

    @property
    def attempts(self) -> int:
        return self.correct_count + self.wrong_count

    def __repr__(self) -> str:
        return (
            f"<UserWordLog {self.user_id}/{self.word_id} "
            f"+{self.correct_count} -{self.wrong_count} seen={self.last_seen}>"
        )


class Course(Base, TimestampMixin):
    """Grammar course: an ordered list of questions."""

    __tablename__ = "courses"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)

    # Relationships
    questions = relationship(
        "Question",
        back_populates="course",
        order_by="Question.number",
        cascade="all, delete-orphan",
    )


class Question(Base):
    """Single grammar question with its model answer."""

    __tablename__ = "questions"

    id = Column(String, primary_key=True)
    course_id = Column(String, ForeignKey("courses.id"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    question = Column(Text, nullable=False)
    answer = Column(Text, nullable=False)
    teacher_comment = Column(Text)

    # Relationships
    course = relationship("Course", back_populates="questions")


class StudentCourseProgress(Base, TimestampMixin):
    """A student's progress through one course."""

    __tablename__ = "student_course_progress"

    student_id = Column(String, primary_key=True)
    course_id = Column(String, ForeignKey("courses.id"), primary_key=True)
    total_time_ms = Column(Integer, nullable=False, default=0)

    # Relationships
    question_progress = relationship(
        "QuestionProgress",
        collection_class=attribute_keyed_dict("question_id"),
        cascade="all, delete-orphan",
    )


class QuestionProgress(Base):
    """Mastery state of one question for one student."""

    __tablename__ = "question_progress"
    __table_args__ = (
        ForeignKeyConstraint(
            ["student_id", "course_id"],
            ["student_course_progress.student_id", "student_course_progress.course_id"],
        ),
    )

    student_id = Column(String, primary_key=True)
    course_id = Column(String, primary_key=True)
    question_id = Column(String, primary_key=True)
    status = Column(Enum(LearningStatus), nullable=False, default=LearningStatus.UNLEARNED)
    streak = Column(Integer, nullable=False, default=0)
    last_reviewed_at = Column(DateTime(timezone=True))
    next_review_date = Column(Date)

    def __repr__(self) -> str:
        return (
            f"<QuestionProgress {self.question_id} {self.status.value} "
            f"streak={self.streak} next={self.next_review_date}>"
        )
