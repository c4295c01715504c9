"""Bulk import of tab-separated words and questions.

Imports are partial: every bad row is reported as a warning with its line
number and skipped, and the good rows are still committed.
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import List

from lexdrill.models.models import Course, Lecture, PartOfSpeech, Question, Word
from lexdrill.monitoring import import_rows
from lexdrill.services.course_service import CourseService
from lexdrill.services.vocab_store import VocabStore

logger = logging.getLogger(__name__)

DEFAULT_POS = PartOfSpeech.VERB


@dataclass
class ImportResult:
    """Outcome of a bulk import."""
    added: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)

    def warn(self, line_no: int, message: str) -> None:
        self.warnings.append(f"Line {line_no}: {message}")

    def skip(self, line_no: int, message: str) -> None:
        self.skipped += 1
        self.warn(line_no, message)


def _rows(text: str):
    for line_no, line in enumerate(text.splitlines(), start=1):
        if line.strip():
            yield line_no, line.split("\t")


def import_words(store: VocabStore, lecture: Lecture, text: str) -> ImportResult:
    """Add words to a lecture from ``word<TAB>meaning[<TAB>pos[<TAB>example]]`` rows."""
    result = ImportResult()
    words: List[Word] = []

    for line_no, parts in _rows(text):
        if len(parts) < 2:
            result.skip(line_no, "expected at least two tab-separated columns")
            continue

        word_text = parts[0].strip()
        meaning = parts[1].strip()
        if not word_text or not meaning:
            result.skip(line_no, "word or meaning is blank")
            continue

        pos = DEFAULT_POS
        if len(parts) >= 3 and parts[2].strip():
            try:
                pos = PartOfSpeech(parts[2].strip().lower())
            except ValueError:
                result.warn(line_no, f"unknown part of speech {parts[2].strip()!r}, using {DEFAULT_POS.value}")

        example = parts[3].strip() if len(parts) >= 4 and parts[3].strip() else None

        words.append(Word(
            word_id=f"W_{uuid.uuid4().hex}",
            class_name=lecture.class_name,
            lecture_id=lecture.lecture_id,
            word=word_text,
            pos=pos,
            meaning=meaning,
            example=example,
            image_prompt=f"{word_text} {meaning}",
        ))

    if words:
        store.add_words(words)
    result.added = len(words)
    _report("words", result)
    return result


def import_questions(course_service: CourseService, course: Course, text: str) -> ImportResult:
    """Add questions to a course from tab-separated rows.

    Rows are ``lecture<TAB>number<TAB>question<TAB>answer[<TAB>comment]`` or
    ``number<TAB>question<TAB>answer``. A blank lecture column repeats the
    lecture of the row above. Duplicate numbers are reported but kept.
    """
    result = ImportResult()
    existing_numbers = {q.number for q in course.questions}
    questions: List[Question] = []
    prev_lecture = ""

    for line_no, parts in _rows(text):
        if len(parts) < 3:
            result.skip(line_no, "not enough tab-separated columns")
            continue

        lecture = comment = ""
        if len(parts) >= 4:
            lecture, number_str, question, answer = (p.strip() for p in parts[:4])
            if len(parts) >= 5:
                comment = parts[4].strip()
        else:
            number_str, question, answer = (p.strip() for p in parts)

        if lecture:
            prev_lecture = lecture
        else:
            lecture = prev_lecture

        try:
            number = int(number_str)
        except ValueError:
            result.skip(line_no, f"invalid question number {number_str!r}")
            continue

        if not question or not answer:
            result.skip(line_no, "question or answer is blank")
            continue

        if number in existing_numbers:
            result.warn(line_no, f"number {number} already exists or is duplicated")
        existing_numbers.add(number)

        questions.append(Question(
            id=str(uuid.uuid4()),
            number=number,
            question=f"[{lecture}] {question}" if lecture else question,
            answer=answer,
            teacher_comment=comment,
        ))

    if questions:
        course.questions.extend(questions)
        course_service.save_course(course)
    result.added = len(questions)
    _report("questions", result)
    return result


def _report(kind: str, result: ImportResult) -> None:
    import_rows.labels(kind=kind, result="added").inc(result.added)
    import_rows.labels(kind=kind, result="skipped").inc(result.skipped)
    for warning in result.warnings:
        logger.warning(f"Import {kind}: {warning}")
    logger.info(f"Imported {result.added} {kind} with {len(result.warnings)} warnings")
