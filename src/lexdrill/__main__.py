"""Command line entry point."""
import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from lexdrill.config import settings
from lexdrill.logging_config import setup_logging
from lexdrill.models.base import SessionLocal, init_db
from lexdrill.monitoring import start_monitoring
from lexdrill.services.course_service import CourseService, SessionMode
from lexdrill.services.demo_data import seed_demo_data
from lexdrill.services.drill_service import DrillService, Phase
from lexdrill.services.import_service import import_questions, import_words
from lexdrill.services.stats_service import WEAK_WORDS_SHOWN, class_overview
from lexdrill.services.vocab_store import VocabStore

logger = logging.getLogger(__name__)


def _ask(prompt: str) -> bool:
    while True:
        answer = input(f"{prompt} [y/n] ").strip().lower()
        if answer in ("y", "n"):
            return answer == "y"


def cmd_init_db(args, db) -> None:
    logger.info("Database initialized")


def cmd_seed_demo(args, db) -> None:
    seed_demo_data(db)


def cmd_import_words(args, db) -> None:
    store = VocabStore(db)
    lecture = store.get_lecture(args.lecture_id)
    if not lecture:
        raise ValueError(f"Lecture {args.lecture_id} not found")
    result = import_words(store, lecture, Path(args.file).read_text(encoding="utf-8"))
    print(f"Added {result.added} words, skipped {result.skipped}")
    for warning in result.warnings:
        print(f"  {warning}")


def cmd_import_questions(args, db) -> None:
    course_service = CourseService(db)
    course = course_service.get_course(args.course_id)
    if not course:
        raise ValueError(f"Course {args.course_id} not found")
    result = import_questions(course_service, course, Path(args.file).read_text(encoding="utf-8"))
    print(f"Added {result.added} questions, skipped {result.skipped}")
    for warning in result.warnings:
        print(f"  {warning}")


def cmd_stats(args, db) -> None:
    overview = class_overview(VocabStore(db), args.class_name, weak_words_shown=WEAK_WORDS_SHOWN)
    summary = overview.get(args.user_id)
    if summary is None:
        print(f"No practice recorded for {args.user_id} in {args.class_name}")
        return
    print(f"Accuracy: {summary.accuracy}% over {summary.total_attempts} attempts")
    print(f"Mastered words: {summary.mastered_count}")
    for weak in summary.weak_words:
        print(f"  {weak.word} ({weak.meaning or '?'}): {weak.wrong_count} wrong")


def cmd_drill(args, db) -> None:
    service = DrillService(VocabStore(db))
    session = service.start_session(args.user_id, args.class_name, args.lecture_id, limit=args.limit)
    while not session.is_complete:
        word = session.current_word
        if session.phase is Phase.RECOGNITION:
            prompt, answer = word.word, word.meaning
        else:
            prompt, answer = word.meaning, word.word
        print(f"\n[{session.current_index + 1}/{len(session.words)}] {session.phase.value}: {prompt}")
        input("Press Enter to show the answer...")
        session.reveal()
        print(f"  -> {answer}")
        service.grade(session, _ask("Correct?"))
    print(f"\nDone: {session.correct_count}/{len(session.words)} correct")


def cmd_learn(args, db) -> None:
    service = CourseService(db)
    queue = service.build_queue(args.user_id, args.course_id, SessionMode(args.mode))
    if not queue:
        print("Nothing to practise in this mode")
        return
    correct_total = 0
    for question in queue:
        started = time.monotonic()
        print(f"\nQ{question.number}: {question.question}")
        input("Press Enter to show the answer...")
        print(f"  -> {question.answer}")
        correct = _ask("Did you know it?")
        service.record_answer(
            args.user_id, args.course_id, question.id, correct,
            time_spent_ms=int((time.monotonic() - started) * 1000),
        )
        if correct:
            correct_total += 1
        elif question.teacher_comment:
            print(f"  Note: {question.teacher_comment}")
    print(f"\nDone: {correct_total}/{len(queue)} known")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lexdrill", description="Vocabulary and grammar drills")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="create the database tables").set_defaults(func=cmd_init_db)
    subparsers.add_parser("seed-demo", help="load demo lectures and courses").set_defaults(func=cmd_seed_demo)

    p = subparsers.add_parser("import-words", help="import tab-separated words into a lecture")
    p.add_argument("lecture_id")
    p.add_argument("file")
    p.set_defaults(func=cmd_import_words)

    p = subparsers.add_parser("import-questions", help="import tab-separated questions into a course")
    p.add_argument("course_id")
    p.add_argument("file")
    p.set_defaults(func=cmd_import_questions)

    p = subparsers.add_parser("stats", help="show a student's vocabulary statistics")
    p.add_argument("user_id")
    p.add_argument("class_name")
    p.set_defaults(func=cmd_stats)

    p = subparsers.add_parser("drill", help="run a vocabulary drill")
    p.add_argument("user_id")
    p.add_argument("class_name")
    p.add_argument("lecture_id")
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(func=cmd_drill)

    p = subparsers.add_parser("learn", help="practise a grammar course")
    p.add_argument("user_id")
    p.add_argument("course_id")
    p.add_argument("--mode", choices=[m.value for m in SessionMode], default=SessionMode.NORMAL.value)
    p.set_defaults(func=cmd_learn)

    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("Starting lexdrill ...")

    if settings.metrics.enabled:
        start_monitoring(settings.metrics.port)

    init_db()
    db = SessionLocal()
    try:
        args.func(args, db)
    except ValueError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
        return 130
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(run())
