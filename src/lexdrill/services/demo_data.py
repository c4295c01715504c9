"""Demo lectures, words and courses for a fresh database."""
import logging

from sqlalchemy.orm import Session

from lexdrill.models.models import Course, Lecture, PartOfSpeech, Question, Word

logger = logging.getLogger(__name__)

DEMO_CLASS = "Standard"

DEMO_LECTURES = [
    {"lecture_id": "L001", "lecture_name": "Unit 1: Basic Verbs", "order": 1},
    {"lecture_id": "L002", "lecture_name": "Unit 2: Daily Life", "order": 2},
]

DEMO_WORDS = [
    {
        "word_id": "W001", "lecture_id": "L001", "word": "accept", "pos": PartOfSpeech.VERB,
        "meaning": "受け入れる", "etymology": "ad(to) + capere(take)", "derivation": "acceptance",
        "example": "Please accept my apology.", "image_prompt": "A person receiving a gift with a smile",
    },
    {
        "word_id": "W002", "lecture_id": "L001", "word": "reject", "pos": PartOfSpeech.VERB,
        "meaning": "拒絶する", "etymology": "re(back) + jacere(throw)", "derivation": "rejection",
        "example": "He rejected the offer.", "image_prompt": "A person pushing away a contract paper",
    },
    {
        "word_id": "W003", "lecture_id": "L001", "word": "consider", "pos": PartOfSpeech.VERB,
        "meaning": "よく考える", "etymology": "con(with) + sider(star)", "derivation": "consideration",
        "example": "We will consider your proposal.",
        "image_prompt": "A person thinking deeply looking at a star chart",
    },
    {
        "word_id": "W004", "lecture_id": "L002", "word": "habit", "pos": PartOfSpeech.NOUN,
        "meaning": "習慣", "etymology": "habere(have)", "derivation": "habitual",
        "example": "Early rising is a good habit.", "image_prompt": "A person jogging in the morning park",
    },
]

DEMO_COURSES = [
    {
        "id": "demo-course-1",
        "title": "Junior High English Grammar (Sample)",
        "questions": [
            ("q1", 1, "This is a pen.", "これはペンです。", "Basic sentence pattern"),
            ("q2", 2, "I play soccer.", "私はサッカーをします。", "Regular verbs"),
            ("q3", 3, "She is happy.", "彼女は幸せです。", "Be-verbs"),
        ],
    },
    {
        "id": "demo-course-2",
        "title": "English Vocabulary Target (Sample)",
        "questions": [
            ("w1", 1, "Apple", "りんご", ""),
            ("w2", 2, "Run", "走る", ""),
            ("w3", 3, "Beautiful", "美しい", ""),
        ],
    },
]


def seed_demo_data(db: Session) -> bool:
    """Insert the demo content unless lectures or courses already exist."""
    if db.query(Lecture).count() or db.query(Course).count():
        logger.info("Database already has content, skipping demo data")
        return False

    db.add_all(Lecture(class_name=DEMO_CLASS, **lecture) for lecture in DEMO_LECTURES)
    db.add_all(Word(class_name=DEMO_CLASS, **word) for word in DEMO_WORDS)
    for course in DEMO_COURSES:
        db.add(Course(
            id=course["id"],
            title=course["title"],
            questions=[
                Question(id=qid, number=number, question=question, answer=answer, teacher_comment=comment)
                for qid, number, question, answer, comment in course["questions"]
            ],
        ))
    db.commit()

    logger.info(
        f"Seeded {len(DEMO_LECTURES)} lectures, {len(DEMO_WORDS)} words "
        f"and {len(DEMO_COURSES)} courses"
    )
    return True
