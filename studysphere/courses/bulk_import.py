"""
Bulk CSV quiz importer

Expected columns:
    quizTitle, quizType, moduleIndex, lessonIndex, duration, passingScore,
    questionText, questionType, option1..option4, correctAnswer, explanation, points

Each row is one question. Rows sharing a quizTitle become one quiz, in the
order the titles first appear. A bad row is reported and skipped; each quiz
is written on its own, so one failed insert does not undo the others.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from studysphere.courses.database import create_quiz, curriculum_lesson, curriculum_module
from studysphere.courses.models import OptionDraft, QuestionDraft, QuestionType, QuizDraft, QuizType

logger = logging.getLogger(__name__)

OPTION_COLUMNS = ("option1", "option2", "option3", "option4")
MAX_ERROR_DETAILS = 10


class RowError(ValueError):
    """A single CSV row cannot become a question"""


class EmptyImportError(ValueError):
    """The upload has no data rows"""


@dataclass
class ImportSummary:
    imported_count: int = 0
    error_count: int = 0
    created_quizzes: List[dict] = field(default_factory=list)
    error_details: List[str] = field(default_factory=list)

    def to_response_data(self) -> dict:
        return {
            "imported": self.imported_count,
            "errors": self.error_count,
            "errorDetails": self.error_details[:MAX_ERROR_DETAILS],
            "quizzes": self.created_quizzes,
        }


# ==================== PARSING ====================

def read_csv_rows(content: bytes) -> List[Dict[str, str]]:
    """Decode the upload and return rows keyed by stripped header names"""
    text = content.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text))
    rows = []
    for raw in reader:
        row = {key.strip(): (value or "").strip() for key, value in raw.items() if isinstance(key, str)}
        if any(row.values()):
            rows.append(row)
    return rows


def _int_field(row: Dict[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = row.get(name, "")
    if raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RowError(f"Invalid {name}: {raw!r} is not a whole number")


def parse_question_row(row: Dict[str, str], course: dict) -> Tuple[QuizDraft, QuestionDraft]:
    """Map one CSV row to (quiz-level fields, question)"""
    quiz_title = row.get("quizTitle", "")
    question_text = row.get("questionText", "")
    if not quiz_title or not question_text:
        raise RowError("Quiz title and question text are required")

    quiz_type_raw = row.get("quizType") or QuizType.COURSE.value
    if quiz_type_raw not in {t.value for t in QuizType}:
        raise RowError(f"Invalid quiz type: {quiz_type_raw}")
    quiz_type = QuizType(quiz_type_raw)

    question_type_raw = row.get("questionType") or QuestionType.MULTIPLE_CHOICE.value
    if question_type_raw not in {t.value for t in QuestionType}:
        raise RowError(f"Invalid question type: {question_type_raw}")

    module_index = _int_field(row, "moduleIndex", None)
    lesson_index = _int_field(row, "lessonIndex", None)
    duration = _int_field(row, "duration", 30)
    passing_score = _int_field(row, "passingScore", 70)
    points = _int_field(row, "points", 1)

    module_title = None
    lesson_title = None
    if quiz_type == QuizType.MODULE and module_index is not None:
        module = curriculum_module(course, module_index)
        if not module:
            raise RowError(f"Invalid module index: {module_index}")
        module_title = module.get("title")

    if quiz_type == QuizType.LESSON and module_index is not None and lesson_index is not None:
        lesson = curriculum_lesson(course, module_index, lesson_index)
        if not lesson:
            raise RowError(f"Invalid lesson index: {module_index}.{lesson_index}")
        module_title = curriculum_module(course, module_index).get("title")
        lesson_title = lesson.get("title")

    correct_answer = row.get("correctAnswer", "")
    options = []
    for number, column in enumerate(OPTION_COLUMNS, start=1):
        text = row.get(column, "")
        if text:
            options.append(OptionDraft(text=text, is_correct=correct_answer in (str(number), text)))

    if len(options) < 2:
        raise RowError("At least 2 non-empty options are required")
    if not any(option.is_correct for option in options):
        raise RowError("No correct answer specified")

    question = QuestionDraft(
        text=question_text,
        type=QuestionType(question_type_raw),
        options=options,
        correct_answer=correct_answer,
        explanation=row.get("explanation", ""),
        points=points,
    )
    quiz = QuizDraft(
        title=quiz_title,
        type=quiz_type,
        module_index=module_index,
        module_title=module_title,
        lesson_index=lesson_index,
        lesson_title=lesson_title,
        duration=duration,
        passing_score=passing_score,
    )
    return quiz, question


def group_rows(rows: List[Dict[str, str]], course: dict) -> Tuple[List[QuizDraft], List[str]]:
    """
    Fold valid rows into one draft per quiz title, keeping first-seen order.
    Quiz-level fields come from the first valid row of each title.
    """
    drafts: Dict[str, QuizDraft] = {}
    errors: List[str] = []

    for row_number, row in enumerate(rows, start=1):
        try:
            header, question = parse_question_row(row, course)
        except RowError as e:
            errors.append(f"Row {row_number}: {e}")
            continue

        draft = drafts.get(header.title)
        if draft is None:
            header.questions.append(question)
            drafts[header.title] = header
            continue

        if (draft.duration, draft.passing_score) != (header.duration, header.passing_score):
            logger.warning(
                "Row %d: quiz %r settings differ from its first row, keeping duration=%d passingScore=%d",
                row_number, draft.title, draft.duration, draft.passing_score,
            )
        draft.questions.append(question)

    return list(drafts.values()), errors


# ==================== PERSISTENCE ====================

def build_quiz_document(draft: QuizDraft, course_id: str, created_by: str) -> dict:
    return {
        "course_id": course_id,
        "quiz_type": draft.type.value,
        "module_index": draft.module_index,
        "module_title": draft.module_title,
        "lesson_index": draft.lesson_index,
        "lesson_title": draft.lesson_title,
        "title": draft.title,
        "duration": draft.duration,
        "passing_score": draft.passing_score,
        "max_attempts": 3,
        "questions": [
            {
                "question": q.text,
                "type": q.type.value,
                "options": [{"text": o.text, "is_correct": o.is_correct} for o in q.options],
                "correct_answer": q.correct_answer,
                "explanation": q.explanation,
                "points": q.points,
            }
            for q in draft.questions
        ],
        "is_active": True,
        "created_by": created_by,
    }


async def import_quizzes(
    db: AsyncIOMotorDatabase,
    content: bytes,
    course: dict,
    created_by: str,
) -> ImportSummary:
    rows = read_csv_rows(content)
    if not rows:
        raise EmptyImportError("CSV file contains no quiz rows")

    drafts, errors = group_rows(rows, course)
    summary = ImportSummary()

    for draft in drafts:
        document = build_quiz_document(draft, course["course_id"], created_by)
        try:
            quiz_id = await create_quiz(db, document)
        except PyMongoError as e:
            logger.warning("Failed to create quiz %r: %s", draft.title, e)
            errors.append(f'Failed to create quiz "{draft.title}": {e}')
            continue

        summary.created_quizzes.append({
            "id": quiz_id,
            "title": draft.title,
            "questionCount": len(draft.questions),
        })

    summary.imported_count = len(summary.created_quizzes)
    summary.error_details = errors
    summary.error_count = len(errors)
    logger.info(
        "📥 Imported %d quizzes for course %s (%d errors)",
        summary.imported_count, course["course_id"], summary.error_count,
    )
    return summary
