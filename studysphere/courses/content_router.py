import csv
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from motor.motor_asyncio import AsyncIOMotorDatabase

from studysphere.auth import require_roles
from studysphere.config import Settings, get_settings
from studysphere.courses.bulk_import import EmptyImportError, import_quizzes
from studysphere.courses.content_templates import (
    AVAILABLE_TEMPLATES,
    build_course_template,
    generate_questions,
    template_types,
)
from studysphere.courses.database import create_quiz, curriculum_lesson, curriculum_module, get_course
from studysphere.courses.models import AutoGenerateQuizRequest, CourseTemplateRequest, QuizType, UserRole
from studysphere.db import get_db
from studysphere.errors import server_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Content Generation"])

content_author = require_roles(UserRole.INSTRUCTOR.value, UserRole.ADMIN.value)


def _is_csv_upload(upload: UploadFile) -> bool:
    return upload.content_type == "text/csv" or (upload.filename or "").lower().endswith(".csv")


async def _load_owned_course(db: AsyncIOMotorDatabase, course_id: Optional[str], user: dict, action: str) -> dict:
    """Course must exist and belong to the caller unless the caller is an admin"""
    course = await get_course(db, course_id) if course_id else None
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    if user["role"] != UserRole.ADMIN.value and course.get("instructor_id") != user["id"]:
        raise HTTPException(status_code=403, detail=f"Not authorized to {action} for this course")
    return course


# ==================== BULK IMPORT ====================

@router.post("/bulk-import-quizzes")
async def bulk_import_quizzes(
    csv_file: Optional[UploadFile] = File(None, alias="csvFile"),
    course_id: Optional[str] = Form(None, alias="courseId"),
    user: dict = Depends(content_author),
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """
    Import quizzes from a CSV upload. Rows are grouped by quizTitle;
    bad rows and failed inserts are reported in errorDetails.
    """
    if csv_file is None:
        raise HTTPException(status_code=400, detail="Please upload a CSV file")
    if not _is_csv_upload(csv_file):
        raise HTTPException(status_code=400, detail="Only CSV files are allowed")

    course = await _load_owned_course(db, course_id, user, "import quizzes")

    try:
        content = await csv_file.read()
        summary = await import_quizzes(db, content, course, created_by=user["id"])
    except EmptyImportError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (UnicodeDecodeError, csv.Error) as e:
        raise HTTPException(status_code=400, detail=f"Could not read CSV file: {e}")
    except Exception as e:
        return server_error("Failed to import quizzes", e, settings)
    finally:
        await csv_file.close()

    return {
        "success": True,
        "message": f"Successfully imported {summary.imported_count} quizzes",
        "data": summary.to_response_data(),
    }


# ==================== TEMPLATES ====================

@router.get("/templates")
async def get_available_templates(user: dict = Depends(content_author)):
    return {"success": True, "templates": AVAILABLE_TEMPLATES}


@router.post("/course-template")
async def generate_course_template(payload: CourseTemplateRequest, user: dict = Depends(content_author)):
    try:
        template = build_course_template(
            payload.templateType,
            payload.customization or {},
            instructor_id=user["id"],
            instructor_name=user.get("name"),
        )
    except KeyError:
        raise HTTPException(
            status_code=400,
            detail={"message": "Invalid template type", "availableTemplates": template_types()},
        )

    return {
        "success": True,
        "message": "Course template generated successfully",
        "template": template,
    }


# ==================== AUTO-GENERATED QUIZ ====================

@router.post("/auto-generate-quiz", status_code=201)
async def auto_generate_quiz(
    payload: AutoGenerateQuizRequest,
    user: dict = Depends(content_author),
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Build a quiz from the built-in question bank and attach it to the course"""
    course = await _load_owned_course(db, payload.courseId, user, "generate quizzes")

    quiz_type = QuizType.COURSE
    module_title = None
    lesson_title = None
    if payload.moduleIndex is not None:
        quiz_type = QuizType.MODULE
        module = curriculum_module(course, payload.moduleIndex)
        if module:
            module_title = module.get("title")
            lesson = None
            if payload.lessonIndex is not None:
                lesson = curriculum_lesson(course, payload.moduleIndex, payload.lessonIndex)
            if lesson:
                quiz_type = QuizType.LESSON
                lesson_title = lesson.get("title")

    difficulty = payload.difficulty[:1].upper() + payload.difficulty[1:]
    questions = generate_questions(payload.topic, payload.questionCount)
    quiz = {
        "course_id": course["course_id"],
        "quiz_type": quiz_type.value,
        "module_index": payload.moduleIndex,
        "module_title": module_title,
        "lesson_index": payload.lessonIndex,
        "lesson_title": lesson_title,
        "title": f"{payload.topic} - {difficulty} Quiz",
        "description": f"Auto-generated quiz covering {payload.topic} concepts",
        "duration": max(15, payload.questionCount * 1.5),
        "passing_score": 70,
        "max_attempts": 3,
        "questions": questions,
        "is_active": True,
        "created_by": user["id"],
    }

    try:
        quiz_id = await create_quiz(db, quiz)
    except Exception as e:
        return server_error("Failed to generate quiz", e, settings)

    logger.info("🧩 Generated quiz %s (%d questions) for course %s", quiz_id, len(questions), course["course_id"])
    return {
        "success": True,
        "message": "Quiz generated successfully",
        "quiz": {
            "id": quiz_id,
            "title": quiz["title"],
            "questionCount": len(questions),
            "duration": quiz["duration"],
            "quizType": quiz["quiz_type"],
        },
    }
