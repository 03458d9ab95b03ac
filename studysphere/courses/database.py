import secrets
import string
import time
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from studysphere.courses.models import CertificateGrade

_BASE36 = string.digits + string.ascii_uppercase


def serialize_mongo(doc: dict) -> dict:
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc

def serialize_many(docs: List[dict]) -> List[dict]:
    return [serialize_mongo(doc) for doc in docs]

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

# ==================== COURSES ====================

async def get_course(db: AsyncIOMotorDatabase, course_id: str) -> Optional[dict]:
    """Get course by ID"""
    return await db.courses.find_one({"course_id": course_id})

def curriculum_module(course: dict, module_index: int) -> Optional[dict]:
    curriculum = course.get("curriculum") or []
    if 0 <= module_index < len(curriculum):
        return curriculum[module_index]
    return None

def curriculum_lesson(course: dict, module_index: int, lesson_index: int) -> Optional[dict]:
    module = curriculum_module(course, module_index)
    if not module:
        return None
    lessons = module.get("lessons") or []
    if 0 <= lesson_index < len(lessons):
        return lessons[lesson_index]
    return None

def count_lessons(course: dict) -> int:
    return sum(len(section.get("lessons") or []) for section in course.get("curriculum") or [])

# ==================== QUIZZES ====================

def new_quiz_id() -> str:
    return f"QUIZ_{uuid.uuid4().hex[:12].upper()}"

async def create_quiz(db: AsyncIOMotorDatabase, quiz: dict) -> str:
    """Insert one quiz document (fills quiz_id and timestamps when absent)"""
    quiz.setdefault("quiz_id", new_quiz_id())
    now = utcnow()
    quiz.setdefault("created_at", now)
    quiz.setdefault("updated_at", now)
    await db.quizzes.insert_one(quiz)
    return quiz["quiz_id"]

# ==================== ENROLLMENTS ====================

async def get_enrollment(db: AsyncIOMotorDatabase, user_id: str, course_id: str) -> Optional[dict]:
    return await db.enrollments.find_one({"user_id": user_id, "course_id": course_id})

# ==================== CERTIFICATES ====================

def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))

def generate_certificate_id() -> str:
    """CERT-<base36 millis>-<6 random base36 chars>"""
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"CERT-{stamp}-{suffix}"

def grade_for_progress(progress: float) -> str:
    if progress >= 95:
        grade = CertificateGrade.A_PLUS
    elif progress >= 90:
        grade = CertificateGrade.A
    elif progress >= 85:
        grade = CertificateGrade.B_PLUS
    elif progress >= 80:
        grade = CertificateGrade.B
    elif progress >= 75:
        grade = CertificateGrade.C_PLUS
    elif progress >= 70:
        grade = CertificateGrade.C
    else:
        grade = CertificateGrade.PASS
    return grade.value

async def save_certificate(db: AsyncIOMotorDatabase, certificate: dict) -> dict:
    """
    Insert a certificate, filling certificate_id and issue_date first.
    Callers never set the ID themselves.
    """
    if not certificate.get("certificate_id"):
        certificate["certificate_id"] = generate_certificate_id()
    certificate.setdefault("issue_date", utcnow())
    await db.certificates.insert_one(certificate)
    return certificate

async def get_certificate(db: AsyncIOMotorDatabase, certificate_id: str) -> Optional[dict]:
    return await db.certificates.find_one({"certificate_id": certificate_id})

async def get_user_certificate(db: AsyncIOMotorDatabase, user_id: str, course_id: str) -> Optional[dict]:
    return await db.certificates.find_one({"user_id": user_id, "course_id": course_id})

async def list_user_certificates(db: AsyncIOMotorDatabase, user_id: str) -> List[dict]:
    cursor = db.certificates.find({"user_id": user_id}).sort("issue_date", -1)
    return await cursor.to_list(length=None)

async def delete_certificate(db: AsyncIOMotorDatabase, certificate_id: str) -> bool:
    result = await db.certificates.delete_one({"certificate_id": certificate_id})
    return result.deleted_count > 0
