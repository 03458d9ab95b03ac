import io
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from PIL import Image, ImageDraw, ImageFont
from pymongo.errors import DuplicateKeyError

from studysphere.auth import get_current_user, require_roles
from studysphere.config import Settings, get_settings
from studysphere.courses.database import (
    count_lessons,
    delete_certificate,
    get_certificate,
    get_course,
    get_enrollment,
    get_user_certificate,
    grade_for_progress,
    list_user_certificates,
    save_certificate,
    serialize_many,
    serialize_mongo,
    utcnow,
)
from studysphere.courses.models import EnrollmentStatus, UserRole
from studysphere.db import get_db
from studysphere.errors import server_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Certificates"])

admin_only = require_roles(UserRole.ADMIN.value)

FONT_DIR = "/usr/share/fonts/truetype/dejavu"


# ==================== CERTIFICATE IMAGE GENERATION ====================

def _load_fonts():
    try:
        return (
            ImageFont.truetype(f"{FONT_DIR}/DejaVuSerif-Bold.ttf", 80),
            ImageFont.truetype(f"{FONT_DIR}/DejaVuSerif.ttf", 40),
            ImageFont.truetype(f"{FONT_DIR}/DejaVuSans.ttf", 36),
            ImageFont.truetype(f"{FONT_DIR}/DejaVuSans.ttf", 28),
        )
    except OSError:
        default = ImageFont.load_default()
        return default, default, default, default


def generate_certificate_image(certificate: dict) -> bytes:
    """Render a certificate document as a 1920x1080 PNG"""
    width, height = 1920, 1080
    img = Image.new("RGB", (width, height), color="white")
    draw = ImageDraw.Draw(img)
    primary_color = (41, 128, 185)
    secondary_color = (52, 73, 94)
    gold_color = (241, 196, 15)
    draw.rectangle([50, 50, width - 50, height - 50], outline=primary_color, width=10)
    draw.rectangle([70, 70, width - 70, height - 70], outline=gold_color, width=3)
    title_font, subtitle_font, text_font, small_font = _load_fonts()

    def centered(text, font, y, fill):
        bbox = draw.textbbox((0, 0), text, font=font)
        draw.text(((width - (bbox[2] - bbox[0])) / 2, y), text, fill=fill, font=font)

    metadata = certificate.get("metadata") or {}
    completion_date = certificate.get("completion_date")
    issued = completion_date.strftime("%B %d, %Y") if isinstance(completion_date, datetime) else str(completion_date)

    centered("CERTIFICATE OF COMPLETION", title_font, 120, primary_color)
    centered("This is to certify that", subtitle_font, 240, secondary_color)
    centered(certificate.get("student_name") or "Student", title_font, 320, gold_color)
    centered("has successfully completed the course", text_font, 450, secondary_color)
    centered(certificate.get("course_title") or "Course", title_font, 520, primary_color)
    centered(
        f"Grade: {certificate.get('grade', 'Pass')}  |  Lessons: "
        f"{metadata.get('completed_lessons', 0)}/{metadata.get('total_lessons', 0)}",
        text_font, 650, gold_color,
    )
    centered(f"Instructor: {metadata.get('instructor_name', 'Unknown Instructor')}", small_font, 730, secondary_color)
    centered(f"Issued on: {issued}", small_font, 790, secondary_color)
    centered(f"Certificate ID: {certificate['certificate_id']}", small_font, 870, secondary_color)
    draw.line([(width // 2 - 200, 950), (width // 2 + 200, 950)], fill=secondary_color, width=2)
    centered("Authorized Signature", small_font, 960, secondary_color)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return buf.getvalue()


# ==================== ENDPOINTS ====================

@router.get("/verify/{certificate_id}")
async def verify_certificate(certificate_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    """Public lookup used by the verification page"""
    certificate = await get_certificate(db, certificate_id)
    if not certificate:
        return JSONResponse(
            status_code=404,
            content={"success": False, "message": "Certificate not found or invalid", "valid": False},
        )
    return {"success": True, "valid": True, "data": serialize_mongo(certificate)}


def _already_issued(certificate: dict) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=jsonable_encoder({
            "success": True,
            "message": "Certificate already exists",
            "data": serialize_mongo(certificate),
        }),
    )


@router.post("/generate/{course_id}", status_code=201)
async def generate_certificate(
    course_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Issue a certificate for a completed enrollment (idempotent per user and course)"""
    enrollment = await get_enrollment(db, user["id"], course_id)
    if not enrollment:
        raise HTTPException(status_code=404, detail="Enrollment not found")
    if enrollment.get("status") != EnrollmentStatus.COMPLETED.value:
        raise HTTPException(status_code=400, detail="Course must be completed to generate certificate")

    existing = await get_user_certificate(db, user["id"], course_id)
    if existing:
        return _already_issued(existing)

    course = await get_course(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")

    total_lessons = count_lessons(course)
    completed_lessons = enrollment.get("completed_lessons") or []
    certificate = {
        "user_id": user["id"],
        "student_name": user.get("name"),
        "course_id": course_id,
        "course_title": course.get("title"),
        "completion_date": enrollment.get("completed_at") or utcnow(),
        "grade": grade_for_progress(enrollment.get("progress", 0)),
        "verification_url": f"{settings.frontend_url}/verify-certificate",
        "metadata": {
            "course_duration": course.get("duration"),
            "total_lessons": total_lessons,
            "completed_lessons": len(completed_lessons) or total_lessons,
            "instructor_name": course.get("instructor") or "Unknown Instructor",
        },
    }

    try:
        certificate = await save_certificate(db, certificate)
    except DuplicateKeyError as e:
        # a concurrent request issued it between the lookup and the insert
        existing = await get_user_certificate(db, user["id"], course_id)
        if existing:
            return _already_issued(existing)
        return server_error("Server error", e, settings)
    except Exception as e:
        return server_error("Server error", e, settings)

    logger.info("🎓 Issued certificate %s to %s for %s", certificate["certificate_id"], user["id"], course_id)
    return {
        "success": True,
        "message": "Certificate generated successfully",
        "data": serialize_mongo(certificate),
    }


@router.get("/my-certificates")
async def get_my_certificates(user: dict = Depends(get_current_user), db: AsyncIOMotorDatabase = Depends(get_db)):
    certificates = serialize_many(await list_user_certificates(db, user["id"]))
    return {"success": True, "count": len(certificates), "data": certificates}


@router.get("/admin/stats")
async def get_certificate_stats(user: dict = Depends(admin_only), db: AsyncIOMotorDatabase = Depends(get_db)):
    total = await db.certificates.count_documents({})
    by_grade = await db.certificates.aggregate([
        {"$group": {"_id": "$grade", "count": {"$sum": 1}}},
    ]).to_list(None)
    recent = await db.certificates.find().sort("issue_date", -1).limit(10).to_list(10)
    return {
        "success": True,
        "data": {"total": total, "byGrade": by_grade, "recent": serialize_many(recent)},
    }


@router.get("/{certificate_id}/download")
async def download_certificate(
    certificate_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    certificate = await get_certificate(db, certificate_id)
    if not certificate:
        raise HTTPException(status_code=404, detail="Certificate not found")
    if certificate["user_id"] != user["id"] and user["role"] != UserRole.ADMIN.value:
        raise HTTPException(status_code=403, detail="Not authorized to download this certificate")

    certificate_bytes = await run_in_threadpool(generate_certificate_image, certificate)
    return Response(
        content=certificate_bytes,
        media_type="image/png",
        headers={"Content-Disposition": f"attachment; filename=certificate_{certificate_id}.png"},
    )


@router.get("/{certificate_id}")
async def get_single_certificate(
    certificate_id: str,
    user: dict = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    certificate = await get_certificate(db, certificate_id)
    if not certificate:
        raise HTTPException(status_code=404, detail="Certificate not found")
    return {"success": True, "data": serialize_mongo(certificate)}


@router.delete("/{certificate_id}")
async def remove_certificate(
    certificate_id: str,
    user: dict = Depends(admin_only),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    if not await delete_certificate(db, certificate_id):
        raise HTTPException(status_code=404, detail="Certificate not found")
    logger.info("🗑️ Certificate %s deleted by %s", certificate_id, user["id"])
    return {"success": True, "message": "Certificate deleted successfully"}
