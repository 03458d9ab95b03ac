from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from studysphere.config import get_settings

_client: Optional[AsyncIOMotorClient] = None


def get_client() -> AsyncIOMotorClient:
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(get_settings().mongo_url)
    return _client


async def get_db() -> AsyncIOMotorDatabase:
    """Database dependency"""
    return get_client()[get_settings().db_name]


def close_client():
    global _client
    if _client is not None:
        _client.close()
        _client = None


# ==================== DATABASE INDEXES ====================

async def create_indexes(db: AsyncIOMotorDatabase):
    """Create MongoDB indexes used by the content and certificate routes"""

    # Courses
    await db.courses.create_index("course_id", unique=True)
    await db.courses.create_index("instructor_id")

    # Quizzes
    await db.quizzes.create_index("quiz_id", unique=True)
    await db.quizzes.create_index("course_id")
    await db.quizzes.create_index("created_by")

    # Enrollments
    await db.enrollments.create_index([("user_id", 1), ("course_id", 1)], unique=True)

    # Certificates
    await db.certificates.create_index("certificate_id", unique=True)
    await db.certificates.create_index([("user_id", 1), ("course_id", 1)], unique=True)
    await db.certificates.create_index("issue_date")
