import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from studysphere.config import Settings, get_settings
from studysphere.db import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health")
async def health(db: AsyncIOMotorDatabase = Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Liveness plus dependency status. Returns 503 when MongoDB is unreachable;
    a missing Gemini key is reported but does not fail the check, since chat
    still answers from the fallback responder.
    """
    record = {
        "status": "UP",
        "services": {
            "database": "UP",
            "gemini": "CONFIGURED" if settings.gemini_api_key else "NOT_CONFIGURED",
        },
        "latency_ms": {},
    }

    start = time.perf_counter()
    try:
        await db.command("ping")
        record["latency_ms"]["database"] = round((time.perf_counter() - start) * 1000, 2)
    except PyMongoError as e:
        logger.warning("⚠️ Health check: MongoDB ping failed: %s", e)
        record["status"] = "DOWN"
        record["services"]["database"] = "DOWN"
        return JSONResponse(status_code=503, content=record)

    return record
