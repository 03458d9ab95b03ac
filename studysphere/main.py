import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from studysphere.ai.support_router import router as ai_support_router
from studysphere.config import get_settings
from studysphere.courses.certificate_router import router as certificate_router
from studysphere.courses.content_router import router as content_router
from studysphere.db import close_client, create_indexes, get_db
from studysphere.errors import http_exception_handler, validation_exception_handler
from studysphere.system.health_router import router as health_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="StudySphere API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)


@app.on_event("startup")
async def startup_event():
    await create_indexes(await get_db())
    logger.info("🚀 StudySphere API started (env=%s)", settings.app_env)


@app.on_event("shutdown")
async def shutdown_event():
    close_client()


# ==================== ROUTER REGISTRATION ====================
app.include_router(ai_support_router, prefix="/api/ai-support")
app.include_router(content_router, prefix="/api/content-generation")
app.include_router(content_router, prefix="/content-generation", include_in_schema=False)
app.include_router(certificate_router, prefix="/api/certificates")
app.include_router(health_router)
# ============================================================
