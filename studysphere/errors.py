"""
Error responses shared by all routers

Every error body carries {"success": false, "message": ...}; the raw
exception text is attached only outside production.
"""

import logging
from typing import Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studysphere.config import Settings

logger = logging.getLogger(__name__)


def error_body(message: str, exc: Optional[BaseException] = None, settings: Optional[Settings] = None) -> dict:
    body = {"success": False, "message": message}
    if exc is not None and settings is not None and not settings.is_production:
        body["error"] = str(exc)
    return body


def server_error(message: str, exc: BaseException, settings: Settings) -> JSONResponse:
    logger.exception(message)
    return JSONResponse(status_code=500, content=error_body(message, exc, settings))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {"success": False, "message": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


def _describe_validation_error(error: dict) -> str:
    location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    message = error.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are client errors: 400 with the shared error shape"""
    errors = exc.errors()
    message = _describe_validation_error(errors[0]) if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "message": message})
