from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from studysphere.ai.support_service import AIConfigurationError, SupportChatService
from studysphere.config import Settings, get_settings
from studysphere.errors import server_error

router = APIRouter(tags=["AI Support"])


class ChatRequest(BaseModel):
    message: Optional[str] = None


class ChatResponse(BaseModel):
    success: bool
    message: str
    partial: Optional[bool] = None
    fallback: Optional[bool] = None


def get_gemini_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Outbound transport for Gemini calls (None = real network)"""
    return None


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    payload: ChatRequest,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_gemini_transport),
):
    """
    Public proxy for the frontend chatbot.

    Vendor failures never reach the client: they come back as 200 with
    fallback text and "fallback": true.
    """
    if not payload.message:
        raise HTTPException(status_code=400, detail="Message is required")

    try:
        service = SupportChatService.from_settings(settings, transport=transport)
    except AIConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        reply = await service.reply(payload.message)
    except Exception as e:
        return server_error("Internal server error. Please try again later.", e, settings)

    return ChatResponse(
        success=True,
        message=reply.message,
        partial=reply.partial or None,
        fallback=reply.fallback or None,
    )
