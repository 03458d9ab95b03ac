"""
Chat session orchestrator

Owns one learner's transcript. Each submit appends the user's message,
waits for exactly one reply from the transport and appends exactly one bot
message. A session accepts a new message only after the previous one has
been answered.
"""

import itertools
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Protocol, Tuple

import httpx

from studysphere.ai.fallback import educational_response, suggestions_for
from studysphere.ai.support_service import ChatReply, SupportChatService

logger = logging.getLogger(__name__)

GREETING = "Hi, I am here to help you in preparation. How can I assist you today?"


class MessageRole(str, Enum):
    USER = "user"
    BOT = "bot"


@dataclass(frozen=True)
class ChatMessage:
    id: int
    role: MessageRole
    text: str
    timestamp: datetime
    suggestions: Tuple[str, ...] = ()
    is_error: bool = False
    is_partial: bool = False


class SessionBusyError(RuntimeError):
    """A reply for this session is still outstanding"""


# ==================== TRANSPORTS ====================

class ChatTransport(Protocol):
    async def send(self, message: str) -> ChatReply:
        ...


class BackendProxyTransport:
    """Posts the message to the /api/ai-support/chat route"""

    def __init__(self, endpoint_url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 30.0):
        self.endpoint_url = endpoint_url
        self._client = client
        self._timeout = timeout

    async def send(self, message: str) -> ChatReply:
        if self._client is not None:
            response = await self._client.post(self.endpoint_url, json={"message": message})
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self.endpoint_url, json={"message": message})

        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected response from AI backend")

        text = data.get("message")
        if not isinstance(text, str) or not text:
            raise ValueError("No response from AI backend")

        return ChatReply(
            message=text,
            partial=bool(data.get("partial")),
            fallback=bool(data.get("fallback")),
        )


class DirectVendorTransport:
    """Calls the vendor in-process through the support chat service"""

    def __init__(self, service: SupportChatService):
        self.service = service

    async def send(self, message: str) -> ChatReply:
        return await self.service.reply(message)


# ==================== TEXT CLEANUP ====================

_MARKDOWN_RULES = (
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"#{1,6}\s+"), ""),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"^\s*[*\-+]\s+", re.MULTILINE), "• "),
    (re.compile(r"\s+"), " "),
)


def clean_response_text(text: str) -> str:
    if not text:
        return ""
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


# ==================== SESSION ====================

class ChatSession:
    def __init__(self, transport: ChatTransport, greeting: str = GREETING):
        self._transport = transport
        self._messages: List[ChatMessage] = []
        self._ids = itertools.count(1)
        self._pending = False
        self._append(MessageRole.BOT, greeting)

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    @property
    def busy(self) -> bool:
        return self._pending

    def _append(self, role: MessageRole, text: str, **extra) -> ChatMessage:
        message = ChatMessage(
            id=next(self._ids),
            role=role,
            text=text,
            timestamp=datetime.now(timezone.utc),
            **extra,
        )
        self._messages.append(message)
        return message

    async def submit(self, text: str) -> Optional[ChatMessage]:
        """
        Send one learner message and return the bot message appended for it.

        Blank input is ignored (returns None). Raises SessionBusyError if the
        previous message has not been answered yet.
        """
        if not text or not text.strip():
            return None
        if self._pending:
            raise SessionBusyError("Still waiting for the previous reply")

        self._pending = True
        try:
            self._append(MessageRole.USER, text)
            suggestions = tuple(suggestions_for(text))

            try:
                reply = await self._transport.send(text)
                reply_text = clean_response_text(reply.message)
            except Exception as e:
                logger.warning("Chat transport failed: %s", e)
                return self._append(
                    MessageRole.BOT,
                    educational_response(text),
                    suggestions=suggestions,
                    is_error=True,
                )

            return self._append(
                MessageRole.BOT,
                reply_text,
                suggestions=suggestions,
                is_partial=reply.partial,
            )
        finally:
            self._pending = False
