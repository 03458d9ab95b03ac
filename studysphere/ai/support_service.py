import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from studysphere.ai.acceptance import AcceptedPartial, Rejected, generate_with_policy
from studysphere.ai.fallback import educational_response
from studysphere.ai.gemini_client import GeminiClient, GeminiConfig, GeminiError
from studysphere.config import Settings

logger = logging.getLogger(__name__)

CHAT_PROMPT_TEMPLATE = "Help with: {message}\n\nProvide a clear, educational answer in 1-2 sentences."

NOT_CONFIGURED_MESSAGE = (
    "AI service not configured. Please check the GEMINI_API_KEY configuration in environment variables."
)


class AIConfigurationError(RuntimeError):
    """Vendor credentials are missing"""


@dataclass(frozen=True)
class ChatReply:
    message: str
    partial: bool = False
    fallback: bool = False


class SupportChatService:
    """Answers support-chat messages; never fails once constructed"""

    def __init__(self, client: GeminiClient):
        self.client = client

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "SupportChatService":
        if not settings.gemini_api_key:
            raise AIConfigurationError(NOT_CONFIGURED_MESSAGE)

        config = GeminiConfig(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            timeout_seconds=settings.gemini_timeout_seconds,
        )
        return cls(GeminiClient(config, transport=transport))

    async def reply(self, message: str) -> ChatReply:
        prompt = CHAT_PROMPT_TEMPLATE.format(message=message)

        try:
            result = await generate_with_policy(self.client, prompt)
        except GeminiError as e:
            logger.warning("Gemini AI generation error: %s", e)
            return self._fallback(message)
        except Exception:
            logger.exception("Unexpected failure while generating AI response")
            return self._fallback(message)

        if isinstance(result, Rejected):
            return self._fallback(message)

        logger.info("✅ AI response generated: %s", result.text[:100])
        return ChatReply(message=result.text, partial=isinstance(result, AcceptedPartial))

    @staticmethod
    def _fallback(message: str) -> ChatReply:
        logger.info("Serving canned educational response")
        return ChatReply(message=educational_response(message), fallback=True)
