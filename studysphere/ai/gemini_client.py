"""
Gemini generateContent client
One outbound request per call, no retry of its own
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def default_safety_thresholds() -> Dict[str, str]:
    return {category: "BLOCK_ONLY_HIGH" for category in HARM_CATEGORIES}


# ==================== ERRORS ====================

class GeminiError(Exception):
    """Base class for vendor call failures"""


class GeminiNetworkError(GeminiError):
    """Transport failure or timeout before a response arrived"""


class GeminiHttpError(GeminiError):
    """Vendor answered with a non-success status or an unreadable body"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"Gemini returned HTTP {status_code}: {message}")
        self.status_code = status_code


# ==================== CONFIG & REQUEST ====================

@dataclass(frozen=True)
class GeminiConfig:
    api_key: str
    model: str = "gemini-2.5-flash"
    base_url: str = GEMINI_BASE_URL
    timeout_seconds: float = 30.0


@dataclass
class GenerationRequest:
    prompt: str
    max_output_tokens: int = 800
    temperature: float = 0.7
    top_p: float = 0.8
    top_k: int = 40
    candidate_count: int = 1
    safety_thresholds: Dict[str, str] = field(default_factory=default_safety_thresholds)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": self.prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "topP": self.top_p,
                "topK": self.top_k,
                "maxOutputTokens": self.max_output_tokens,
                "candidateCount": self.candidate_count,
            },
            "safetySettings": [
                {"category": category, "threshold": threshold}
                for category, threshold in self.safety_thresholds.items()
            ],
        }


# ==================== CLIENT ====================

class GeminiClient:
    """
    Thin async wrapper over the generateContent endpoint.

    Returns the decoded JSON body as-is; deciding whether the answer is usable
    belongs to the acceptance policy.
    """

    def __init__(self, config: GeminiConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not config.api_key:
            raise ValueError("GeminiConfig.api_key is empty")
        self.config = config
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url}/models/{self.config.model}:generateContent"

    async def generate_content(self, request: GenerationRequest) -> Dict[str, Any]:
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.config.api_key,
        }

        async with httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport,
        ) as client:
            try:
                response = await client.post(self.endpoint, json=request.to_payload(), headers=headers)
            except httpx.TimeoutException as e:
                raise GeminiNetworkError(
                    f"Gemini request timed out after {self.config.timeout_seconds}s"
                ) from e
            except httpx.HTTPError as e:
                raise GeminiNetworkError(f"Gemini request failed: {e}") from e

        if not response.is_success:
            raise GeminiHttpError(response.status_code, response.text[:500])

        try:
            return response.json()
        except ValueError as e:
            raise GeminiHttpError(response.status_code, "response body is not JSON") from e
