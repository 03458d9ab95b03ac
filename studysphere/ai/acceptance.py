"""
Response acceptance policy for Gemini answers

Accept, salvage a truncated answer, or reject. The only retry is a single
re-request with a smaller token budget after a MAX_TOKENS cutoff.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from studysphere.ai.gemini_client import GeminiClient, GenerationRequest

logger = logging.getLogger(__name__)

FINISH_REASON_STOP = "STOP"
FINISH_REASON_MAX_TOKENS = "MAX_TOKENS"

DEFAULT_MAX_OUTPUT_TOKENS = 800
RETRY_TOKEN_FLOOR = 300
ELLIPSIS = "..."
MALFORMED_RESPONSE = "malformed-response"


# ==================== RESULTS ====================

@dataclass(frozen=True)
class Accepted:
    text: str


@dataclass(frozen=True)
class AcceptedPartial:
    text: str


@dataclass(frozen=True)
class Rejected:
    reason: str


@dataclass(frozen=True)
class RetryWithBudget:
    max_output_tokens: int


GenerationResult = Union[Accepted, AcceptedPartial, Rejected]


# ==================== POLICY ====================

def candidate_text(candidate: Dict[str, Any]) -> Optional[str]:
    """Joined text of all parts, or None when the candidate is not shaped like a Gemini candidate"""
    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        return None
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        return None

    texts = []
    for part in parts:
        if not isinstance(part, dict):
            return None
        text = part.get("text", "")
        if not isinstance(text, str):
            return None
        texts.append(text)
    return "".join(texts)


def evaluate_response(
    payload: Any,
    max_output_tokens: int,
    retry_count: int,
) -> Union[GenerationResult, RetryWithBudget]:
    """
    Classify one raw generateContent response.

    Returns RetryWithBudget only on the first attempt, when the answer was cut
    off by the token limit and the budget is still above the floor. A body
    that is not shaped like a generateContent response is Rejected.
    """
    if not isinstance(payload, dict):
        return Rejected(MALFORMED_RESPONSE)

    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list):
        return Rejected(MALFORMED_RESPONSE)
    if not candidates:
        return Rejected("no-candidates")

    candidate = candidates[0]
    if not isinstance(candidate, dict):
        return Rejected(MALFORMED_RESPONSE)

    text = candidate_text(candidate)
    if text is None:
        return Rejected(MALFORMED_RESPONSE)
    text = text.strip()

    finish_reason = candidate.get("finishReason")

    if finish_reason and finish_reason != FINISH_REASON_STOP:
        if finish_reason == FINISH_REASON_MAX_TOKENS:
            if retry_count == 0 and max_output_tokens > RETRY_TOKEN_FLOOR:
                return RetryWithBudget(RETRY_TOKEN_FLOOR)

            if text:
                return AcceptedPartial(text + ELLIPSIS)

        return Rejected(str(finish_reason))

    if not text:
        return Rejected("empty-text")

    return Accepted(text)


async def generate_with_policy(
    client: GeminiClient,
    prompt: str,
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
) -> GenerationResult:
    """
    Run the prompt through the client and the acceptance policy.

    GeminiError from the client propagates; the caller owns the fallback.
    """
    budget = max_output_tokens
    retry_count = 0

    while True:
        logger.info("🤖 Generating AI response (attempt %d, maxTokens: %d)", retry_count + 1, budget)
        payload = await client.generate_content(GenerationRequest(prompt=prompt, max_output_tokens=budget))
        decision = evaluate_response(payload, budget, retry_count)

        if isinstance(decision, RetryWithBudget):
            logger.info("🔄 MAX_TOKENS hit, retrying with %d tokens", decision.max_output_tokens)
            budget = decision.max_output_tokens
            retry_count += 1
            continue

        if isinstance(decision, AcceptedPartial):
            logger.info("📝 Using partial response due to MAX_TOKENS")
        elif isinstance(decision, Rejected):
            logger.warning("⚠️ Response rejected: %s", decision.reason)

        return decision
