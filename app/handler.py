from __future__ import annotations

"""
Reply generator handler.

Takes an HTTP method and raw body, validates the review/tone pair, prompts the
text provider once and returns a HandlerResponse. Every path, including provider
failures, resolves to a response; nothing is raised to the caller.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Optional, Union

from .metrics import UPSTREAM_FAILURES
from .models import BaseTextProvider, GeminiProvider, GenerationError
from .schemas import ErrorResponse, GenerationConfig, HandlerResponse, ReplyResponse
from .settings import Settings

logger = logging.getLogger(__name__)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

NOT_CONFIGURED_REPLY = "Sorry, the AI service is not configured properly. Please contact support."
UPSTREAM_FAILURE_REPLY = "Sorry, we couldn't generate a reply right now. Please try again in a few seconds."
GENERIC_REPLY = "Thank you for your review. We appreciate your feedback and will work on improving our service."

PROMPT_TEMPLATE = """Write a {tone} reply to this Google review:

"{review}"

Requirements:
- Sound natural and human
- Be concise (max 120 words)
- Be professional yet warm
- Address the customer's specific concern
- End with a positive note or invitation to return
- Never mention that you are an AI"""

_WRAPPING_QUOTE_START = re.compile(r"^[\"']")
_WRAPPING_QUOTE_END = re.compile(r"[\"']$")
_NEWLINE_RUN = re.compile(r"\n{2,}")

ProviderFactory = Callable[[str], BaseTextProvider]


def build_prompt(review: str, tone: str) -> str:
    # Review text goes in verbatim; it can carry instructions to the model.
    return PROMPT_TEMPLATE.format(tone=tone, review=review)


def clean_reply(text: str) -> str:
    text = text.strip()
    text = _WRAPPING_QUOTE_START.sub("", text)
    text = _WRAPPING_QUOTE_END.sub("", text)
    return _NEWLINE_RUN.sub("\n\n", text)


def _error(status_code: int, message: str) -> HandlerResponse:
    return HandlerResponse(status_code=status_code, headers=dict(CORS_HEADERS), body=ErrorResponse(error=message).model_dump())


def _reply(status_code: int, text: str) -> HandlerResponse:
    headers = {**CORS_HEADERS, "Content-Type": "application/json"}
    return HandlerResponse(status_code=status_code, headers=headers, body=ReplyResponse(reply=text).model_dump())


class ReplyHandler:
    """Validates a review request and turns it into a generated reply."""

    def __init__(
        self,
        api_key: Optional[str],
        provider_factory: Optional[ProviderFactory] = None,
        config: Optional[GenerationConfig] = None,
        upstream_failure_status: int = 200,
    ) -> None:
        self.api_key = api_key
        self.provider_factory = provider_factory or (lambda key: GeminiProvider(api_key=key))
        self.config = config or GenerationConfig()
        self.upstream_failure_status = upstream_failure_status

    @classmethod
    def from_settings(cls, settings: Settings) -> "ReplyHandler":
        def factory(key: str) -> BaseTextProvider:
            return GeminiProvider(
                api_key=key,
                model=settings.GEMINI_MODEL,
                base_url=settings.GEMINI_BASE_URL,
                timeout=settings.GEMINI_TIMEOUT,
            )

        return cls(
            api_key=settings.GEMINI_API_KEY,
            provider_factory=factory,
            upstream_failure_status=settings.UPSTREAM_FAILURE_STATUS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def handle(self, method: str, body: Union[str, bytes, None]) -> HandlerResponse:
        method = (method or "").upper()
        if method == "OPTIONS":
            return HandlerResponse(status_code=200, headers=dict(CORS_HEADERS))
        if method != "POST":
            return _error(405, "Method not allowed")

        try:
            payload = json.loads(body) if body else None
        except (ValueError, RecursionError):
            payload = None
        if payload is None:
            return _error(400, "Invalid JSON body")

        fields: Dict[str, Any] = payload if isinstance(payload, dict) else {}
        review = fields.get("review")
        tone = fields.get("tone")

        if not isinstance(review, str) or not review.strip():
            return _error(400, "Review is required and cannot be empty")
        if not isinstance(tone, str) or not tone:
            return _error(400, "Tone is required")

        if not self.api_key:
            logger.error("GEMINI_API_KEY environment variable is not set")
            return _reply(500, NOT_CONFIGURED_REPLY)

        try:
            return _reply(200, self.generate_reply(review, tone))
        except GenerationError as e:
            UPSTREAM_FAILURES.labels("status").inc()
            logger.error("Reply generation failed: %s", e)
        except Exception:
            UPSTREAM_FAILURES.labels("exception").inc()
            logger.exception("Function error")
        return _reply(self.upstream_failure_status, UPSTREAM_FAILURE_REPLY)

    def generate_reply(self, review: str, tone: str) -> str:
        provider = self.provider_factory(self.api_key)
        text = provider.generate(build_prompt(review, tone), self.config)
        return clean_reply(text or GENERIC_REPLY)
