# app/models.py
from __future__ import annotations

"""
Review reply text providers

- BaseTextProvider:
    The one seam between the reply handler and a generation backend:
    generate(prompt, config) -> text, raising GenerationError on a failed call.

- GeminiProvider:
    Google Generative Language API (generateContent). Single attempt, no
    retry or backoff; the API key travels as the `key` query parameter.

Settings used (via app.settings.Settings):
  GEMINI_API_KEY, GEMINI_MODEL, GEMINI_BASE_URL, GEMINI_TIMEOUT(optional)
"""

import logging
from typing import Any, Dict, Optional

import requests

from .schemas import GenerationConfig

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """The provider answered with a non-success status."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(f"provider returned {status_code}")
        self.status_code = status_code
        self.body = body


def extract_candidate_text(resp_json: Any) -> Optional[str]:
    """Return candidates[0].content.parts[0].text, or None if any link is missing."""
    try:
        text = resp_json["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    # Non-string or empty text counts as absent; the caller substitutes the generic reply.
    if not isinstance(text, str) or not text:
        return None
    return text


# ------------------------ Provider base ------------------------
class BaseTextProvider:
    name: str

    def __init__(self, name: str) -> None:
        self.name = name

    def generate(self, prompt: str, config: GenerationConfig) -> Optional[str]:
        raise NotImplementedError


# ------------------------ Gemini provider ------------------------
class GeminiProvider(BaseTextProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: Optional[float] = None,
    ) -> None:
        super().__init__("gemini")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def build_payload(self, prompt: str, config: GenerationConfig) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": config.model_dump(by_alias=True),
        }

    def generate(self, prompt: str, config: GenerationConfig) -> Optional[str]:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        resp = requests.post(
            url,
            params={"key": self.api_key},
            json=self.build_payload(prompt, config),
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        if not 200 <= resp.status_code < 300:
            logger.error("Gemini API error %s: %s", resp.status_code, resp.text)
            raise GenerationError(resp.status_code, resp.text)
        return extract_candidate_text(resp.json())
