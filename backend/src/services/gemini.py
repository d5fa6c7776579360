"""Thin client for Google's Gemini ``generateContent`` endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import AppConfig, get_config

logger = logging.getLogger(__name__)


class GeminiError(Exception):
    """Raised when a generation request fails or returns nothing usable."""


class GeminiTransportError(GeminiError):
    """The request never produced a readable response body."""


class GeminiClient:
    """Send one prompt, get back the first candidate's text."""

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.0-flash",
        api_base: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: AppConfig | None = None) -> "GeminiClient":
        config = config or get_config()
        return cls(
            config.gemini_api_key,
            model=config.gemini_model,
            api_base=config.gemini_api_base,
            timeout=config.gemini_timeout_seconds,
        )

    @property
    def url(self) -> str:
        model = self.model if self.model.startswith("models/") else f"models/{self.model}"
        return f"{self.api_base}/{model}:generateContent"

    @staticmethod
    def build_body(prompt: str) -> Dict[str, Any]:
        return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    @staticmethod
    def first_candidate_text(data: Any) -> str:
        """Extract ``candidates[0].content.parts[0].text`` from a response body."""
        if not isinstance(data, dict):
            raise GeminiError("Malformed Gemini response: expected a JSON object")
        candidates = data.get("candidates") or []
        if not candidates:
            raise GeminiError("No candidates in Gemini response")
        try:
            text = candidates[0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GeminiError(f"Malformed Gemini candidate: {exc!r}") from exc
        if not isinstance(text, str):
            raise GeminiError("Malformed Gemini candidate: text is not a string")
        return text

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` as a single user turn and return the first candidate."""
        if not self.api_key:
            raise GeminiError("No Gemini API key configured. Set GEMINI_API_KEY.")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self.url,
                    params={"key": self.api_key},
                    json=self.build_body(prompt),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise GeminiError(
                f"Gemini returned {exc.response.status_code}: {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GeminiTransportError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise GeminiTransportError(f"Gemini returned invalid JSON: {exc}") from exc

        text = self.first_candidate_text(data)
        logger.debug("Gemini returned %d characters", len(text))
        return text


__all__ = ["GeminiClient", "GeminiError", "GeminiTransportError"]
