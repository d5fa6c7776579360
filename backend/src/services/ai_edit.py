"""AI-assisted drafting and revision of records.

The service renders a prompt, makes one Gemini request and hands back the first
candidate. Failures are logged, never raised: an edit reports ``None`` and a
draft reports a placeholder message. Callers leave their state untouched and
the user resubmits if they want another try.
"""

from __future__ import annotations

import logging
import threading
from functools import lru_cache
from typing import Dict, Optional, Tuple

from ..models.ai import FETCH_ERROR_TEXT, NO_RESPONSE_TEXT, GenerateResponse
from ..models.record import RecordKind
from .gemini import GeminiClient, GeminiError, GeminiTransportError
from .prompt_loader import PromptLoader, PromptLoaderError

logger = logging.getLogger(__name__)

EDIT_TEMPLATE = "edit.md"
GENERATE_TEMPLATE = "generate.md"


class AIEditService:
    """Build prompts and turn Gemini responses into proposals."""

    def __init__(
        self,
        client: GeminiClient | None = None,
        prompt_loader: PromptLoader | None = None,
    ) -> None:
        self.client = client or GeminiClient.from_config()
        self.prompts = prompt_loader or PromptLoader()

    def build_edit_prompt(self, content: str, instruction: str) -> str:
        return self.prompts.load(
            EDIT_TEMPLATE, {"content": content, "instruction": instruction}
        )

    def build_generate_prompt(self, prompt: str) -> str:
        return self.prompts.load(GENERATE_TEMPLATE, {"prompt": prompt})

    async def propose(self, content: str, instruction: str) -> Optional[str]:
        """Return suggested replacement content, or None if the call failed."""
        try:
            prompt_text = self.build_edit_prompt(content, instruction)
        except PromptLoaderError as exc:
            logger.error("AI edit prompt could not be rendered: %s", exc)
            return None
        try:
            return await self.client.generate(prompt_text)
        except GeminiError as exc:
            logger.error("AI edit failed: %s", exc)
            return None

    async def generate(self, prompt: str) -> GenerateResponse:
        """Draft a new document from a free-text description.

        Failures never raise. A request that produced no readable body reports
        ``FETCH_ERROR_TEXT``; a response without usable text reports
        ``NO_RESPONSE_TEXT``.
        """
        try:
            prompt_text = self.build_generate_prompt(prompt)
        except PromptLoaderError as exc:
            logger.error("AI generate prompt could not be rendered: %s", exc)
            return GenerateResponse(response=NO_RESPONSE_TEXT, generated=False)

        try:
            text = await self.client.generate(prompt_text)
        except GeminiTransportError as exc:
            logger.error("AI generation failed: %s", exc)
            return GenerateResponse(response=FETCH_ERROR_TEXT, generated=False)
        except GeminiError as exc:
            logger.error("AI generation failed: %s", exc)
            return GenerateResponse(response=NO_RESPONSE_TEXT, generated=False)
        if not text:
            return GenerateResponse(response=NO_RESPONSE_TEXT, generated=False)
        return GenerateResponse(response=text, generated=True)


ProposalKey = Tuple[str, RecordKind, str]


class ProposalStore:
    """Pending AI proposals, one per (user, kind, record)."""

    def __init__(self) -> None:
        self._proposals: Dict[ProposalKey, str] = {}
        self._lock = threading.Lock()

    def put(self, user_id: str, kind: RecordKind, record_id: str, proposal: str) -> None:
        with self._lock:
            self._proposals[(user_id, kind, record_id)] = proposal

    def get(self, user_id: str, kind: RecordKind, record_id: str) -> Optional[str]:
        with self._lock:
            return self._proposals.get((user_id, kind, record_id))

    def pop(self, user_id: str, kind: RecordKind, record_id: str) -> Optional[str]:
        with self._lock:
            return self._proposals.pop((user_id, kind, record_id), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._proposals)


@lru_cache(maxsize=1)
def get_ai_edit_service() -> AIEditService:
    """Get cached instance of AIEditService."""
    return AIEditService()


@lru_cache(maxsize=1)
def get_proposal_store() -> ProposalStore:
    """Get the process-wide proposal store."""
    return ProposalStore()


__all__ = [
    "AIEditService",
    "ProposalStore",
    "get_ai_edit_service",
    "get_proposal_store",
    "EDIT_TEMPLATE",
    "GENERATE_TEMPLATE",
]
