"""Request/response models for AI generation and AI-assisted edits."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

NO_RESPONSE_TEXT = "No response"
FETCH_ERROR_TEXT = "Error fetching response."


class GenerateRequest(BaseModel):
    """Free-text description of the test or notes to draft."""

    prompt: str = Field(..., max_length=20_000)


class GenerateResponse(BaseModel):
    """Generated draft, or a placeholder message when generation failed."""

    response: str
    generated: bool = Field(..., description="False when the model returned nothing usable")


class EditRequest(BaseModel):
    """User instruction describing how to revise a record."""

    instruction: str = Field(..., max_length=20_000)


class EditProposal(BaseModel):
    """AI-suggested replacement content awaiting acceptance."""

    record_id: str
    proposal: Optional[str] = Field(
        None, description="Suggested content; null when the model call failed"
    )


__all__ = [
    "NO_RESPONSE_TEXT",
    "FETCH_ERROR_TEXT",
    "GenerateRequest",
    "GenerateResponse",
    "EditRequest",
    "EditProposal",
]
