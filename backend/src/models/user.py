"""User models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class User(BaseModel):
    """Authenticated user as seen by the API."""

    user_id: str = Field(..., min_length=1, description="Identity provider subject")


__all__ = ["User"]
