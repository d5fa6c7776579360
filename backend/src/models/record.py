"""Record-related Pydantic models shared by documents, notes and workspaces."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecordKind(str, Enum):
    """Entity kinds exposed by the API, each backed by its own table."""

    TESTS = "tests"
    NOTES = "notes"
    WORKSPACES = "workspaces"

    @property
    def table(self) -> str:
        return RECORD_TABLES[self]


RECORD_TABLES: dict[RecordKind, str] = {
    RecordKind.TESTS: "test_documents",
    RecordKind.NOTES: "notes",
    RecordKind.WORKSPACES: "workspaces",
}


class Record(BaseModel):
    """A stored test document, note or workspace."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "id": "3f1c0e9a4b2d4f0c9a7e",
                "title": "Biology Quiz",
                "content": "Q1 - What is a cell?\n\nQ2 - Name the organelles.",
                "user_id": "user_2abc",
                "description": None,
            }
        },
    )

    id: str = Field(..., description="Backend-assigned identifier")
    title: str = Field(default="", description="Display title")
    content: str = Field(default="", description="Markdown content")
    user_id: str = Field(..., description="Owner user ID")
    description: Optional[str] = Field(None, description="Workspace subtitle")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: object) -> object:
        # Supabase tables may use integer or uuid primary keys.
        return str(value) if value is not None else value

    @field_validator("title", "content", mode="before")
    @classmethod
    def _null_to_empty(cls, value: object) -> object:
        return "" if value is None else value


class RecordCreate(BaseModel):
    """Request payload to save a new record."""

    title: str = Field(default="", max_length=512)
    content: str = Field(default="", max_length=1_048_576)
    description: Optional[str] = None


class TitleUpdate(BaseModel):
    """Request payload for inline title edits."""

    title: str = Field(..., max_length=512)


class ContentUpdate(BaseModel):
    """Request payload to replace a record's content."""

    content: str = Field(..., max_length=1_048_576)


__all__ = [
    "RecordKind",
    "RECORD_TABLES",
    "Record",
    "RecordCreate",
    "TitleUpdate",
    "ContentUpdate",
]
