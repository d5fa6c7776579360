"""Pydantic models for data validation and serialization."""

from .ai import EditProposal, EditRequest, GenerateRequest, GenerateResponse
from .auth import JWTPayload, TokenResponse
from .record import ContentUpdate, Record, RecordCreate, RecordKind, TitleUpdate
from .user import User

__all__ = [
    "User",
    "Record",
    "RecordKind",
    "RecordCreate",
    "TitleUpdate",
    "ContentUpdate",
    "GenerateRequest",
    "GenerateResponse",
    "EditRequest",
    "EditProposal",
    "TokenResponse",
    "JWTPayload",
]
