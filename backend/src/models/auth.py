"""Bearer token models for the record API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """Token handed back by ``POST /api/tokens``."""

    token: str = Field(..., description="Signed HS256 token for the Authorization header")
    token_type: str = Field("bearer", description="Always bearer")
    expires_at: datetime = Field(..., description="When the token stops being accepted")


class JWTPayload(BaseModel):
    """Claims carried by a TestGem token; ``sub`` owns the caller's records."""

    sub: str = Field(..., min_length=1, description="Owner user id stored on every record")
    iat: int = Field(..., description="Issued at, seconds since the epoch")
    exp: int = Field(..., description="Expiry, seconds since the epoch")


__all__ = ["TokenResponse", "JWTPayload"]
