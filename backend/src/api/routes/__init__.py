"""HTTP API route handlers."""

from . import ai, auth, records, system

__all__ = ["ai", "auth", "records", "system"]
