"""System routes for logs and diagnostics."""

import logging
from collections import deque
from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..middleware import AuthContext, get_auth_context

router = APIRouter()

LOG_BUFFER: deque = deque(maxlen=100)

_RESERVED_ATTRS = {
    "args", "asctime", "created", "exc_info", "exc_text", "filename",
    "funcName", "levelname", "levelno", "lineno", "module", "msecs",
    "message", "msg", "name", "pathname", "process", "processName",
    "relativeCreated", "stack_info", "taskName", "thread", "threadName",
}


class LogEntry(BaseModel):
    timestamp: str
    level: str
    logger: str
    message: str
    extra: Dict[str, Any]


class MemoryLogHandler(logging.Handler):
    """Keep the most recent log records in memory."""

    def emit(self, record):
        try:
            extra = {
                k: v if isinstance(v, (str, int, float, bool, type(None))) else repr(v)
                for k, v in record.__dict__.items()
                if k not in _RESERVED_ATTRS
            }
            LOG_BUFFER.append(
                {
                    "timestamp": datetime.fromtimestamp(record.created).isoformat(),
                    "level": record.levelname,
                    "logger": record.name,
                    "message": self.format(record),
                    "extra": extra,
                }
            )
        except Exception:
            self.handleError(record)


memory_handler = MemoryLogHandler()
memory_handler.setFormatter(logging.Formatter("%(message)s"))


def install_memory_handler(level: int = logging.INFO) -> None:
    """Attach the buffer handler to the root logger once."""
    root = logging.getLogger()
    if memory_handler not in root.handlers:
        root.addHandler(memory_handler)
    root.setLevel(level)


@router.get("/api/system/logs", response_model=List[LogEntry])
async def get_logs(auth: AuthContext = Depends(get_auth_context)):
    """Retrieve recent server log entries."""
    return list(LOG_BUFFER)


__all__ = ["router", "LOG_BUFFER", "MemoryLogHandler", "install_memory_handler"]
