"""Service layer for business logic and external integrations."""

from .ai_edit import AIEditService, ProposalStore, get_ai_edit_service, get_proposal_store
from .auth import AuthError, AuthService
from .config import AppConfig, get_config, reload_config
from .dashboard import DashboardSession, GeneratorSession, MissingTitleError
from .database import DatabaseService
from .export import build_docx, markdown_to_paragraphs
from .gemini import GeminiClient, GeminiError
from .prompt_loader import PromptLoader, PromptLoaderError
from .records import (
    RecordStore,
    RecordStoreError,
    SQLiteRecordStore,
    SupabaseRecordStore,
    build_record_store,
    get_record_store,
)

__all__ = [
    "AppConfig",
    "get_config",
    "reload_config",
    "DatabaseService",
    "AuthService",
    "AuthError",
    "RecordStore",
    "RecordStoreError",
    "SQLiteRecordStore",
    "SupabaseRecordStore",
    "build_record_store",
    "get_record_store",
    "GeminiClient",
    "GeminiError",
    "PromptLoader",
    "PromptLoaderError",
    "AIEditService",
    "ProposalStore",
    "get_ai_edit_service",
    "get_proposal_store",
    "DashboardSession",
    "GeneratorSession",
    "MissingTitleError",
    "build_docx",
    "markdown_to_paragraphs",
]
