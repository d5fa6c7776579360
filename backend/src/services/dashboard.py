"""Per-tab view state for the dashboard and the generator page.

These classes hold what a browser tab shows: the lists of tests, notes and
workspaces, the AI edit dialog, and the draft being generated. They talk to a
``RecordStore`` and an ``AIEditService`` and apply the results to their own
lists. Remote failures are logged and leave every list exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models.record import Record, RecordCreate, RecordKind
from .ai_edit import AIEditService
from .records import RecordStore, RecordStoreError

logger = logging.getLogger(__name__)

MISSING_TITLE_MESSAGE = "Please enter a title"


class MissingTitleError(ValueError):
    """Raised when a draft is saved without a title."""

    def __init__(self, message: str = MISSING_TITLE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class EditDialog:
    """State of the "Edit with AI" dialog."""

    kind: RecordKind
    record: Record
    instruction: str = ""
    proposal: Optional[str] = None
    processing: bool = False


@dataclass
class DocumentViewer:
    """Read-only view of a single record."""

    title: str
    content: str


@dataclass
class DashboardSession:
    """Lists and dialogs of one dashboard tab for one user."""

    store: RecordStore
    ai: AIEditService
    user_id: Optional[str]
    records: Dict[RecordKind, List[Record]] = field(
        default_factory=lambda: {kind: [] for kind in RecordKind}
    )
    loading: bool = False
    dialog: Optional[EditDialog] = None
    viewer: Optional[DocumentViewer] = None

    @property
    def tests(self) -> List[Record]:
        return self.records[RecordKind.TESTS]

    @property
    def notes(self) -> List[Record]:
        return self.records[RecordKind.NOTES]

    @property
    def workspaces(self) -> List[Record]:
        return self.records[RecordKind.WORKSPACES]

    def _require_user(self) -> Optional[str]:
        if not self.user_id:
            logger.error("No logged-in user.")
        return self.user_id

    def load(self) -> None:
        """Fetch every kind for the current user."""
        for kind in RecordKind:
            self.load_kind(kind)

    def load_kind(self, kind: RecordKind) -> None:
        user_id = self._require_user()
        if not user_id:
            return
        self.loading = True
        try:
            self.records[kind] = self.store.list_by_owner(kind, user_id)
        except RecordStoreError as exc:
            logger.error("Fetch Error (%s): %s", kind.value, exc)
        finally:
            self.loading = False

    def rename(self, kind: RecordKind, record_id: str, new_title: str) -> None:
        """Apply an inline title edit."""
        user_id = self._require_user()
        if not user_id or not record_id or not new_title.strip():
            return
        try:
            self.store.update_title(kind, user_id, record_id, new_title)
        except RecordStoreError as exc:
            logger.error("Title Update Error: %s", exc)
            return
        self.records[kind] = [
            record.model_copy(update={"title": new_title}) if record.id == record_id else record
            for record in self.records[kind]
        ]

    def delete(self, kind: RecordKind, record_id: Optional[str]) -> None:
        """Delete remotely, then drop the row from the local list."""
        if not record_id:
            logger.error("Delete Error: record id is undefined")
            return
        user_id = self._require_user()
        if not user_id:
            return
        try:
            self.store.delete(kind, user_id, record_id)
        except RecordStoreError as exc:
            logger.error("Delete Error: %s", exc)
            return
        self.records[kind] = [r for r in self.records[kind] if r.id != record_id]

    def open_document(self, record: Record) -> None:
        self.viewer = DocumentViewer(title=record.title, content=record.content)

    def close_document(self) -> None:
        self.viewer = None

    def open_edit_dialog(self, kind: RecordKind, record: Record) -> None:
        """Open the AI dialog with a clean instruction and no proposal."""
        self.dialog = EditDialog(kind=kind, record=record)

    def close_dialog(self) -> None:
        self.dialog = None

    async def submit_edit(self, instruction: Optional[str] = None) -> Optional[str]:
        """Ask the model for a revision of the selected record."""
        dialog = self.dialog
        if dialog is None:
            return None
        if instruction is not None:
            dialog.instruction = instruction
        dialog.processing = True
        try:
            proposal = await self.ai.propose(dialog.record.content, dialog.instruction)
        finally:
            dialog.processing = False
        # The dialog may have been closed or reopened on another record meanwhile.
        if proposal is not None and self.dialog is dialog:
            dialog.proposal = proposal
        return proposal

    def keep_changes(self) -> bool:
        """Persist the proposal over the selected record and close the dialog."""
        dialog = self.dialog
        if dialog is None or not dialog.proposal:
            return False
        user_id = self._require_user()
        if not user_id:
            return False
        try:
            self.store.update_content(dialog.kind, user_id, dialog.record.id, dialog.proposal)
        except RecordStoreError as exc:
            logger.error("Content Update Error: %s", exc)
            return False
        self.records[dialog.kind] = [
            record.model_copy(update={"content": dialog.proposal})
            if record.id == dialog.record.id
            else record
            for record in self.records[dialog.kind]
        ]
        self.close_dialog()
        return True

    def deny_changes(self) -> None:
        """Discard the proposal; stored content is untouched."""
        self.close_dialog()


@dataclass
class GeneratorSession:
    """State of the "generate a new test" page."""

    store: RecordStore
    ai: AIEditService
    user_id: Optional[str]
    kind: RecordKind = RecordKind.TESTS
    prompt: str = ""
    response: str = ""
    save_title: str = ""
    loading: bool = False

    async def generate(self, prompt: Optional[str] = None) -> str:
        if prompt is not None:
            self.prompt = prompt
        self.loading = True
        self.response = ""
        try:
            result = await self.ai.generate(self.prompt)
        finally:
            self.loading = False
        self.response = result.response
        return self.response

    def save(self, title: Optional[str] = None) -> Optional[Record]:
        """Store the generated response as a new record.

        Raises:
            MissingTitleError: If no title was entered. Nothing is sent.
        """
        if title is not None:
            self.save_title = title
        if not self.user_id:
            logger.error("No logged-in user.")
            return None
        if not self.save_title.strip():
            raise MissingTitleError()

        try:
            record = self.store.insert(
                self.kind,
                self.user_id,
                RecordCreate(title=self.save_title, content=self.response),
            )
        except RecordStoreError as exc:
            logger.error("Insert Error: %s", exc)
            return None

        logger.info("Test saved successfully!")
        self.response = ""
        self.prompt = ""
        return record


__all__ = [
    "DashboardSession",
    "GeneratorSession",
    "EditDialog",
    "DocumentViewer",
    "MissingTitleError",
    "MISSING_TITLE_MESSAGE",
]
