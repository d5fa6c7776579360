"""HTTP API routes for test documents, notes and workspaces."""

from __future__ import annotations

import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...models.record import ContentUpdate, Record, RecordCreate, RecordKind, TitleUpdate
from ...services.ai_edit import ProposalStore, get_proposal_store
from ...services.dashboard import MissingTitleError
from ...services.export import DOCX_MEDIA_TYPE, build_docx, export_filename
from ...services.records import RecordStore, get_record_store
from ..middleware import AuthContext, get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter()


def resolve_kind(kind: str) -> RecordKind:
    """Map the ``{kind}`` path segment to a RecordKind or 404."""
    try:
        return RecordKind(kind)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown record kind: {kind}")


Auth = Annotated[AuthContext, Depends(get_auth_context)]
Kind = Annotated[RecordKind, Depends(resolve_kind)]
Store = Annotated[RecordStore, Depends(get_record_store)]


@router.get("/api/{kind}", response_model=List[Record])
def list_records(kind: Kind, auth: Auth, store: Store):
    """List every record of this kind owned by the caller."""
    return store.list_by_owner(kind, auth.user_id)


@router.post("/api/{kind}", response_model=Record, status_code=201)
def create_record(kind: Kind, create: RecordCreate, auth: Auth, store: Store):
    """Save a new record. A title is mandatory."""
    if not create.title.strip():
        raise MissingTitleError()
    return store.insert(kind, auth.user_id, create)


@router.patch("/api/{kind}/{record_id}/title", status_code=204)
def update_title(
    kind: Kind, record_id: str, update: TitleUpdate, auth: Auth, store: Store
):
    """Rename a record in place."""
    if not update.title.strip():
        raise HTTPException(
            status_code=400,
            detail={"error": "missing_title", "message": "Title cannot be empty"},
        )
    store.update_title(kind, auth.user_id, record_id, update.title)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/api/{kind}/{record_id}/content", status_code=204)
def update_content(
    kind: Kind, record_id: str, update: ContentUpdate, auth: Auth, store: Store
):
    """Replace a record's markdown content."""
    store.update_content(kind, auth.user_id, record_id, update.content)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/api/{kind}/{record_id}", status_code=204)
def delete_record(
    kind: Kind,
    record_id: str,
    auth: Auth,
    store: Store,
    proposals: Annotated[ProposalStore, Depends(get_proposal_store)],
):
    """Delete a record along with any AI proposal pending for it."""
    store.delete(kind, auth.user_id, record_id)
    proposals.pop(auth.user_id, kind, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/api/{kind}/{record_id}/export.docx")
def export_record(kind: Kind, record_id: str, auth: Auth, store: Store):
    """Download a record as a Word document."""
    record = store.get(kind, auth.user_id, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
    filename = export_filename(record.title)
    logger.info("Exporting %s record %s as %s", kind.value, record_id, filename)
    return Response(
        content=build_docx(record.title, record.content),
        media_type=DOCX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["router", "resolve_kind"]
