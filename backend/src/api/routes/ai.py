"""HTTP API routes for AI drafting and AI-assisted edits."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ...models.ai import (
    EditProposal,
    EditRequest,
    GenerateRequest,
    GenerateResponse,
)
from ...models.record import Record
from ...services.ai_edit import (
    AIEditService,
    ProposalStore,
    get_ai_edit_service,
    get_proposal_store,
)
from ..middleware import AuthContext, get_auth_context
from .records import Kind, Store

logger = logging.getLogger(__name__)

router = APIRouter()

Auth = Annotated[AuthContext, Depends(get_auth_context)]
AI = Annotated[AIEditService, Depends(get_ai_edit_service)]
Proposals = Annotated[ProposalStore, Depends(get_proposal_store)]


@router.post("/api/generate", response_model=GenerateResponse)
async def generate_draft(request: GenerateRequest, auth: Auth, ai: AI):
    """Draft a new document from a free-text description."""
    return await ai.generate(request.prompt)


@router.post("/api/{kind}/{record_id}/ai-edit", response_model=EditProposal)
async def propose_edit(
    kind: Kind,
    record_id: str,
    request: EditRequest,
    auth: Auth,
    store: Store,
    ai: AI,
    proposals: Proposals,
):
    """Ask the model to revise a record; the result is held until accepted."""
    record = await asyncio.to_thread(store.get, kind, auth.user_id, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")

    proposal = await ai.propose(record.content, request.instruction)
    if proposal is not None:
        proposals.put(auth.user_id, kind, record_id, proposal)
    return EditProposal(record_id=record_id, proposal=proposal)


@router.post("/api/{kind}/{record_id}/ai-edit/accept", response_model=Record)
def accept_edit(
    kind: Kind, record_id: str, auth: Auth, store: Store, proposals: Proposals
):
    """Overwrite the record's content with the pending proposal."""
    proposal = proposals.get(auth.user_id, kind, record_id)
    if proposal is None:
        raise HTTPException(
            status_code=404,
            detail={"error": "no_proposal", "message": "No pending AI proposal for this record"},
        )

    store.update_content(kind, auth.user_id, record_id, proposal)
    proposals.pop(auth.user_id, kind, record_id)
    logger.info("Accepted AI proposal for %s record %s", kind.value, record_id)

    record = store.get(kind, auth.user_id, record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
    return record


@router.post("/api/{kind}/{record_id}/ai-edit/reject", status_code=204)
async def reject_edit(kind: Kind, record_id: str, auth: Auth, proposals: Proposals):
    """Discard the pending proposal. Stored content is not touched."""
    proposals.pop(auth.user_id, kind, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
