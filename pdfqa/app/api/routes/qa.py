"""QA endpoints - POST /api/ask, GET /api/conversations."""

import logging
import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pdfqa.app.api.auth import get_current_context, get_services
from pdfqa.app.container import Services
from pdfqa.app.db.context import RequestContext
from pdfqa.app.errors import NotFoundError

router = APIRouter(prefix="/api", tags=["qa"])
logger = logging.getLogger(__name__)


class AskRequest(BaseModel):
    """Request body for POST /api/ask."""

    pdfId: str | None = None
    question: str | None = None


class AskResponse(BaseModel):
    """Response for POST /api/ask."""

    ok: bool = True
    answer: str
    convId: uuid.UUID


class ConversationItem(BaseModel):
    """One logged exchange."""

    id: uuid.UUID
    pdfId: uuid.UUID
    question: str
    answer: str
    createdAt: datetime


class ConversationListResponse(BaseModel):
    """Response for GET /api/conversations."""

    ok: bool = True
    convs: list[ConversationItem]


def _parse_document_id(raw: str | None) -> uuid.UUID | None:
    """Parse pdfId; an unparseable ID cannot name an owned document."""
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError as e:
        raise NotFoundError("pdf_not_found") from e


@router.post("/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> AskResponse:
    """Answer a question about one of the caller's PDFs and log the exchange."""
    document_id = _parse_document_id(request.pdfId)

    logger.info(f"[POST /api/ask] identity_id={ctx.identity_id}, pdf_id={document_id}")

    result = await services.qa.ask(ctx, document_id, request.question)
    return AskResponse(answer=result.answer, convId=result.conversation_id)


@router.get("/conversations", response_model=ConversationListResponse)
async def conversations(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> ConversationListResponse:
    """All of the caller's exchanges, newest first."""
    entries = await services.qa.list_conversations(ctx)
    return ConversationListResponse(
        convs=[
            ConversationItem(
                id=entry.conversation_id,
                pdfId=entry.document_id,
                question=entry.question,
                answer=entry.answer,
                createdAt=entry.created_at,
            )
            for entry in entries
        ]
    )
