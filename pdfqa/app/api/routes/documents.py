"""Document endpoints - POST /api/upload-pdf, GET /api/my-pdfs."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from pdfqa.app.api.auth import get_current_context, get_services
from pdfqa.app.container import Services
from pdfqa.app.db.context import RequestContext

router = APIRouter(prefix="/api", tags=["documents"])


class UploadedPdf(BaseModel):
    """Identifier and display name of a stored upload."""

    id: UUID
    name: str


class UploadResponse(BaseModel):
    """Response for POST /api/upload-pdf."""

    ok: bool = True
    pdf: UploadedPdf


class PdfListItem(BaseModel):
    """Listing entry; extracted text is never included."""

    id: UUID
    filename: str
    originalName: str
    uploadedAt: datetime


class PdfListResponse(BaseModel):
    """Response for GET /api/my-pdfs."""

    ok: bool = True
    pdfs: list[PdfListItem]


@router.post("/upload-pdf", response_model=UploadResponse)
async def upload_pdf(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
    pdf: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse:
    """Upload a PDF, extract its text and store it for the caller.

    Reads at most one byte past the size ceiling so oversized uploads are
    rejected without buffering them whole.
    """
    data: bytes | None = None
    filename: str | None = None
    if pdf is not None:
        try:
            data = await pdf.read(services.settings.max_upload_bytes + 1)
            filename = pdf.filename
        finally:
            await pdf.close()

    document = await services.documents.upload(ctx, data, filename)
    return UploadResponse(pdf=UploadedPdf(id=document.document_id, name=document.original_name))


@router.get("/my-pdfs", response_model=PdfListResponse)
async def my_pdfs(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    services: Annotated[Services, Depends(get_services)],
) -> PdfListResponse:
    """List the caller's documents, newest first."""
    documents = await services.documents.list_documents(ctx)
    return PdfListResponse(
        pdfs=[
            PdfListItem(
                id=doc.document_id,
                filename=doc.stored_name,
                originalName=doc.original_name,
                uploadedAt=doc.uploaded_at,
            )
            for doc in documents
        ]
    )
