"""Document ingestion - validate, extract and persist uploaded PDFs."""

import asyncio
import logging
from pathlib import PurePath
from uuid import uuid4

from pdfqa.app.db.context import RequestContext
from pdfqa.app.db.repositories import DocumentRepository
from pdfqa.app.docs.extract import TextExtractor, looks_like_pdf
from pdfqa.app.errors import ValidationError
from pdfqa.app.models.documents import Document, DocumentSummary
from pdfqa.app.utils.clock import Clock, utc_now
from pdfqa.app.utils.metrics import PrometheusQAMetrics

logger = logging.getLogger(__name__)

ALLOWED_SUFFIX = ".pdf"


class DocumentService:
    """Upload and list owner-scoped documents."""

    def __init__(
        self,
        *,
        documents: DocumentRepository,
        extractor: TextExtractor,
        max_upload_bytes: int,
        clock: Clock = utc_now,
        metrics: PrometheusQAMetrics | None = None,
    ) -> None:
        self._documents = documents
        self._extractor = extractor
        self._max_upload_bytes = max_upload_bytes
        self._clock = clock
        self._metrics = metrics or PrometheusQAMetrics()

    async def upload(
        self, ctx: RequestContext, data: bytes | None, original_name: str | None
    ) -> Document:
        """Ingest an uploaded PDF.

        The bytes are only held for extraction; no copy of the binary is kept.

        Args:
            ctx: Request context (owner)
            data: Uploaded file content
            original_name: Client-side file name

        Returns:
            Persisted Document

        Raises:
            ValidationError: no_file, unsupported_type, too_large
        """
        if data is None or not original_name:
            raise ValidationError("no_file")

        if PurePath(original_name).suffix.lower() != ALLOWED_SUFFIX or not looks_like_pdf(data):
            self._metrics.inc_upload("unsupported_type")
            raise ValidationError("unsupported_type")

        if len(data) > self._max_upload_bytes:
            self._metrics.inc_upload("too_large")
            raise ValidationError("too_large")

        # pypdf is CPU-bound; keep it off the event loop
        extracted = await asyncio.to_thread(self._extractor.extract, data)

        document_id = uuid4()
        document = Document(
            document_id=document_id,
            owner_id=ctx.identity_id,
            stored_name=f"{document_id.hex}{ALLOWED_SUFFIX}",
            original_name=PurePath(original_name).name,
            extracted_text=extracted.text,
            uploaded_at=self._clock(),
        )
        await self._documents.add(document)
        self._metrics.inc_upload("success")

        logger.info(
            f"Stored document {document_id} ({len(data)} bytes, {len(extracted.text)} chars)"
        )
        return document

    async def list_documents(self, ctx: RequestContext) -> list[DocumentSummary]:
        """List the caller's documents, newest first, without text."""
        return await self._documents.list_recent(ctx)
