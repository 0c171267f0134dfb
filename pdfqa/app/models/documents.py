"""Document domain models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class DocumentSummary(BaseModel):
    """Document metadata without extracted text (safe for listings)."""

    document_id: UUID
    owner_id: UUID
    stored_name: str
    original_name: str
    uploaded_at: datetime


class Document(DocumentSummary):
    """Uploaded document with its extracted text."""

    extracted_text: str = ""

    def summary(self) -> DocumentSummary:
        return DocumentSummary.model_validate(self.model_dump(exclude={"extracted_text"}))
