"""PDF text extraction."""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Protocol

import pypdf

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"


@dataclass(frozen=True)
class ExtractedText:
    """Plain text pulled from a document."""

    text: str


def looks_like_pdf(data: bytes) -> bool:
    """Check the PDF signature at the start of the file."""
    return data.startswith(PDF_MAGIC)


class TextExtractor(Protocol):
    """Converts an uploaded document into plain text."""

    def extract(self, data: bytes) -> ExtractedText:
        """Extract text; returns empty text rather than raising on unreadable input."""
        ...


class PdfTextExtractor:
    """pypdf-backed extractor; pages are joined with newlines."""

    def extract(self, data: bytes) -> ExtractedText:
        try:
            reader = pypdf.PdfReader(BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except pypdf.errors.PdfReadError as e:
            logger.warning(f"PDF parse failed, storing empty text: {e}")
            return ExtractedText(text="")
        except Exception as e:
            logger.warning(f"Unexpected error extracting PDF text: {type(e).__name__}: {e}")
            return ExtractedText(text="")

        return ExtractedText(text="\n".join(pages).strip())
