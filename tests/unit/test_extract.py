"""Tests for PDF text extraction."""

from pdfqa.app.docs.extract import PdfTextExtractor, looks_like_pdf


def test_extracts_text_from_pdf(make_pdf) -> None:
    """Test that page text is extracted."""
    data = make_pdf("Invoice 7", "Total: 42")

    extracted = PdfTextExtractor().extract(data)

    assert "Invoice 7" in extracted.text
    assert "Total: 42" in extracted.text


def test_unparseable_pdf_yields_empty_text() -> None:
    """Test that a corrupt PDF is not an error."""
    extracted = PdfTextExtractor().extract(b"%PDF-1.4\nthis is not really a pdf")

    assert extracted.text == ""


def test_looks_like_pdf() -> None:
    """Test the PDF signature check."""
    assert looks_like_pdf(b"%PDF-1.7\n...")
    assert not looks_like_pdf(b"PK\x03\x04")
    assert not looks_like_pdf(b"")
