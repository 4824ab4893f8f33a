"""
Document to text conversion for uploaded resumes (PDF, DOCX).
"""
import io
import logging
from typing import Optional

import fitz  # PyMuPDF
from docx import Document

logger = logging.getLogger(__name__)

PDF_TYPES = {"application/pdf"}
WORD_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}
EXTENSION_TYPES = {
    ".pdf": "application/pdf",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".doc": "application/msword",
}


class UnsupportedDocumentError(ValueError):
    """Raised for content types the converter cannot read."""


def resolve_content_type(content_type: Optional[str], filename: Optional[str] = None) -> str:
    """Pick the document type, falling back to the file extension.

    Browsers often send ``application/octet-stream`` for Word files, so the
    extension wins whenever the declared type is not one we read.
    """
    if content_type in PDF_TYPES or content_type in WORD_TYPES:
        return content_type
    if filename:
        lowered = filename.lower()
        for extension, mapped in EXTENSION_TYPES.items():
            if lowered.endswith(extension):
                return mapped
    return content_type or ""


def pdf_to_text(pdf_bytes: bytes) -> str:
    """Extract the text layer of every page using PyMuPDF."""
    pages = []
    pdf_document = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        for page in pdf_document:
            pages.append(page.get_text("text"))
    finally:
        pdf_document.close()
    return "\n".join(pages)


def docx_to_text(docx_bytes: bytes) -> str:
    """Extract paragraph and table text from a Word document."""
    document = Document(io.BytesIO(docx_bytes))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text.strip() for cell in row.cells))
    return "\n".join(lines)


def extract_text(content: bytes, content_type: str) -> str:
    """Convert a supported document to plain text.

    Raises:
        UnsupportedDocumentError: content type is neither PDF nor Word.
    """
    if content_type in PDF_TYPES:
        return pdf_to_text(content)
    if content_type in WORD_TYPES:
        # Legacy binary .doc files are not zip archives; python-docx rejects
        # them and the caller reports the conversion failure.
        return docx_to_text(content)
    raise UnsupportedDocumentError("Unsupported file format")
