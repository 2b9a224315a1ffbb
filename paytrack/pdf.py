"""Text extraction from paystub files."""

import logging
from pathlib import Path

import PyPDF2

logger = logging.getLogger(__name__)


def read_pdf_text(pdf_path: Path) -> str:
    """Extract the text of every page of a PDF.

    Args:
        pdf_path: Path to the PDF file.

    Returns:
        Page texts joined by newlines.

    Raises:
        OSError: If the file cannot be read.
        PyPDF2.errors.PdfReadError: If the file is not a readable PDF.
    """
    pages: list[str] = []
    with open(pdf_path, "rb") as f:
        reader = PyPDF2.PdfReader(f)
        for page in reader.pages:
            pages.append(page.extract_text() or "")

    text = "\n".join(pages)
    logger.debug("Extracted %d chars from %d pages of %s", len(text), len(pages), pdf_path.name)
    return text


def read_paystub_text(path: Path) -> str:
    """Read paystub text from a PDF, or from a plain text file as-is."""
    if path.suffix.lower() == ".pdf":
        return read_pdf_text(path)
    return path.read_text(encoding="utf-8", errors="replace")
