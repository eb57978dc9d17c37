"""
PDF text extraction using pdfplumber.

Bank rate sheets are small tabular PDFs; parsers only need their text,
page by page, to run regular expressions over it.
"""

import io
from typing import Union

import pdfplumber
import structlog

logger = structlog.get_logger(__name__)


class PdfExtractionError(RuntimeError):
    """Raised when a byte stream cannot be read as a PDF."""


def extract_pdf_pages(content: Union[bytes, bytearray]) -> list[str]:
    """
    Extract the text of every page of a PDF.

    Args:
        content: Raw PDF bytes

    Returns:
        One string per page (empty string for pages without text)

    Raises:
        PdfExtractionError: If the bytes are not a readable PDF
    """
    if not content:
        raise PdfExtractionError("Empty PDF content")

    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.error("pdf_extraction_failed", size=len(content), error=str(e))
        raise PdfExtractionError(f"Failed to extract PDF text: {e}") from e

    logger.debug(
        "pdf_extracted",
        pages=len(pages),
        chars=sum(len(page) for page in pages),
    )

    return pages
