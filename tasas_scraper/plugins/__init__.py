"""
Plugins for document formats beyond HTML.

- pdf: PDF text extraction with pdfplumber
"""

from .pdf import PdfExtractionError, extract_pdf_pages

__all__ = [
    "PdfExtractionError",
    "extract_pdf_pages",
]
