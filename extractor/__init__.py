"""
Extractor Package

Text acquisition for booking PDFs: page texts from the native text layer,
plus typed errors for encrypted and corrupt files.

Usage:
    from extractor import PDFTextExtractor, EncryptedDocumentError

    text_ext = PDFTextExtractor()
    try:
        pages = text_ext.extract_pages(Path("booking.pdf"), max_pages=5)
    except EncryptedDocumentError:
        ...
"""

from .pdf_text import (
    PDFTextExtractor,
    DocumentLoadError,
    EncryptedDocumentError,
    MalformedDocumentError,
    classify_by_message,
    extract_pages_simple,
)
from .utils import (
    ExtractionResult,
    normalize_text,
    get_pdf_info,
)

__all__ = [
    'PDFTextExtractor',
    'DocumentLoadError',
    'EncryptedDocumentError',
    'MalformedDocumentError',
    'ExtractionResult',
    'classify_by_message',
    'normalize_text',
    'get_pdf_info',
    'extract_pages_simple',
]
