"""
Parse error codes and their user-facing messages.

Codes are stable strings stored with the reservation and shown to reception
staff. Older records carry legacy codes (NO_TEXT_PDF, PROTECTED_PDF, ...);
normalize_error_code maps those onto the canonical set before lookup.
"""

from enum import Enum
from types import MappingProxyType
from typing import Optional, Union


class ParseErrorCode(str, Enum):
    """Canonical parse failure codes."""
    FILE_NOT_FOUND = 'FILE_NOT_FOUND'
    PDF_NO_TEXT = 'PDF_NO_TEXT'
    PDF_ENCRYPTED = 'PDF_ENCRYPTED'
    PDF_MALFORMED = 'PDF_MALFORMED'
    INSUFFICIENT_DATA = 'INSUFFICIENT_DATA'
    EMPTY_RESULT = 'EMPTY_RESULT'
    PARSING_ERROR = 'PARSING_ERROR'
    SERVER_ERROR = 'SERVER_ERROR'
    OCR_TIMEOUT = 'OCR_TIMEOUT'
    UNKNOWN = 'UNKNOWN'

    def __str__(self) -> str:
        return self.value


USER_MESSAGES = MappingProxyType({
    ParseErrorCode.FILE_NOT_FOUND: "The PDF file could not be found on the server.",
    ParseErrorCode.PDF_NO_TEXT: "PDF contains no extractable text. The file may be image-based or encrypted.",
    ParseErrorCode.PDF_ENCRYPTED: "PDF is password-protected or encrypted.",
    ParseErrorCode.PDF_MALFORMED: "The PDF file appears to be corrupted or malformed.",
    ParseErrorCode.INSUFFICIENT_DATA: "Could not extract minimum required fields from the document.",
    ParseErrorCode.EMPTY_RESULT: "Parser could not extract any data from the document.",
    ParseErrorCode.PARSING_ERROR: "An error occurred while parsing the PDF document.",
    ParseErrorCode.SERVER_ERROR: "An unexpected server error occurred during parsing.",
    ParseErrorCode.OCR_TIMEOUT: "OCR processing timed out. Please try again later.",
    ParseErrorCode.UNKNOWN: "An unknown error occurred during parsing.",
})

LEGACY_CODES = MappingProxyType({
    'NO_TEXT_PDF': ParseErrorCode.PDF_NO_TEXT,
    'PROTECTED_PDF': ParseErrorCode.PDF_ENCRYPTED,
    'NO_TEXT': ParseErrorCode.PDF_NO_TEXT,
    'ENCRYPTED': ParseErrorCode.PDF_ENCRYPTED,
    'MALFORMED': ParseErrorCode.PDF_MALFORMED,
    'TIMEOUT': ParseErrorCode.OCR_TIMEOUT,
    'ERROR': ParseErrorCode.SERVER_ERROR,
})

_CANONICAL = frozenset(code.value for code in ParseErrorCode)


def normalize_error_code(code: Optional[Union[str, ParseErrorCode]]) -> Optional[str]:
    """
    Map a stored error code onto the canonical set.

    Legacy codes are matched case-insensitively. Unknown codes are returned
    trimmed but otherwise unchanged; blank input gives None.
    """
    if code is None:
        return None
    value = str(code).strip()
    if not value:
        return None

    legacy = LEGACY_CODES.get(value.upper())
    if legacy is not None:
        return legacy.value
    return value


def is_legacy_code(code: Optional[str]) -> bool:
    return bool(code) and code.strip().upper() in LEGACY_CODES


def is_canonical_code(code: Optional[str]) -> bool:
    return bool(code) and code.strip() in _CANONICAL


def to_user_message(code: Optional[Union[str, ParseErrorCode]]) -> Optional[str]:
    """
    User-facing message for an error code.

    Returns:
        The catalog message, "Parsing error: <code>" for codes outside the
        catalog, or None when no code is given
    """
    if code is None or not str(code).strip():
        return None

    value = str(code).strip()
    if value in _CANONICAL:
        return USER_MESSAGES[ParseErrorCode(value)]
    return f"Parsing error: {value}"
