"""
PDF Text Layer Extraction Module

Reads the native text layer of booking PDFs, page by page, for at most the
first few pages. It uses a two-library approach:
1. pdfplumber (primary) - keeps label/value order on OTA confirmations
2. PyMuPDF/fitz (fallback) - tolerates some broken files pdfminer rejects

Why multiple libraries?
Booking confirmations are produced by many generators (OTA mailers, hotel
PMS exports, "print to PDF" from browsers). No single library reads every
one of them. pdfplumber goes first; PyMuPDF is tried when pdfplumber yields
no text or fails for a reason other than encryption.

Failures surface as typed exceptions so callers never have to parse
messages themselves:
- EncryptedDocumentError: password required / decryption failed
- MalformedDocumentError: corrupt or unreadable file structure
- DocumentLoadError: anything else
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from .utils import ExtractionResult, get_pdf_info


DEFAULT_MAX_PAGES = 5

ENCRYPTION_KEYWORDS = ('password', 'encrypt', 'decrypt')
CORRUPTION_KEYWORDS = ('invalid', 'corrupt', 'malformed')


class DocumentLoadError(Exception):
    """A PDF could not be opened or read."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class EncryptedDocumentError(DocumentLoadError):
    """The PDF is password-protected or could not be decrypted."""


class MalformedDocumentError(DocumentLoadError):
    """The PDF structure is corrupt or invalid."""


def _error_chain(error: BaseException):
    """The error itself, then every exception it wraps."""
    seen = set()
    pending = [error]
    while pending:
        current = pending.pop(0)
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.append(current.__cause__)
        pending.append(current.__context__)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))


def classify_by_message(error: BaseException, path: Optional[Path] = None) -> DocumentLoadError:
    """
    Classify an arbitrary exception by its message.

    Used when the backend's exception type does not say what went wrong.
    """
    if isinstance(error, DocumentLoadError):
        return error

    message = str(error) or type(error).__name__
    lowered = message.lower()
    if any(word in lowered for word in ENCRYPTION_KEYWORDS):
        return EncryptedDocumentError(message, path)
    if any(word in lowered for word in CORRUPTION_KEYWORDS):
        return MalformedDocumentError(message, path)
    return DocumentLoadError(message, path)


class PDFTextExtractor:
    """
    Extracts page texts from PDF text layers using multiple backends.

    Usage:
        extractor = PDFTextExtractor()
        pages = extractor.extract_pages(Path("booking.pdf"), max_pages=5)
        text = "\\n".join(pages)
    """

    def __init__(self, primary_backend: str = "pdfplumber"):
        """
        Initialize the text extractor.

        Args:
            primary_backend: Which library to try first ("pdfplumber" or "pymupdf")
        """
        if primary_backend not in ("pdfplumber", "pymupdf"):
            raise ValueError(f"Unknown PDF backend: {primary_backend}")
        self.primary_backend = primary_backend
        self._check_dependencies()

    def _check_dependencies(self):
        """Verify required libraries are available."""
        self.has_pdfplumber = False
        self.has_pymupdf = False

        try:
            import pdfplumber  # noqa: F401
            self.has_pdfplumber = True
        except ImportError:
            logger.warning("pdfplumber not installed - falling back to PyMuPDF only")

        try:
            import fitz  # noqa: F401  PyMuPDF
            self.has_pymupdf = True
        except ImportError:
            logger.warning("PyMuPDF not installed - falling back to pdfplumber only")

        if not self.has_pdfplumber and not self.has_pymupdf:
            raise RuntimeError(
                "No PDF text extraction library available. "
                "Install pdfplumber or PyMuPDF: pip install pdfplumber PyMuPDF"
            )

    def _backends(self) -> list[str]:
        available = []
        if self.has_pdfplumber:
            available.append("pdfplumber")
        if self.has_pymupdf:
            available.append("pymupdf")
        available.sort(key=lambda name: name != self.primary_backend)
        return available

    def extract_pages(self, pdf_path: Path, max_pages: int = DEFAULT_MAX_PAGES) -> list[str]:
        """
        Page texts in reading order, for at most max_pages pages.

        Raises:
            EncryptedDocumentError, MalformedDocumentError, DocumentLoadError
        """
        return self.extract_text(pdf_path, max_pages).pages

    def extract_text(self, pdf_path: Path, max_pages: int = DEFAULT_MAX_PAGES) -> ExtractionResult:
        """
        Extract text from a PDF file.

        The primary backend is tried first. The other one is used when the
        primary returns no text or fails for any reason except encryption.

        Args:
            pdf_path: Path to the PDF file
            max_pages: Number of leading pages to read

        Returns:
            ExtractionResult with one text entry per page

        Raises:
            EncryptedDocumentError, MalformedDocumentError, DocumentLoadError
        """
        pdf_path = Path(pdf_path)
        logger.info(f"Extracting text from: {pdf_path}")
        logger.debug(f"File info: {get_pdf_info(pdf_path)}")

        first_error: Optional[DocumentLoadError] = None
        result: Optional[ExtractionResult] = None

        for backend in self._backends():
            try:
                if backend == "pdfplumber":
                    result = self._extract_with_pdfplumber(pdf_path, max_pages)
                else:
                    result = self._extract_with_pymupdf(pdf_path, max_pages)
            except EncryptedDocumentError:
                raise
            except DocumentLoadError as e:
                logger.warning(f"{backend} could not read {pdf_path.name}: {e}")
                first_error = first_error or e
                continue

            if result.has_text:
                return result
            logger.debug(f"{backend} returned no text, trying next backend")

        if result is not None:
            return result
        raise first_error

    def _classify(self, error: Exception, pdf_path: Path) -> DocumentLoadError:
        """Map a backend exception to a typed load error, by type first."""
        for err in _error_chain(error):
            if isinstance(err, DocumentLoadError):
                return err

            if self.has_pdfplumber:
                from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect
                from pdfminer.pdfparser import PDFSyntaxError

                if isinstance(err, (PDFPasswordIncorrect, PDFEncryptionError)):
                    return EncryptedDocumentError(str(err) or "PDF requires a password", pdf_path)
                if isinstance(err, PDFSyntaxError):
                    return MalformedDocumentError(str(err) or "PDF syntax error", pdf_path)

            if self.has_pymupdf:
                import fitz

                file_data_error = getattr(fitz, 'FileDataError', None)
                if file_data_error is not None and isinstance(err, file_data_error):
                    return MalformedDocumentError(str(err), pdf_path)

        return classify_by_message(error, pdf_path)

    def _extract_with_pdfplumber(self, pdf_path: Path, max_pages: int) -> ExtractionResult:
        """Extract text using pdfplumber."""
        import pdfplumber

        result = ExtractionResult(backend="pdfplumber")

        try:
            with pdfplumber.open(pdf_path) as pdf:
                result.total_pages = len(pdf.pages)

                for idx, page in enumerate(pdf.pages[:max_pages]):
                    try:
                        text = page.extract_text(x_tolerance=3, y_tolerance=3) or ""
                    except Exception as e:
                        # A failed page is kept empty so page order is preserved
                        if isinstance(self._classify(e, pdf_path), EncryptedDocumentError):
                            raise
                        result.warnings.append(f"Page {idx + 1} extraction failed: {e}")
                        logger.warning(f"Failed to extract page {idx + 1}: {e}")
                        text = ""
                    result.pages.append(text)

        except Exception as e:
            raise self._classify(e, pdf_path) from e

        return result

    def _extract_with_pymupdf(self, pdf_path: Path, max_pages: int) -> ExtractionResult:
        """Extract text using PyMuPDF (fitz)."""
        import fitz

        result = ExtractionResult(backend="pymupdf")

        try:
            doc = fitz.open(pdf_path)
        except Exception as e:
            raise self._classify(e, pdf_path) from e

        try:
            if doc.needs_pass:
                raise EncryptedDocumentError("PDF is password-protected", pdf_path)

            result.total_pages = len(doc)
            for idx in range(min(len(doc), max_pages)):
                try:
                    text = doc[idx].get_text("text") or ""
                except Exception as e:
                    result.warnings.append(f"Page {idx + 1} extraction failed: {e}")
                    logger.warning(f"Failed to extract page {idx + 1}: {e}")
                    text = ""
                result.pages.append(text)
        finally:
            doc.close()

        return result


def extract_pages_simple(pdf_path: Path, max_pages: int = DEFAULT_MAX_PAGES) -> list[str]:
    """Convenience function: page texts with the default backend order."""
    return PDFTextExtractor().extract_pages(pdf_path, max_pages)
