"""
Extractor Utilities

Shared data structures and text helpers for the PDF text layer.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


@dataclass
class ExtractionResult:
    """
    Text recovered from a PDF, one entry per page in reading order.

    Attributes:
        pages: Raw text of each extracted page
        backend: Library that produced the text ("pdfplumber" or "pymupdf")
        total_pages: Page count of the whole document
        warnings: Non-fatal problems (e.g. a page that failed to decode)
    """
    pages: list[str] = field(default_factory=list)
    backend: Optional[str] = None
    total_pages: int = 0
    warnings: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "\n".join(self.pages)

    @property
    def has_text(self) -> bool:
        return any(page.strip() for page in self.pages)

    def to_dict(self) -> dict[str, Any]:
        return {
            'backend': self.backend,
            'total_pages': self.total_pages,
            'pages_extracted': len(self.pages),
            'char_count': len(self.text),
            'warnings': self.warnings,
            'metadata': self.metadata,
        }


_LIGATURES = {
    'ﬁ': 'fi',
    'ﬂ': 'fl',
    'ﬀ': 'ff',
    'ﬃ': 'ffi',
    'ﬄ': 'ffl',
    'ﬅ': 'st',
    'ﬆ': 'st',
}

# Smart quotes, dashes and exotic spaces break label regexes
_CHARACTER_MAP = {
    '“': '"', '”': '"',
    '‘': "'", '’': "'",
    '‐': '-', '‑': '-', '–': '-', '—': '-',
    '…': '...',
    '\u00a0': ' ',   # no-break space
    '\u2002': ' ',   # en space
    '\u2003': ' ',   # em space
    '\u2009': ' ',   # thin space
    '\u202f': ' ',   # narrow no-break space
    '：': ':',
}


def normalize_text(text: str, aggressive: bool = False) -> str:
    """
    Normalize extracted text for label matching.

    Why this matters:
    - Composed vs decomposed Unicode ("é" vs "e" + accent)
    - Ligatures (ﬁ) split words the regexes look for
    - Non-breaking hyphens in "Check‑in" and non-breaking spaces in amounts

    Args:
        text: Raw extracted text
        aggressive: If True, also drop control characters and collapse
            runs of spaces and blank lines

    Returns:
        Normalized text; line breaks are preserved
    """
    if not text:
        return ""

    text = unicodedata.normalize('NFC', text)

    for ligature, replacement in _LIGATURES.items():
        text = text.replace(ligature, replacement)

    for char, replacement in _CHARACTER_MAP.items():
        text = text.replace(char, replacement)

    text = text.replace('\r\n', '\n').replace('\r', '\n')

    if aggressive:
        # Drop control and format characters except newline/tab
        text = ''.join(
            char for char in text
            if char in '\n\t' or not unicodedata.category(char).startswith('C')
        )
        text = re.sub(r'[ \t]+', ' ', text)
        text = re.sub(r'\n{3,}', '\n\n', text)
        text = '\n'.join(line.strip() for line in text.split('\n'))

    return text


def get_pdf_info(pdf_path: Path) -> dict[str, Any]:
    """
    Basic file facts, without parsing the PDF.

    Used for logging before the document is opened.
    """
    pdf_path = Path(pdf_path)
    info = {
        'path': str(pdf_path),
        'filename': pdf_path.name,
        'size_bytes': 0,
        'exists': False,
        'has_pdf_header': False,
    }

    if pdf_path.is_file():
        info['exists'] = True
        info['size_bytes'] = pdf_path.stat().st_size
        with open(pdf_path, 'rb') as f:
            info['has_pdf_header'] = f.read(1024).lstrip().startswith(b'%PDF')

    return info
