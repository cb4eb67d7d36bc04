"""
Normalizers Module

Turns raw captured fragments into typed values. Every field extractor goes
through these helpers so a value is normalized the same way no matter which
label produced it.

What normalization does:
- Amounts → Decimal ("1.234,56" and "1,234.56" both become 1234.56)
- Currency tokens → ISO 4217 codes ("L.E" → EGP, "$" → USD)
- Captured text → single-spaced, trimmed, no BOM, no trailing punctuation
- Date fragments → datetime.date

Why amounts need care:
OTA confirmations are rendered in the guest's locale. "9,600 EGP" is nine
thousand six hundred, while "1.234,56 EUR" uses the comma as the decimal
point. The rule below looks at which separator comes last and how many
characters follow it.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from dateutil import parser as date_parser
from loguru import logger

from .labels import CURRENCY_NORMALIZATION


_LEADING_INVISIBLES = re.compile(r'^[\ufeff\u200b\u200c\u200d\u2060]+')
_WHITESPACE = re.compile(r'\s+')
_TRAILING_PUNCTUATION = re.compile(r'[,;:\-]+$')


class TextNormalizer:
    """Normalizes captured text values."""

    @staticmethod
    def clean(text: Optional[str]) -> str:
        """
        Clean a captured fragment.

        - Strip leading BOM / zero-width characters
        - Collapse whitespace runs to a single space
        - Strip trailing ",;:-"
        """
        if not text or not text.strip():
            return ""

        text = _LEADING_INVISIBLES.sub('', text)
        text = _WHITESPACE.sub(' ', text).strip()
        return _TRAILING_PUNCTUATION.sub('', text).strip()


class DateNormalizer:
    """Parses date fragments found next to a date label."""

    # Literal shapes searched for inside the label window, in order
    DATE_SHAPES = (
        r'\d{4}-\d{2}-\d{2}',
        r'\d{1,2}/\d{1,2}/\d{4}',
        r'\d{1,2}-\d{1,2}-\d{4}',
        r'\d{1,2}\s+[^\W\d_]{3,9}\.?\s+\d{4}',
        r'[^\W\d_]{3,9}\.?\s+\d{1,2},?\s+\d{4}',
    )

    def __init__(self, formats: Optional[list[str]] = None):
        """
        Initialize date normalizer.

        Args:
            formats: strptime formats tried before the generic parser.
                Day-first formats come before month-first ones.
        """
        self.formats = formats or [
            "%Y-%m-%d",
            "%d/%m/%Y",
            "%m/%d/%Y",
            "%d-%m-%Y",
            "%m-%d-%Y",
            "%d %b %Y",
            "%d %B %Y",
            "%b %d, %Y",
            "%B %d, %Y",
            "%b %d %Y",
            "%B %d %Y",
        ]

    def parse(self, value: str) -> Optional[date]:
        """
        Parse one date candidate.

        Explicit formats first so "03/04/2026" is always read day-first,
        then dateutil for spellings the list does not cover ("Sept 5 2026").
        Month-name formats follow the process locale; under a non-English
        LC_TIME those names fall through to dateutil, which reads English.
        """
        if not value:
            return None

        value = value.strip()

        for fmt in self.formats:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue

        try:
            return date_parser.parse(value, dayfirst=True).date()
        except (ValueError, OverflowError):
            logger.debug(f"Could not parse date candidate: {value!r}")
            return None

    def find_date(self, window: str) -> Optional[date]:
        """Return the first date in a label window, trying each shape in order."""
        for shape in self.DATE_SHAPES:
            match = re.search(shape, window, re.IGNORECASE)
            if match:
                parsed = self.parse(match.group(0))
                if parsed:
                    return parsed
        return None


class CurrencyNormalizer:
    """Normalizes amounts and currency tokens."""

    def normalize_amount(self, raw: Optional[str]) -> Optional[Decimal]:
        """
        Convert an amount string to Decimal.

        When the last comma comes after the last dot and at most two digits
        follow it, the comma is the decimal point ("1.234,56"). Otherwise
        commas are thousands separators ("1,234.56", "9,600").

        Returns:
            Decimal value, or None when the string is not a number
        """
        if not raw or not raw.strip():
            return None

        value = _WHITESPACE.sub('', raw)
        last_comma = value.rfind(',')
        last_dot = value.rfind('.')

        if last_comma > last_dot and len(value) - last_comma <= 3:
            value = value.replace('.', '').replace(',', '.')
        else:
            value = value.replace(',', '')

        try:
            amount = Decimal(value)
        except InvalidOperation:
            return None

        if not amount.is_finite():
            return None
        return amount

    def normalize_code(self, raw: Optional[str]) -> Optional[str]:
        """
        Map a currency token to its ISO 4217 code.

        Unknown tokens pass through upper-cased, on the assumption that
        they already are a code.
        """
        if not raw or not raw.strip():
            return None

        token = raw.strip().upper()
        undotted = token.replace('.', '')
        if undotted in CURRENCY_NORMALIZATION:
            return CURRENCY_NORMALIZATION[undotted]
        if token in CURRENCY_NORMALIZATION:
            return CURRENCY_NORMALIZATION[token]
        return undotted


_text = TextNormalizer()
_dates = DateNormalizer()
_currency = CurrencyNormalizer()


# Convenience functions
def clean_text(raw: Optional[str]) -> str:
    """Clean a captured text fragment."""
    return _text.clean(raw)


def normalize_amount(raw: Optional[str]) -> Optional[Decimal]:
    """Convert an amount string to Decimal."""
    return _currency.normalize_amount(raw)


def normalize_currency(raw: Optional[str]) -> Optional[str]:
    """Map a currency token to ISO 4217."""
    return _currency.normalize_code(raw)


def parse_date(value: str) -> Optional[date]:
    """Parse a single date candidate."""
    return _dates.parse(value)


def find_date(window: str) -> Optional[date]:
    """Return the first date found in a text window."""
    return _dates.find_date(window)
