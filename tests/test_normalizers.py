"""
Tests for the normalizers and extractor text helpers.

Run with: pytest tests/ -v
"""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from parsing.normalizers import (
    CurrencyNormalizer,
    DateNormalizer,
    TextNormalizer,
    clean_text,
    find_date,
    normalize_amount,
    normalize_currency,
)
from extractor.utils import ExtractionResult, get_pdf_info, normalize_text


class TestDateNormalizer:
    """Tests for date parsing."""

    def setup_method(self):
        self.normalizer = DateNormalizer()

    def test_iso_format(self):
        assert self.normalizer.parse("2026-05-20") == date(2026, 5, 20)

    def test_month_names_without_strptime_formats(self):
        # Month names still parse when strptime cannot read them (non-English LC_TIME)
        numeric_only = DateNormalizer(formats=["%Y-%m-%d", "%d/%m/%Y"])
        assert numeric_only.parse("20 May 2026") == date(2026, 5, 20)
        assert numeric_only.parse("May 20, 2026") == date(2026, 5, 20)

    def test_slash_format_is_day_first(self):
        assert self.normalizer.parse("03/04/2026") == date(2026, 4, 3)

    def test_month_first_when_day_first_impossible(self):
        assert self.normalizer.parse("12/25/2026") == date(2026, 12, 25)

    def test_long_month_name(self):
        assert self.normalizer.parse("15 June 2026") == date(2026, 6, 15)

    def test_us_long_format(self):
        assert self.normalizer.parse("June 15, 2026") == date(2026, 6, 15)

    def test_invalid_date(self):
        assert self.normalizer.parse("not a date") is None

    def test_empty_input(self):
        assert self.normalizer.parse("") is None

    def test_find_date_in_window(self):
        assert find_date("Wed 12 Feb 2026 from 14:00") == date(2026, 2, 12)

    def test_find_date_without_date(self):
        assert find_date("from 14:00 until 12:00") is None


class TestCurrencyNormalizer:
    """Tests for amount and currency normalization."""

    def setup_method(self):
        self.normalizer = CurrencyNormalizer()

    def test_plain_number(self):
        assert self.normalizer.normalize_amount("150") == Decimal("150")

    def test_thousands_comma(self):
        assert self.normalizer.normalize_amount("9,600") == Decimal("9600")

    def test_us_format(self):
        assert self.normalizer.normalize_amount("1,234.56") == Decimal("1234.56")

    def test_european_format(self):
        assert self.normalizer.normalize_amount("1.234,56") == Decimal("1234.56")

    def test_space_grouping(self):
        assert self.normalizer.normalize_amount("1 234.56") == Decimal("1234.56")

    def test_not_a_number(self):
        assert self.normalizer.normalize_amount("abc") is None
        assert self.normalizer.normalize_amount("") is None

    def test_egyptian_tokens(self):
        for token in ("LE", "L.E", "L.E.", "E.G.P", "le"):
            assert self.normalizer.normalize_code(token) == "EGP", token

    def test_symbols(self):
        assert normalize_currency("$") == "USD"
        assert normalize_currency("US$") == "USD"
        assert normalize_currency("€") == "EUR"
        assert normalize_currency("£") == "GBP"

    def test_arabic_pound(self):
        assert normalize_currency("ج.م") == "EGP"

    def test_lowercase_code(self):
        assert normalize_currency("usd") == "USD"

    def test_unknown_code_passes_through(self):
        assert normalize_currency("chf") == "CHF"

    def test_blank(self):
        assert normalize_currency("  ") is None
        assert normalize_currency(None) is None


class TestTextNormalizer:
    """Tests for captured-text cleanup."""

    def test_collapse_whitespace(self):
        assert TextNormalizer.clean("  Sarah \t  Johnson ") == "Sarah Johnson"

    def test_trailing_punctuation(self):
        assert clean_text("Sarah Johnson, ") == "Sarah Johnson"
        assert clean_text("Nile View Hotel -") == "Nile View Hotel"

    def test_leading_bom(self):
        assert clean_text("\ufeffSarah") == "Sarah"

    def test_empty(self):
        assert clean_text(None) == ""
        assert clean_text("   ") == ""


class TestExtractorText:
    """Tests for text-layer normalization helpers."""

    def test_non_breaking_hyphen(self):
        assert normalize_text("Check\u2011in") == "Check-in"

    def test_ligature(self):
        assert normalize_text("Con\ufb01rmation") == "Confirmation"

    def test_full_width_colon(self):
        assert normalize_text("Total\uff1a100") == "Total:100"

    def test_aggressive_collapses_spaces_and_lines(self):
        raw = "Guest   name: Sarah  \r\n\n\n\n  Check-in: 2026-05-20  "
        assert normalize_text(raw, aggressive=True) == "Guest name: Sarah\n\nCheck-in: 2026-05-20"

    def test_aggressive_drops_format_characters(self):
        assert normalize_text("Total\u200b: 100", aggressive=True) == "Total: 100"

    def test_empty(self):
        assert normalize_text("") == ""

    def test_extraction_result_text(self):
        result = ExtractionResult(pages=["page one", "", "page three"])
        assert result.text == "page one\n\npage three"
        assert result.has_text

    def test_extraction_result_blank(self):
        assert not ExtractionResult(pages=["  ", ""]).has_text

    def test_pdf_info(self, tmp_path):
        path = tmp_path / "booking.pdf"
        path.write_bytes(b"%PDF-1.4\n%%EOF")
        info = get_pdf_info(path)
        assert info['exists']
        assert info['has_pdf_header']
        assert info['size_bytes'] == path.stat().st_size

    def test_pdf_info_missing(self, tmp_path):
        info = get_pdf_info(tmp_path / "missing.pdf")
        assert not info['exists']


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
