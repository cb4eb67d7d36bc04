"""
Tests for the reservation validation rules.

Run with: pytest tests/ -v
"""

import sys
from datetime import date
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from parsing.models import ExtractedReservationData
from validation import (
    FindingRule,
    FindingSeverity,
    ReservationRule,
    ReservationValidator,
    has_blocking,
    is_insufficient,
    validate_reservation,
)

BUSINESS_DATE = date(2026, 6, 1)


def reservation(**fields) -> ExtractedReservationData:
    return ExtractedReservationData(**fields)


class TestReservationValidator:
    """Tests for the cross-field rules."""

    def setup_method(self):
        self.validator = ReservationValidator()

    def test_clean_record(self):
        data = reservation(
            guest_name="Sarah Johnson",
            check_in=date(2026, 6, 15),
            check_out=date(2026, 6, 19),
        )
        assert self.validator.validate(data, nights=4, business_date=BUSINESS_DATE) == []

    def test_date_order(self):
        data = reservation(
            guest_name="Sarah Johnson",
            check_in=date(2026, 6, 19),
            check_out=date(2026, 6, 15),
        )
        findings = self.validator.validate(data, business_date=BUSINESS_DATE)

        assert [f.rule for f in findings] == [FindingRule.DATE_ORDER]
        assert findings[0].severity == FindingSeverity.BLOCKING
        assert findings[0].message == "Check-out date must be after check-in date."

    def test_same_day_is_out_of_order(self):
        data = reservation(check_in=date(2026, 6, 15), check_out=date(2026, 6, 15))
        findings = self.validator.validate(data, business_date=BUSINESS_DATE)
        assert [f.rule for f in findings] == [FindingRule.DATE_ORDER]

    def test_nights_mismatch(self):
        data = reservation(check_in=date(2026, 6, 15), check_out=date(2026, 6, 19))
        findings = self.validator.validate(data, nights=3, business_date=BUSINESS_DATE)

        assert [f.rule for f in findings] == [FindingRule.NIGHTS_MISMATCH]
        assert findings[0].severity == FindingSeverity.ADVISORY
        assert findings[0].message == "Nights mismatch: document says 3, calculated 4."

    def test_nights_ignored_without_both_dates(self):
        data = reservation(booking_number="4021337895", check_in=date(2026, 6, 15))
        assert self.validator.validate(data, nights=3, business_date=BUSINESS_DATE) == []

    def test_minimum_data(self):
        data = reservation(check_in=date(2026, 6, 15), total_price=100)
        findings = self.validator.validate(data, business_date=BUSINESS_DATE)

        assert [f.rule for f in findings] == [FindingRule.MINIMUM_DATA]
        assert findings[0].message == "Insufficient data: need dates or guest/booking identifier."
        assert is_insufficient(findings)

    def test_booking_number_alone_is_enough(self):
        data = reservation(booking_number="4021337895")
        assert self.validator.validate(data, business_date=BUSINESS_DATE) == []

    def test_dates_alone_are_enough(self):
        data = reservation(check_in=date(2026, 6, 15), check_out=date(2026, 6, 19))
        assert self.validator.validate(data, business_date=BUSINESS_DATE) == []

    def test_plausibility_window(self):
        data = reservation(guest_name="Sarah Johnson", check_in=date(2040, 1, 1))
        findings = self.validator.validate(data, business_date=BUSINESS_DATE)

        assert [f.rule for f in findings] == [FindingRule.PLAUSIBILITY_WINDOW]
        assert findings[0].message == (
            "Check-in date 2040-01-01 seems unreasonable (outside 10-year range)."
        )

    def test_plausibility_window_edges(self):
        inside = reservation(guest_name="A B", check_in=date(2036, 6, 1))
        outside = reservation(guest_name="A B", check_in=date(2036, 6, 2))

        assert self.validator.validate(inside, business_date=BUSINESS_DATE) == []
        assert len(self.validator.validate(outside, business_date=BUSINESS_DATE)) == 1

    def test_configurable_window(self):
        validator = ReservationValidator(plausibility_years=1)
        data = reservation(guest_name="A B", check_in=date(2028, 1, 1))
        findings = validator.validate(data, business_date=BUSINESS_DATE)
        assert "outside 1-year range" in findings[0].message

    def test_findings_in_rule_order(self):
        data = reservation(check_in=date(2045, 6, 19), check_out=date(2045, 6, 15))
        findings = self.validator.validate(data, nights=2, business_date=BUSINESS_DATE)

        assert [f.rule for f in findings] == [
            FindingRule.DATE_ORDER,
            FindingRule.NIGHTS_MISMATCH,
            FindingRule.PLAUSIBILITY_WINDOW,
        ]
        assert has_blocking(findings)
        assert not is_insufficient(findings)

    def test_custom_rule(self):
        class NoPriceRule(ReservationRule):
            rule = FindingRule.MINIMUM_DATA
            severity = FindingSeverity.ADVISORY

            def validate(self, data, context):
                return [] if data.total_price else [self.finding("No price found.")]

        self.validator.add_rule(NoPriceRule())
        findings = self.validator.validate(reservation(booking_number="ABCD1"), business_date=BUSINESS_DATE)
        assert [f.message for f in findings] == ["No price found."]

    def test_finding_serialization(self):
        data = reservation(guest_name="A B", check_in=date(2026, 6, 19), check_out=date(2026, 6, 15))
        finding = validate_reservation(data, business_date=BUSINESS_DATE)[0]

        assert finding.to_dict() == {
            'rule': 'date_order',
            'severity': 'BLOCKING',
            'message': "Check-out date must be after check-in date.",
        }
        assert str(finding) == "[BLOCKING] Check-out date must be after check-in date."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
