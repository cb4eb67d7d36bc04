"""
Reservation Validation Rules

Cross-field business checks run over the extracted reservation data.

Field extractors only know whether one value looks right on its own. These
rules look at fields together:

1. Date order - check-out must be strictly after check-in (blocking)
2. Nights consistency - a nights count supplied by the caller must match
   the calendar days between the two dates (advisory)
3. Minimum viable record - both dates, or a guest name, or a booking
   number must be present (blocking)
4. Plausibility window - check-in within N years of the business date
   (advisory)

Findings are returned in rule order. The parser decides the outcome from
them: a violated minimum-viable-record rule fails the parse, anything else
becomes a partial success a reviewer can finish by hand.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from dateutil.relativedelta import relativedelta
from loguru import logger

from parsing.models import ExtractedReservationData


class FindingSeverity(Enum):
    """How a finding affects the parse outcome."""
    BLOCKING = auto()   # Record is wrong or unusable as extracted
    ADVISORY = auto()   # Record is usable, flag for review


class FindingRule(Enum):
    """The fixed set of cross-field rules."""
    DATE_ORDER = 'date_order'
    NIGHTS_MISMATCH = 'nights_mismatch'
    MINIMUM_DATA = 'minimum_data'
    PLAUSIBILITY_WINDOW = 'plausibility_window'


@dataclass(frozen=True)
class ValidationFinding:
    """A single rule violation."""
    rule: FindingRule
    severity: FindingSeverity
    message: str

    @property
    def is_blocking(self) -> bool:
        return self.severity == FindingSeverity.BLOCKING

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rule': self.rule.value,
            'severity': self.severity.name,
            'message': self.message,
        }

    def __str__(self) -> str:
        return f"[{self.severity.name}] {self.message}"


@dataclass(frozen=True)
class ValidationContext:
    """Inputs that do not come from the document itself."""
    business_date: date
    nights: Optional[int] = None
    plausibility_years: int = 10


class ReservationRule:
    """
    Base class for reservation rules.

    Subclasses set `rule` and `severity` and implement `validate`.
    """

    rule: FindingRule
    severity: FindingSeverity = FindingSeverity.ADVISORY

    def applies_to(self, data: ExtractedReservationData, context: ValidationContext) -> bool:
        return True

    def validate(
        self,
        data: ExtractedReservationData,
        context: ValidationContext,
    ) -> List[ValidationFinding]:
        raise NotImplementedError

    def finding(self, message: str) -> ValidationFinding:
        return ValidationFinding(rule=self.rule, severity=self.severity, message=message)


class DateOrderRule(ReservationRule):
    rule = FindingRule.DATE_ORDER
    severity = FindingSeverity.BLOCKING

    def applies_to(self, data, context):
        return data.has_dates

    def validate(self, data, context):
        if data.check_out <= data.check_in:
            return [self.finding("Check-out date must be after check-in date.")]
        return []


class NightsConsistencyRule(ReservationRule):
    rule = FindingRule.NIGHTS_MISMATCH
    severity = FindingSeverity.ADVISORY

    def applies_to(self, data, context):
        return context.nights is not None and data.has_dates

    def validate(self, data, context):
        calculated = data.nights
        if calculated != context.nights:
            return [self.finding(
                f"Nights mismatch: document says {context.nights}, calculated {calculated}."
            )]
        return []


class MinimumDataRule(ReservationRule):
    """Both dates, or at least one identifier (guest name or booking number)."""

    rule = FindingRule.MINIMUM_DATA
    severity = FindingSeverity.BLOCKING

    def validate(self, data, context):
        if not data.has_dates and not data.has_identifier:
            return [self.finding("Insufficient data: need dates or guest/booking identifier.")]
        return []


class PlausibilityWindowRule(ReservationRule):
    rule = FindingRule.PLAUSIBILITY_WINDOW
    severity = FindingSeverity.ADVISORY

    def applies_to(self, data, context):
        return data.check_in is not None

    def validate(self, data, context):
        span = relativedelta(years=context.plausibility_years)
        earliest = context.business_date - span
        latest = context.business_date + span

        if data.check_in < earliest or data.check_in > latest:
            return [self.finding(
                f"Check-in date {data.check_in.isoformat()} seems unreasonable "
                f"(outside {context.plausibility_years}-year range)."
            )]
        return []


class ReservationValidator:
    """
    Applies the reservation rules in order.

    Usage:
        validator = ReservationValidator()
        findings = validator.validate(data, nights=3, business_date=date(2026, 1, 1))
        for finding in findings:
            print(finding)
    """

    def __init__(self, plausibility_years: int = 10):
        self.plausibility_years = plausibility_years
        self.rules: List[ReservationRule] = [
            DateOrderRule(),
            NightsConsistencyRule(),
            MinimumDataRule(),
            PlausibilityWindowRule(),
        ]

    def add_rule(self, rule: ReservationRule) -> None:
        self.rules.append(rule)

    def validate(
        self,
        data: ExtractedReservationData,
        nights: Optional[int] = None,
        business_date: Optional[date] = None,
    ) -> List[ValidationFinding]:
        """
        Validate extracted data.

        Args:
            data: Extracted reservation fields
            nights: Nights count known to the caller, if any
            business_date: Operative "today"; defaults to date.today()

        Returns:
            Findings in rule order (empty when everything passes)
        """
        context = ValidationContext(
            business_date=business_date or date.today(),
            nights=nights,
            plausibility_years=self.plausibility_years,
        )

        findings: List[ValidationFinding] = []
        for rule in self.rules:
            if rule.applies_to(data, context):
                findings.extend(rule.validate(data, context))

        for finding in findings:
            logger.debug(f"Validation finding: {finding}")
        return findings


def has_blocking(findings: List[ValidationFinding]) -> bool:
    return any(f.is_blocking for f in findings)


def is_insufficient(findings: List[ValidationFinding]) -> bool:
    """True when the minimum-viable-record rule was violated."""
    return any(f.rule == FindingRule.MINIMUM_DATA for f in findings)


def validate_reservation(
    data: ExtractedReservationData,
    nights: Optional[int] = None,
    business_date: Optional[date] = None,
) -> List[ValidationFinding]:
    """Convenience function: validate with default settings."""
    return ReservationValidator().validate(data, nights, business_date)
