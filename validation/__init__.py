"""
Reservation Validation Package

Cross-field business rules over extracted reservation data.

Usage:
    from validation import ReservationValidator

    validator = ReservationValidator()
    findings = validator.validate(data, nights=3)

    for finding in findings:
        print(f"{finding.severity.name}: {finding.message}")
"""

from .reservation_rules import (
    ReservationValidator,
    ReservationRule,
    ValidationContext,
    ValidationFinding,
    FindingSeverity,
    FindingRule,
    has_blocking,
    is_insufficient,
    validate_reservation,
)

__all__ = [
    'ReservationValidator',
    'ReservationRule',
    'ValidationContext',
    'ValidationFinding',
    'FindingSeverity',
    'FindingRule',
    'has_blocking',
    'is_insufficient',
    'validate_reservation',
]
