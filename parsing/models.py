"""
Reservation data model.

ExtractedReservationData is the single aggregate produced by field mapping.
It is frozen: built once per parse and never modified afterwards. Every field
is optional because "not found" is a normal result, not an error.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ExtractedReservationData(BaseModel):
    """Fields recovered from one booking document."""

    model_config = ConfigDict(frozen=True)

    guest_name: Optional[str] = None
    phone: Optional[str] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    rooms_count: Optional[int] = None
    room_type_hint: Optional[str] = None
    number_of_persons: Optional[int] = None
    hotel_name: Optional[str] = None
    booking_number: Optional[str] = None
    total_price: Optional[Decimal] = None
    currency: Optional[str] = None
    currency_code: Optional[str] = None
    meal_plan: Optional[str] = None

    @field_validator('guest_name', 'hotel_name', 'room_type_hint', 'booking_number')
    @classmethod
    def strip_blank(cls, v):
        """Blank strings are stored as missing."""
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v):
        """Currency codes are three upper-case letters."""
        if v is None:
            return None
        v = str(v).strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError(f'Invalid ISO 4217 code: {v}')
        return v

    @property
    def nights(self) -> Optional[int]:
        """Calendar days between check-in and check-out, when both are known."""
        if self.check_in and self.check_out:
            return (self.check_out - self.check_in).days
        return None

    @property
    def has_dates(self) -> bool:
        return self.check_in is not None and self.check_out is not None

    @property
    def has_identifier(self) -> bool:
        return bool(self.guest_name) or bool(self.booking_number)

    def found_fields(self) -> list[str]:
        """Names of the fields that were extracted."""
        return [name for name, value in self if value is not None]

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dictionary (dates as ISO strings, amounts as strings)."""
        return self.model_dump(mode='json')
