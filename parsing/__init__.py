"""
Parsing Package

Turns booking-document text into an ExtractedReservationData record.

Components:
- labels: ordered, language-tagged anchor tables
- normalizers: amount, currency, text and date normalization
- field_mapper: one extractor per field plus the FieldMapper that runs them
- models: the immutable ExtractedReservationData aggregate

Usage:
    from parsing import FieldMapper

    data = FieldMapper().extract(text)
    print(data.guest_name, data.check_in, data.total_price)
"""

from .field_mapper import (
    FieldMapper,
    extract_reservation_data,
    extract_check_in,
    extract_check_out,
    extract_guest_name,
    extract_booking_number,
    extract_total_price,
    detect_currency_code,
    extract_phone,
    extract_rooms_count,
    extract_room_type_hint,
    extract_number_of_persons,
    extract_hotel_name,
    extract_meal_plan,
)
from .labels import LabelPattern, CURRENCY_NORMALIZATION
from .models import ExtractedReservationData
from .normalizers import clean_text, normalize_amount, normalize_currency, parse_date

__all__ = [
    'FieldMapper',
    'ExtractedReservationData',
    'LabelPattern',
    'CURRENCY_NORMALIZATION',
    'extract_reservation_data',
    'extract_check_in',
    'extract_check_out',
    'extract_guest_name',
    'extract_booking_number',
    'extract_total_price',
    'detect_currency_code',
    'extract_phone',
    'extract_rooms_count',
    'extract_room_type_hint',
    'extract_number_of_persons',
    'extract_hotel_name',
    'extract_meal_plan',
    'clean_text',
    'normalize_amount',
    'normalize_currency',
    'parse_date',
]
