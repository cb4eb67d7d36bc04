"""
Field Mapper Module

Anchor-based extraction of reservation fields from document text.

How extraction works:
1. Every field category has an ordered tuple of label patterns (labels.py)
2. Labels are tried in that order, each searched once across the whole text
3. On a label hit, a category-specific capture/cleanup/validation step runs
4. The first label whose captured value validates wins; later labels are
   never consulted

Each extractor is a pure function of the text. None of them depends on
another's result, except price extraction and meal-plan detection, which
take the booking number as a hint so that a long booking reference is
never mistaken for an amount or a board code.

Why anchors instead of positions?
OTA confirmations reflow freely between vendors and between the PDF text
layer and OCR output. Labels survive that reflow; coordinates do not. OCR
also tends to fuse neighbouring fields ("6693946220Guest information"), so
most label patterns use a letter-only lookbehind instead of a word boundary.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional

from loguru import logger

from .labels import (
    BOOKING_NUMBER_LABELS,
    BOOKING_NUMBER_STOP_WORDS,
    CHECK_IN_LABELS,
    CHECK_OUT_LABELS,
    CURRENCY_DOCUMENT_MARKERS,
    CURRENCY_NORMALIZATION,
    GUEST_NAME_FIELD_BOUNDARIES,
    GUEST_NAME_LABELS,
    GUEST_NAME_PREFIXES,
    GUEST_NAME_WORD_BOUNDARIES,
    HOTEL_NAME_BOUNDARIES,
    HOTEL_NAME_LABELS,
    ISO_CURRENCY_CODES,
    MEAL_PLAN_TABLE,
    PERSONS_LABELS,
    PHONE_LABELS,
    PLAUSIBLE_DOCUMENT_YEARS,
    ROOM_COUNT_LINE_PATTERNS,
    ROOM_COUNT_MULTILINE_PATTERNS,
    ROOM_TYPE_BOUNDARIES,
    ROOM_TYPE_KEYWORD_PATTERN,
    ROOM_TYPE_LABELS,
    TOTAL_PRICE_LABELS,
    LabelPattern,
)
from .models import ExtractedReservationData
from .normalizers import clean_text, find_date, normalize_amount, normalize_currency


FLAGS = re.IGNORECASE | re.MULTILINE

DATE_WINDOW = 50
PRICE_FALLBACK_WINDOW = 50
LOW_AMOUNT_THRESHOLD = Decimal('400')
MAX_ROOMS = 50
MAX_PERSONS = 50

# Currency token next to an amount: dotted Egyptian forms, or 1-3
# upper-case letters/symbols not followed by another letter.
_CURRENCY_TOKEN = r'(?:L\.E\.?|E\.G\.P\.?|ج\.م|US\$|(?-i:[A-Z€£$]{1,3}))(?![A-Za-z])'
_ISO_LIKE = re.compile(r'[A-Z]{3}')

_GUEST_PREFIX = re.compile(
    r'^(?:' + '|'.join(re.escape(p) for p in GUEST_NAME_PREFIXES) + r')\b\s*[:：]?\s*',
    re.IGNORECASE,
)
_GUEST_WORD_BOUNDARY = re.compile(
    r'\b(?:' + '|'.join(GUEST_NAME_WORD_BOUNDARIES) + r')\b'
    r'|(?<![a-zA-Z0-9])(?:\d+\s*)?adults?(?![a-zA-Z])',
    re.IGNORECASE,
)


def _earliest(text: str, tokens) -> int:
    """Index of the first boundary token in text (case-insensitive), or len(text)."""
    lowered = text.lower()
    earliest = len(text)
    for token in tokens:
        pos = lowered.find(token.lower())
        if pos != -1 and pos < earliest:
            earliest = pos
    return earliest


def _in_range(value: str, upper: int) -> Optional[int]:
    count = int(value)
    return count if 1 <= count <= upper else None


# =============================================================================
# Dates
# =============================================================================

def _extract_date_near_label(text: str, labels: tuple) -> Optional[date]:
    for label in labels:
        match = re.search(rf'{label.pattern}\s*[:：]?\s*', text, FLAGS)
        if not match:
            continue

        window = text[match.end():match.end() + DATE_WINDOW]
        window = re.split(r'[\r\n]', window, maxsplit=1)[0]

        found = find_date(window)
        if found:
            logger.debug(f"Date {found} found after label '{label}'")
            return found
    return None


def extract_check_in(text: str) -> Optional[date]:
    """Check-in date, from the first check-in label followed by a date."""
    return _extract_date_near_label(text, CHECK_IN_LABELS)


def extract_check_out(text: str) -> Optional[date]:
    """Check-out date, from the first check-out label followed by a date."""
    return _extract_date_near_label(text, CHECK_OUT_LABELS)


# =============================================================================
# Guest, booking, phone
# =============================================================================

def extract_guest_name(text: str) -> Optional[str]:
    """
    Extract the guest name.

    The capture runs to the end of the line (or a pipe) and is then cut at
    the first field name, country or adult count that follows the name.
    A capture that starts with another name label ("Name: ...") had matched
    a too-generic label, so that prefix is removed first.
    """
    for label in GUEST_NAME_LABELS:
        pattern = rf'(?<![a-zA-Z]){label.pattern}\b\s*[:：]?\s*([^\n\r|]+)'
        match = re.search(pattern, text, FLAGS)
        if not match:
            continue

        raw = match.group(1)
        stripped = _GUEST_PREFIX.sub('', raw)
        while stripped != raw:
            raw = stripped
            stripped = _GUEST_PREFIX.sub('', raw)

        cut = _earliest(raw, GUEST_NAME_FIELD_BOUNDARIES)
        word_hit = _GUEST_WORD_BOUNDARY.search(raw)
        if word_hit and word_hit.start() < cut:
            cut = word_hit.start()

        name = clean_text(raw[:cut])
        if 2 <= len(name) <= 100 and not name.isdigit():
            logger.debug(f"Guest name '{name}' found after label '{label}'")
            return name
    return None


def extract_booking_number(text: str) -> Optional[str]:
    """
    Extract the booking/confirmation number.

    Label and value must be on one line. A token fused with the next field
    ("6693946220Guest") is truncated at the stop word.
    """
    for label in BOOKING_NUMBER_LABELS:
        pattern = (
            rf'(?<![a-zA-Z]){label.pattern}(?![a-zA-Z])'
            r'[ \t]*[:：#]?[ \t]*(?:number|no\.?|id|code)?[ \t]*[:：#]?[ \t]*'
            r'([A-Z0-9][A-Z0-9\-.]*)'
        )
        match = re.search(pattern, text, FLAGS)
        if not match:
            continue

        number = clean_text(match.group(1))
        lowered = number.lower()
        for stop_word in BOOKING_NUMBER_STOP_WORDS:
            idx = lowered.find(stop_word.lower())
            if idx > 0:
                number = number[:idx]
                lowered = lowered[:idx]
        number = number.rstrip('.-')

        if len(number) >= 4:
            logger.debug(f"Booking number '{number.upper()}' found after label '{label}'")
            return number.upper()
    return None


def extract_phone(text: str) -> Optional[str]:
    """Phone number with only digits and '+' kept; at least 7 digits."""
    for label in PHONE_LABELS:
        pattern = rf'(?<![a-zA-Z]){label.pattern}\b\s*[:：]?\s*([+\d \t\-()]+)'
        match = re.search(pattern, text, FLAGS)
        if not match:
            continue

        phone = re.sub(r'[^\d+]', '', match.group(1))
        if sum(ch.isdigit() for ch in phone) >= 7:
            return phone
    return None


# =============================================================================
# Price and currency
# =============================================================================

def _same_digits(candidate: str, booking_number: Optional[str]) -> bool:
    if not booking_number:
        return False
    reference = re.sub(r'\D', '', booking_number)
    return bool(reference) and re.sub(r'\D', '', candidate) == reference


def _currency_in_window(window: str) -> Optional[str]:
    """First known currency token in the window, in table order."""
    for token, code in CURRENCY_NORMALIZATION.items():
        if any(ch.isalpha() for ch in token):
            if re.search(rf'(?<![A-Za-z]){re.escape(token)}(?![A-Za-z])', window, re.IGNORECASE):
                return code
        elif token in window:
            return code
    return None


def extract_total_price(
    text: str,
    booking_number: Optional[str] = None,
) -> tuple[Optional[Decimal], Optional[str]]:
    """
    Extract the total price and the currency written next to it.

    Primary pass: label, optional colon, optional currency, amount, optional
    currency, across line breaks. Fallback pass (only when the primary pass
    finds nothing for any label): label, up to 50 characters, a number.

    Args:
        text: Document text
        booking_number: Already-extracted booking reference. Amount
            candidates with the same digits are skipped.

    Returns:
        (amount, currency) where either may be None
    """
    for label in TOTAL_PRICE_LABELS:
        pattern = (
            rf'(?<![a-zA-Z]){label.pattern}\s*[:：]?\s*'
            rf'(?:(?P<before>{_CURRENCY_TOKEN})\s*)?'
            r'(?P<amount>\d+(?:[ ,.]\d{3}(?!\d))*(?:[.,]\d{1,2}(?!\d))?)'
            rf'(?:\s*(?P<after>{_CURRENCY_TOKEN}))?'
        )
        match = re.search(pattern, text, FLAGS)
        if not match:
            continue

        context = text[max(0, match.start() - 10):match.end() + 20]
        if 'total' in label.pattern.lower() and 'subtotal' in context.lower():
            logger.debug(f"Skipping subtotal match for label '{label}'")
            continue

        if _same_digits(match.group('amount'), booking_number):
            logger.debug(f"Skipping amount equal to booking number for label '{label}'")
            continue

        amount = normalize_amount(match.group('amount'))
        if amount is None:
            continue

        before = (match.group('before') or '').strip()
        after = (match.group('after') or '').strip()
        currency = normalize_currency(before or after)
        logger.debug(f"Total price {amount} {currency} found after label '{label}'")
        return amount, currency

    for label in TOTAL_PRICE_LABELS:
        pattern = rf'(?<![a-zA-Z]){label.pattern}.{{0,{PRICE_FALLBACK_WINDOW}}}?(\d[\d., ]*\d)'
        match = re.search(pattern, text, re.IGNORECASE | re.DOTALL)
        if not match:
            continue

        candidate = match.group(1)
        if any(year in candidate for year in PLAUSIBLE_DOCUMENT_YEARS):
            continue
        if _same_digits(candidate, booking_number):
            continue

        amount = normalize_amount(candidate)
        if amount is None or amount <= 0:
            continue

        window = text[match.start():match.end() + 10]
        currency = _currency_in_window(window) or 'USD'
        logger.debug(f"Total price {amount} {currency} found by loose scan after label '{label}'")
        return amount, currency

    return None, None


def detect_currency_code(
    text: str,
    hint: Optional[str] = None,
    amount: Optional[Decimal] = None,
    low_amount_threshold: Decimal = LOW_AMOUNT_THRESHOLD,
) -> str:
    """
    Decide the ISO 4217 code of the booking.

    Priority:
    1. The currency written next to the price
    2. Small amounts (below the threshold) are taken as USD; local-currency
       totals for a hotel stay are rarely that low
    3. Whole-document scan: EUR markers, then USD, then EGP
    4. USD
    """
    code = normalize_currency(hint)
    if code and (code in ISO_CURRENCY_CODES or _ISO_LIKE.fullmatch(code)):
        return code

    if amount is not None and 0 < amount < low_amount_threshold:
        return 'USD'

    if not text or not text.strip():
        return 'USD'

    for code, marker in CURRENCY_DOCUMENT_MARKERS:
        if re.search(marker, text, re.IGNORECASE):
            return code

    return 'USD'


# =============================================================================
# Rooms, occupancy, hotel, meal plan
# =============================================================================

def extract_rooms_count(text: str) -> Optional[int]:
    """
    Number of rooms booked.

    Lines are scanned first with the precise patterns. A line that talks
    about nights but not rooms is skipped, so "2 nights" never becomes
    2 rooms. Only if no line matches, a short multi-line match is allowed.
    """
    for line in text.splitlines():
        if not line.strip():
            continue
        lowered = line.lower()
        if 'night' in lowered and 'room' not in lowered:
            continue

        for rule in ROOM_COUNT_LINE_PATTERNS:
            match = re.search(rule.pattern, line, re.IGNORECASE)
            if match:
                count = _in_range(match.group(1), MAX_ROOMS)
                if count:
                    return count

    for rule in ROOM_COUNT_MULTILINE_PATTERNS:
        match = re.search(rule.pattern, text, re.IGNORECASE | re.DOTALL)
        if match and len(match.group(0)) < 30:
            count = _in_range(match.group(1), MAX_ROOMS)
            if count:
                return count

    return None


def extract_number_of_persons(text: str) -> Optional[int]:
    """Occupant count: an explicit total, else adults plus children, else 'N persons'."""
    for label in PERSONS_LABELS:
        pattern = rf'(?<![a-zA-Z]){label.pattern}\b\s*[:：]?[ \t]*(\d{{1,2}})(?![0-9])'
        match = re.search(pattern, text, FLAGS)
        if match:
            count = _in_range(match.group(1), MAX_PERSONS)
            if count:
                return count

    match = re.search(
        r'(?<![0-9])(\d{1,2})\s*adults?\b'
        r'(?:\s*(?:,|&|\+|and)?\s*(\d{1,2})\s*(?:children|child|kids?)\b)?',
        text,
        re.IGNORECASE,
    )
    if match:
        total = int(match.group(1)) + int(match.group(2) or 0)
        if 1 <= total <= MAX_PERSONS:
            return total

    match = re.search(r'(?<![0-9])(\d{1,2})\s*(?:persons?|people|guests|pax)\b', text, re.IGNORECASE)
    if match:
        return _in_range(match.group(1), MAX_PERSONS)

    return None


def _labelled_line_value(
    text: str,
    labels: tuple[LabelPattern, ...],
    boundaries: tuple[str, ...],
    separator: str,
    min_length: int,
    max_length: int,
) -> Optional[str]:
    for label in labels:
        pattern = rf'(?<![a-zA-Z]){label.pattern}\b{separator}([^\n\r|]+)'
        match = re.search(pattern, text, FLAGS)
        if not match:
            continue

        raw = match.group(1)
        value = clean_text(raw[:_earliest(raw, boundaries)])
        if (min_length <= len(value) <= max_length
                and any(ch.isalpha() for ch in value)):
            logger.debug(f"Value '{value}' found after label '{label}'")
            return value
    return None


def extract_hotel_name(text: str) -> Optional[str]:
    """Hotel/property name; the label must be followed by a colon on the same line."""
    return _labelled_line_value(
        text, HOTEL_NAME_LABELS, HOTEL_NAME_BOUNDARIES,
        separator=r'[ \t]*[:：][ \t]*', min_length=2, max_length=100,
    )


def extract_room_type_hint(text: str) -> Optional[str]:
    """Room type as written in the document, e.g. 'Deluxe Double Room'."""
    value = _labelled_line_value(
        text, ROOM_TYPE_LABELS, ROOM_TYPE_BOUNDARIES,
        separator=r'\s*[:：]?\s*', min_length=3, max_length=80,
    )
    if value:
        return value

    match = re.search(ROOM_TYPE_KEYWORD_PATTERN, text, re.IGNORECASE)
    if match:
        return clean_text(match.group(0))
    return None


def extract_meal_plan(text: str, booking_number: Optional[str] = None) -> Optional[str]:
    """
    Board basis, normalized to one of: All Inclusive, Full Board, Half Board,
    Room Only, Bed & Breakfast.
    """
    if booking_number:
        text = re.sub(re.escape(booking_number), ' ', text, flags=re.IGNORECASE)

    for name, phrases, code in MEAL_PLAN_TABLE:
        if re.search(phrases, text, re.IGNORECASE) or re.search(code, text):
            return name
    return None


# =============================================================================
# Mapper
# =============================================================================

class FieldMapper:
    """
    Runs every field extractor over a document's text.

    Usage:
        mapper = FieldMapper()
        data = mapper.extract(text)
        print(data.check_in, data.total_price, data.currency_code)
    """

    def __init__(self, low_amount_threshold: Decimal = LOW_AMOUNT_THRESHOLD):
        self.low_amount_threshold = Decimal(str(low_amount_threshold))

    def extract(self, text: str) -> ExtractedReservationData:
        """Extract all reservation fields from text."""
        text = text or ''

        booking_number = extract_booking_number(text)
        total_price, currency = extract_total_price(text, booking_number)

        data = ExtractedReservationData(
            guest_name=extract_guest_name(text),
            phone=extract_phone(text),
            check_in=extract_check_in(text),
            check_out=extract_check_out(text),
            rooms_count=extract_rooms_count(text),
            room_type_hint=extract_room_type_hint(text),
            number_of_persons=extract_number_of_persons(text),
            hotel_name=extract_hotel_name(text),
            booking_number=booking_number,
            total_price=total_price,
            currency=currency,
            currency_code=detect_currency_code(
                text, currency, total_price, self.low_amount_threshold
            ),
            meal_plan=extract_meal_plan(text, booking_number),
        )

        found = data.found_fields()
        logger.debug(f"Mapped {len(found)} fields: {', '.join(found)}")
        return data


def extract_reservation_data(text: str) -> ExtractedReservationData:
    """Convenience function: extract all fields with default settings."""
    return FieldMapper().extract(text)
