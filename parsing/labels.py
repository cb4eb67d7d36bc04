"""
Label Tables

Anchor phrasings for every reservation field, in the order they are tried.

Booking confirmations come from many vendors (Booking.com, Agoda, Expedia,
hotel-issued vouchers) and several languages. Each vendor words the same
field differently: "Check-in", "Arrival date", "Въезд", "تاريخ الدخول".
Each category below is a tuple of LabelPattern entries. The tuple order is
the priority order: more distinctive phrasings come first so that a generic
label ("Total", "Name", "From") never shadows a precise one ("Grand total",
"Guest name", "Check-in").

All tables are module-level constants built once at import time and never
written afterwards.
"""

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class LabelPattern:
    """One phrasing of a field anchor."""
    pattern: str
    language: str = 'en'

    def __str__(self) -> str:
        return self.pattern


CHECK_IN_LABELS = (
    LabelPattern(r'Check-?in\s*(?:date)?'),
    LabelPattern(r'Arrival\s*(?:date)?'),
    LabelPattern(r'\bFrom\b'),
    LabelPattern(r'Stay\s*from'),
    LabelPattern(r'Arriving'),
    LabelPattern(r'Въезд', 'ru'),
    LabelPattern(r'تاريخ الدخول', 'ar'),
)

CHECK_OUT_LABELS = (
    LabelPattern(r'Check-?out\s*(?:date)?'),
    LabelPattern(r'Departure\s*(?:date)?'),
    LabelPattern(r'\bUntil\b'),
    LabelPattern(r'\bTo\b'),
    LabelPattern(r'Stay\s*to'),
    LabelPattern(r'Leaving'),
    LabelPattern(r'Выезд', 'ru'),
    LabelPattern(r'تاريخ الخروج', 'ar'),
)

GUEST_NAME_LABELS = (
    LabelPattern(r'Guest\s*(?:name|information)?'),
    LabelPattern(r'Lead\s*guest'),
    LabelPattern(r'Main\s*guest'),
    LabelPattern(r'Name'),
    LabelPattern(r'Customer\s*(?:name)?'),
    LabelPattern(r'Reserved\s*(?:for|by)'),
    LabelPattern(r'Booked\s*by'),
    LabelPattern(r'Full\s*name'),
    LabelPattern(r'اسم الضيف', 'ar'),
)

# Single-line labels: "[ \t]" instead of "\s" so a "Booking Confirmation"
# title never pairs with a value on the following line.
BOOKING_NUMBER_LABELS = (
    LabelPattern(r'Booking[ \t]*(?:number|#|no\.?|id|confirmation)'),
    LabelPattern(r'Confirmation[ \t]*(?:number|#|no\.?|code)'),
    LabelPattern(r'Reservation[ \t]*(?:number|#|no\.?|id)'),
    LabelPattern(r'Reference[ \t]*(?:number|#)?'),
    LabelPattern(r'Conf\.[ \t]*#'),
    LabelPattern(r'رقم الحجز', 'ar'),
)

TOTAL_PRICE_LABELS = (
    LabelPattern(r'Grand\s*total\b'),
    LabelPattern(r'Total\s*amount\b'),
    LabelPattern(r'Amount\s*due\b'),
    LabelPattern(r'Amount\s*payable\b'),
    LabelPattern(r'Total\s*due\b'),
    LabelPattern(r'Total\s*charges?\b'),
    LabelPattern(r'Total\s*price\b'),
    LabelPattern(r'Total\s*cost\b'),
    LabelPattern(r'Total\s*payment\b'),
    LabelPattern(r'Total\s*booking\b'),
    LabelPattern(r'Total\s*to\s*pay\b'),
    LabelPattern(r'Total\s*inc(?:l)?\.?\s*tax(?:es)?\b'),
    LabelPattern(r'Total\b'),
    LabelPattern(r'Price\b'),
    LabelPattern(r'Balance\s*due\b'),
    LabelPattern(r'Balance\b'),
    LabelPattern(r'الإجمالي', 'ar'),
    LabelPattern(r'إجمالي\s*السعر', 'ar'),
)

PHONE_LABELS = (
    LabelPattern(r'Phone\s*(?:number)?'),
    LabelPattern(r'Tel(?:ephone)?'),
    LabelPattern(r'Mobile\s*(?:number)?'),
    LabelPattern(r'Contact\s*(?:number)?'),
    LabelPattern(r'Cell'),
    LabelPattern(r'الهاتف', 'ar'),
)

HOTEL_NAME_LABELS = (
    LabelPattern(r'Hotel\s*name'),
    LabelPattern(r'Property\s*name'),
    LabelPattern(r'Accommodation\s*name'),
    LabelPattern(r'Property'),
    LabelPattern(r'Hotel'),
    LabelPattern(r'اسم الفندق', 'ar'),
    LabelPattern(r'الفندق', 'ar'),
)

ROOM_TYPE_LABELS = (
    LabelPattern(r'Room\s*type'),
    LabelPattern(r'Room\s*category'),
    LabelPattern(r'Unit\s*type'),
    LabelPattern(r'Accommodation\s*type'),
    LabelPattern(r'Room\s*name'),
    LabelPattern(r'نوع الغرفة', 'ar'),
)

PERSONS_LABELS = (
    LabelPattern(r'Total\s*guests'),
    LabelPattern(r'Number\s*of\s*(?:guests|persons|people)'),
    LabelPattern(r'No\.\s*of\s*(?:guests|persons)'),
    LabelPattern(r'Guests'),
    LabelPattern(r'Persons'),
    LabelPattern(r'Pax'),
    LabelPattern(r'عدد الأشخاص', 'ar'),
    LabelPattern(r'عدد النزلاء', 'ar'),
)

# Tried line by line; counts are restricted to one or two digits.
ROOM_COUNT_LINE_PATTERNS = (
    LabelPattern(r'(?<![a-zA-Z])(?:room|rooms|unit|units|apartment|apartments|accommodation)\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'(?<![a-zA-Z])number\s*of\s*(?:rooms|units|apartments)\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'(?<![a-zA-Z])(\d{1,2})\s*(?:[xX*]\s*)?(?:room|rooms|unit|units|apartment|apartments|accommodation)(?![a-zA-Z0-9])'),
    LabelPattern(r'Total\s*(?:rooms|units)\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'Quantity\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'Qty\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'No\.\s*of\s*rooms\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'(?:عدد الغرف|الوحدات|الغرف)\s*[:：]?\s*(\d{1,2})(?![0-9])', 'ar'),
)

# Allowed to span line breaks, only accepted for short matches.
ROOM_COUNT_MULTILINE_PATTERNS = (
    LabelPattern(r'(?<![a-zA-Z])(?:room|rooms|unit|units|apartment|apartments)\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
    LabelPattern(r'(?<![a-zA-Z])(?:accommodation|quantity|qty)\b\s*[:：]?\s*(\d{1,2})(?![0-9])'),
)

# Field names that end a captured guest name. Matched without a left word
# boundary so fused OCR text ("ArapovTotal guests") is cut correctly.
GUEST_NAME_FIELD_BOUNDARIES = (
    'Total guests', 'Total units', 'Preferred language', 'Country',
    'Nationality', 'Email', 'Phone', 'Mobile', 'Address',
    'Check-in', 'Check-out', 'Arrival', 'Departure',
)

# Matched as whole words: "UK" must not cut "Luke".
GUEST_NAME_WORD_BOUNDARIES = (
    'Turkey', 'Egypt', 'Russia', 'Germany', 'France', 'Italy', 'Spain',
    'China', 'India', 'Brazil', 'Ukraine', 'Greece', 'USA', 'UK',
    'Poland', 'England',
)

GUEST_NAME_PREFIXES = ('Main Guest', 'Lead Guest', 'Guest', 'Name')

BOOKING_NUMBER_STOP_WORDS = (
    'Guest', 'Check-in', 'Check-out', 'Arrival', 'Departure', 'Total', 'Price',
)

HOTEL_NAME_BOUNDARIES = (
    'Address', 'Phone', 'Tel:', 'Email', 'Check-in', 'Check-out',
    'Booking number', 'Reservation number', 'Guest name',
)

ROOM_TYPE_BOUNDARIES = (
    'Total guests', 'Guests', 'Adults', 'Meal', 'Price', 'Check-in',
    'Check-out', 'Nights', 'Quantity', 'Qty',
)

ROOM_TYPE_KEYWORD_PATTERN = (
    r'\b(?:single|double|twin|triple|quadruple|deluxe|superior|standard|'
    r'executive|family|classic|premium|junior\s+suite|king|queen)\b'
    r'[^\n\r|]{0,40}?\b(?:rooms?|suites?|studio|apartment)\b'
)

# (normalized name, case-insensitive phrases, case-sensitive board code)
MEAL_PLAN_TABLE = (
    ('All Inclusive', r'all[\s-]*inclusive|شامل\s*كل', r'\bAI\b'),
    ('Full Board', r'full[\s-]*board|pension\s+compl[eè]te', r'\bFB\b'),
    ('Half Board', r'half[\s-]*board|demi[\s-]*pension', r'\bHB\b'),
    ('Room Only',
     r'room\s*only|breakfast\s+(?:is\s+)?not\s+included|without\s+breakfast|no\s+meals',
     r'\bRO\b'),
    ('Bed & Breakfast',
     r'bed\s*(?:&|and)\s*breakfast|breakfast\s+(?:is\s+)?included|'
     r'including\s+breakfast|with\s+breakfast|إفطار|فطور',
     r'\bBB\b'),
)

# Currency tokens in scan priority order. Keys are upper-case; dotted
# variants are kept so that raw text windows can be scanned directly.
CURRENCY_NORMALIZATION = MappingProxyType({
    'USD': 'USD',
    'EUR': 'EUR',
    'GBP': 'GBP',
    'EGP': 'EGP',
    'LE': 'EGP',
    'L.E': 'EGP',
    'E.G.P': 'EGP',
    'AED': 'AED',
    'SAR': 'SAR',
    'THB': 'THB',
    'INR': 'INR',
    'US$': 'USD',
    '$': 'USD',
    '€': 'EUR',
    '£': 'GBP',
    'ج.م': 'EGP',
})

# ISO 4217 codes the lookup table resolves to.
ISO_CURRENCY_CODES = frozenset(CURRENCY_NORMALIZATION.values())

# Whole-document markers, checked in this order.
CURRENCY_DOCUMENT_MARKERS = (
    ('EUR', r'€|\bEUR\b|\bEuros?\b'),
    ('USD', r'\$|\bUSD\b|\bUS\s*Dollars?|\bU\.S\.\s*Dollars?'),
    ('EGP', r'\bEGP\b|\bLE\b|ج\.م'),
)

PLAUSIBLE_DOCUMENT_YEARS = ('2024', '2025', '2026')

ALL_LABEL_TABLES = MappingProxyType({
    'check_in': CHECK_IN_LABELS,
    'check_out': CHECK_OUT_LABELS,
    'guest_name': GUEST_NAME_LABELS,
    'booking_number': BOOKING_NUMBER_LABELS,
    'total_price': TOTAL_PRICE_LABELS,
    'phone': PHONE_LABELS,
    'hotel_name': HOTEL_NAME_LABELS,
    'room_type_hint': ROOM_TYPE_LABELS,
    'number_of_persons': PERSONS_LABELS,
})
