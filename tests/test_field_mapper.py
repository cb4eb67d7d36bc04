"""
Tests for reservation field extraction.

Run with: pytest tests/ -v
"""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from parsing import (
    ExtractedReservationData,
    FieldMapper,
    detect_currency_code,
    extract_booking_number,
    extract_check_in,
    extract_check_out,
    extract_guest_name,
    extract_hotel_name,
    extract_meal_plan,
    extract_number_of_persons,
    extract_phone,
    extract_room_type_hint,
    extract_rooms_count,
    extract_total_price,
)

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class TestDates:
    """Tests for check-in / check-out extraction."""

    def test_label_with_time_after_date(self):
        assert extract_check_in("Your check-in: 2026-05-20 from 14:00") == date(2026, 5, 20)

    def test_both_dates(self):
        text = "Check-in: 20 May 2026\nCheck-out: 23 May 2026"
        assert extract_check_in(text) == date(2026, 5, 20)
        assert extract_check_out(text) == date(2026, 5, 23)

    def test_from_to_labels(self):
        text = "Stay From 01/07/2026 To 05/07/2026"
        assert extract_check_in(text) == date(2026, 7, 1)
        assert extract_check_out(text) == date(2026, 7, 5)

    def test_fused_ocr_text(self):
        text = "Stay detailsCheck-in:Wed 12 Feb 2026Rooms:1Total guests:2 adults"
        assert extract_check_in(text) == date(2026, 2, 12)

    def test_missing(self):
        assert extract_check_in("Thank you for your booking") is None
        assert extract_check_out("") is None


class TestGuestName:
    """Tests for guest name extraction."""

    def test_simple(self):
        assert extract_guest_name("Guest Name: Sarah Johnson, ") == "Sarah Johnson"

    def test_cut_at_next_field(self):
        assert extract_guest_name("Guest: John Smith Total guests: 2") == "John Smith"

    def test_fused_ocr_text(self):
        text = "Booking number:6715814614Guest information:Oleksandr ArapovTotal guests:2 adults"
        assert extract_guest_name(text) == "Oleksandr Arapov"

    def test_country_is_cut(self):
        assert extract_guest_name("Lead guest: Christophe Raynaud France") == "Christophe Raynaud"

    def test_country_code_inside_word_kept(self):
        assert extract_guest_name("Name: Luke Evans") == "Luke Evans"

    def test_repeated_prefix_removed(self):
        assert extract_guest_name("Guest name: Name: Anna Petrova") == "Anna Petrova"

    def test_adult_count_only(self):
        assert extract_guest_name("Guest: 2 adults") is None


class TestBookingNumber:
    """Tests for booking number extraction."""

    def test_simple(self):
        assert extract_booking_number("Booking number: 4021337895") == "4021337895"

    def test_fused_with_next_field(self):
        text = "Booking number:6693946220Guest information:Christophe Raynaud"
        assert extract_booking_number(text) == "6693946220"

    def test_too_short(self):
        assert extract_booking_number("Booking Number: 123") is None

    def test_upper_cased_and_trimmed(self):
        assert extract_booking_number("Confirmation number: ab-12345.") == "AB-12345"

    def test_title_does_not_pair_with_next_line(self):
        assert extract_booking_number("Booking Confirmation\n123456789") is None


class TestPhone:
    """Tests for phone extraction."""

    def test_formatted(self):
        assert extract_phone("Tel: +20 (2) 555-1234") == "+2025551234"

    def test_too_few_digits(self):
        assert extract_phone("Phone: 12345") is None


class TestTotalPrice:
    """Tests for price and currency extraction."""

    def test_european_amount(self):
        assert extract_total_price("Grand Total: EUR 1.234,56") == (Decimal("1234.56"), "EUR")

    def test_thousands_comma(self):
        assert extract_total_price("Total: 9,600 EGP") == (Decimal("9600"), "EGP")

    def test_amount_on_next_line(self):
        assert extract_total_price("Total:\n9,600 EGP") == (Decimal("9600"), "EGP")
        assert extract_total_price("Total price\n100.00 USD") == (Decimal("100.00"), "USD")

    def test_currency_on_its_own_line(self):
        assert extract_total_price("Grand Total:\n   2,500.00\nEUR") == (Decimal("2500.00"), "EUR")

    def test_colon_on_its_own_line(self):
        assert extract_total_price("Total amount\n:\n550.00\nUSD") == (Decimal("550.00"), "USD")

    def test_space_grouped_amount(self):
        assert extract_total_price("Total due: 1 234.56 USD") == (Decimal("1234.56"), "USD")

    def test_symbol_before_amount(self):
        assert extract_total_price("Total payment: $150.00") == (Decimal("150.00"), "USD")

    def test_subtotal_not_taken(self):
        text = "Subtotal: 90.00\nTaxes: 10.00\nTotal: 100.00 USD"
        assert extract_total_price(text) == (Decimal("100.00"), "USD")

    def test_booking_number_digits_skipped(self):
        text = "Booking number: 5551234\nTotal: 5551234\nPrice: 300 EUR"
        assert extract_total_price(text, booking_number="5551234") == (Decimal("300"), "EUR")

    def test_loose_scan(self):
        amount, currency = extract_total_price("Total price (incl. taxes) 1,250.00")
        assert amount == Decimal("1250.00")
        assert currency == "USD"

    def test_no_currency_beside_amount(self):
        assert extract_total_price("Total: 150") == (Decimal("150"), None)

    def test_missing(self):
        assert extract_total_price("Check-in: 2026-05-20") == (None, None)

    def test_loose_scan_skips_year(self):
        assert extract_total_price("Total price to be settled by 2026") == (None, None)

    def test_following_number_not_absorbed(self):
        assert extract_total_price("Total: 480 2 rooms") == (Decimal("480"), None)
        assert extract_total_price("Total: 1,500 2026") == (Decimal("1500"), None)


class TestCurrencyCode:
    """Tests for booking currency detection."""

    def test_hint_wins(self):
        assert detect_currency_code("Total 9600", hint="€", amount=Decimal("9600")) == "EUR"

    def test_low_amount_is_usd(self):
        assert detect_currency_code("Total 150 EGP", amount=Decimal("150")) == "USD"

    def test_document_scan(self):
        assert detect_currency_code("Amount 9600 EGP", amount=Decimal("9600")) == "EGP"
        assert detect_currency_code("Paid in Euros") == "EUR"

    def test_default(self):
        assert detect_currency_code("") == "USD"
        assert detect_currency_code("no currency here") == "USD"

    def test_unlisted_three_letter_hint_kept(self):
        assert detect_currency_code("Total 1,500 CHF", hint="CHF", amount=Decimal("1500")) == "CHF"
        assert detect_currency_code("Total 150", hint="ID", amount=Decimal("150")) == "USD"

    def test_record_currency_fields_agree(self):
        data = FieldMapper().extract("Guest name: Anna Meier\nTotal: 1,500 CHF\n")
        assert data.total_price == Decimal("1500")
        assert data.currency == "CHF"
        assert data.currency_code == "CHF"


class TestRoomsAndOccupancy:
    """Tests for rooms, persons and room type."""

    def test_nights_not_taken_as_rooms(self):
        assert extract_rooms_count("2 nights, 1 room") == 1

    def test_nights_line_skipped(self):
        assert extract_rooms_count("Stay: 3 nights\nRooms: 2") == 2

    def test_fused_ocr_text(self):
        assert extract_rooms_count("Stay detailsCheck-in:Wed 12 Feb 2026Rooms:1Total guests:2 adults") == 1

    def test_out_of_range(self):
        assert extract_rooms_count("Rooms: 75") is None

    def test_no_rooms(self):
        assert extract_rooms_count("3 nights") is None

    def test_label_and_count_on_separate_lines(self):
        assert extract_rooms_count("Rooms\n2") == 2

    def test_distant_count_across_lines_rejected(self):
        assert extract_rooms_count("Rooms" + " " * 40 + "\n2") is None

    def test_adults_and_children(self):
        assert extract_number_of_persons("2 adults, 1 child") == 3

    def test_labelled_total(self):
        assert extract_number_of_persons("Number of guests: 4") == 4

    def test_fused_total_guests(self):
        text = "Booking number:6715814614Guest information:Oleksandr ArapovTotal guests:2 adults"
        assert extract_number_of_persons(text) == 2

    def test_persons_word(self):
        assert extract_number_of_persons("Occupancy: 2 persons") == 2

    def test_room_type_label(self):
        assert extract_room_type_hint("Room type: Deluxe King Room | Non-refundable") == "Deluxe King Room"

    def test_room_type_keyword(self):
        assert extract_room_type_hint("You booked a Family Suite with balcony") == "Family Suite"


class TestHotelAndMealPlan:
    """Tests for hotel name and board basis."""

    def test_hotel_name(self):
        assert extract_hotel_name("Hotel: Grand Plaza Cairo\nAddress: Tahrir Sq") == "Grand Plaza Cairo"

    def test_hotel_name_needs_colon(self):
        assert extract_hotel_name("Hotel Grand Plaza") is None

    def test_hotel_name_cut_at_boundary(self):
        assert extract_hotel_name("Property name: Sea Breeze Phone: 123") == "Sea Breeze"

    def test_meal_phrase(self):
        assert extract_meal_plan("Meal plan: All inclusive") == "All Inclusive"

    def test_meal_code(self):
        assert extract_meal_plan("Board: HB") == "Half Board"

    def test_breakfast_not_included(self):
        assert extract_meal_plan("Breakfast is not included") == "Room Only"

    def test_booking_number_not_read_as_code(self):
        text = "Booking number: BB-20245\nCheck-in: 2026-05-20"
        assert extract_meal_plan(text) == "Bed & Breakfast"
        assert extract_meal_plan(text, booking_number="BB-20245") is None

    def test_missing(self):
        assert extract_meal_plan("Check-in: 2026-05-20") is None


class TestFieldMapper:
    """End-to-end mapping of realistic confirmations."""

    def setup_method(self):
        self.mapper = FieldMapper()

    def test_booking_com(self):
        data = self.mapper.extract(load_fixture("booking_com.txt"))

        assert data.guest_name == "Sarah Johnson"
        assert data.booking_number == "4021337895"
        assert data.hotel_name == "Sunrise Garden Beach Resort"
        assert data.phone == "+201005551234"
        assert data.check_in == date(2026, 6, 15)
        assert data.check_out == date(2026, 6, 19)
        assert data.nights == 4
        assert data.rooms_count == 1
        assert data.room_type_hint == "Deluxe Double Room with Sea View"
        assert data.number_of_persons == 2
        assert data.total_price == Decimal("1234.56")
        assert data.currency == "EUR"
        assert data.currency_code == "EUR"
        assert data.meal_plan == "Bed & Breakfast"

    def test_agoda(self):
        data = self.mapper.extract(load_fixture("agoda.txt"))

        assert data.guest_name == "Christophe Raynaud"
        assert data.booking_number == "6693946220"
        assert data.hotel_name == "Nile View Hotel"
        assert data.check_in == date(2026, 4, 3)
        assert data.check_out == date(2026, 4, 7)
        assert data.number_of_persons == 3
        assert data.rooms_count == 1
        assert data.room_type_hint == "Superior Twin Room"
        assert data.meal_plan == "Half Board"
        assert data.total_price == Decimal("550.00")
        assert data.currency_code == "USD"
        assert data.phone is None

    def test_arabic(self):
        data = self.mapper.extract(load_fixture("arabic.txt"))

        assert data.booking_number == "88123456"
        assert data.guest_name == "أحمد محمد"
        assert data.check_in == date(2026, 3, 10)
        assert data.check_out == date(2026, 3, 13)
        assert data.number_of_persons == 2
        assert data.total_price == Decimal("9600")
        assert data.currency == "EGP"
        assert data.currency_code == "EGP"

    def test_empty_text(self):
        data = self.mapper.extract("")
        assert data.found_fields() == ["currency_code"]
        assert data.currency_code == "USD"

    def test_low_amount_threshold_is_configurable(self):
        text = "Reservation for two\nTotal: 350\nPayment accepted in EGP only"
        assert FieldMapper().extract(text).currency_code == "USD"
        assert FieldMapper(low_amount_threshold=100).extract(text).currency_code == "EGP"


class TestReservationModel:
    """Tests for the ExtractedReservationData model."""

    def test_blank_strings_are_missing(self):
        data = ExtractedReservationData(guest_name="  ", booking_number="")
        assert data.guest_name is None
        assert data.booking_number is None
        assert not data.has_identifier

    def test_currency_code_upper_cased(self):
        assert ExtractedReservationData(currency_code="eur").currency_code == "EUR"

    def test_invalid_currency_code(self):
        with pytest.raises(ValueError):
            ExtractedReservationData(currency_code="EURO")

    def test_frozen(self):
        data = ExtractedReservationData(guest_name="Sarah Johnson")
        with pytest.raises(Exception):
            data.guest_name = "Other"

    def test_to_dict_is_json_safe(self):
        data = ExtractedReservationData(
            check_in=date(2026, 6, 15),
            total_price=Decimal("1234.56"),
        )
        result = data.to_dict()
        assert result['check_in'] == "2026-06-15"
        assert result['total_price'] == "1234.56"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
