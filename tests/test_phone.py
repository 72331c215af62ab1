"""
Unit tests for phone number parsing and display formatting.
"""

import pytest

from app.core.errors import ValidationError
from app.core.phone import (
    DIGITS_ONLY_MESSAGE,
    INVALID_FORMAT_MESSAGE,
    REQUIRED_MESSAGE,
    PhoneNumberError,
    convert_phone_to_number,
    format_phone_for_display,
    is_valid_phone_number,
    parse_formatted_phone,
    safe_convert_phone_to_number,
)


class TestConvertPhoneToNumber:
    """Strict parser used on every write path"""

    @pytest.mark.parametrize("phone", ["9876543210", 9876543210, " 6123456789 ", "7000000000"])
    def test_accepts_indian_mobile_numbers(self, phone):
        assert convert_phone_to_number(phone) == int(str(phone).strip())

    @pytest.mark.parametrize("phone", [None, "", 0])
    def test_missing_phone(self, phone):
        with pytest.raises(PhoneNumberError) as exc_info:
            convert_phone_to_number(phone)
        assert str(exc_info.value) == REQUIRED_MESSAGE

    @pytest.mark.parametrize("phone", ["98765-43210", "abc", "+919876543210", "0", "-9876543210", True])
    def test_non_numeric_or_non_positive(self, phone):
        with pytest.raises(PhoneNumberError) as exc_info:
            convert_phone_to_number(phone)
        assert str(exc_info.value) == DIGITS_ONLY_MESSAGE

    @pytest.mark.parametrize("phone", ["5876543210", "987654321", "98765432101", "09876543210", 1234567890])
    def test_rejects_non_indian_format(self, phone):
        with pytest.raises(PhoneNumberError) as exc_info:
            convert_phone_to_number(phone)
        assert str(exc_info.value) == INVALID_FORMAT_MESSAGE

    def test_error_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            convert_phone_to_number("123")
        assert exc_info.value.status_code == 400


class TestLenientHelpers:

    def test_safe_convert_returns_none_on_failure(self):
        assert safe_convert_phone_to_number("not a phone") is None
        assert safe_convert_phone_to_number("9876543210") == 9876543210

    def test_is_valid_phone_number(self):
        assert is_valid_phone_number(8123456789)
        assert not is_valid_phone_number("12345")
        assert not is_valid_phone_number(None)

    @pytest.mark.parametrize("phone", ["9" * 5000, 10 ** 5000], ids=["long-digit-string", "huge-int"])
    def test_oversized_numbers_are_invalid_not_errors(self, phone):
        assert safe_convert_phone_to_number(phone) is None
        assert not is_valid_phone_number(phone)
        with pytest.raises(PhoneNumberError) as exc_info:
            convert_phone_to_number(phone)
        assert str(exc_info.value) == INVALID_FORMAT_MESSAGE


class TestDisplayFormatting:

    def test_ten_digits(self):
        assert format_phone_for_display(9876543210) == "(987) 654-3210"

    def test_eleven_digits_with_leading_one(self):
        assert format_phone_for_display("12345678901") == "+1 (234) 567-8901"

    def test_longer_numbers_get_country_prefix(self):
        assert format_phone_for_display("919876543210") == "+91 9876 543210"

    def test_short_numbers_pass_through(self):
        assert format_phone_for_display("12345") == "12345"

    def test_parse_formatted_phone(self):
        assert parse_formatted_phone("(987) 654-3210") == 9876543210

    def test_format_parse_round_trip(self):
        display = format_phone_for_display(9876543210)
        assert format_phone_for_display(parse_formatted_phone(display)) == display

    @pytest.mark.parametrize("display", ["(987) 654-3210", "+1 (234) 567-8901", "+91 9876 543210"])
    def test_display_string_is_stable(self, display):
        digits = "".join(ch for ch in display if ch.isdigit())
        assert format_phone_for_display(digits) == display

    def test_parse_formatted_phone_validates(self):
        with pytest.raises(PhoneNumberError):
            parse_formatted_phone("(123) 456-7890")

    def test_eleven_digits_without_leading_one_use_generic_format(self):
        # Not a number the parser would ever accept
        assert format_phone_for_display("98765432101") == "+9 8765 432101"
        assert not is_valid_phone_number("98765432101")


def test_all_zeros_is_rejected():
    with pytest.raises(PhoneNumberError):
        convert_phone_to_number("0000000000")
