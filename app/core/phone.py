"""
Phone number parsing, validation and display formatting.

Numbers are stored as positive integers. Only Indian mobile numbers are
accepted: exactly 10 digits starting with 6, 7, 8 or 9. The display formatter
is intentionally more permissive than the validator.
"""

import re
from typing import Optional, Union

from app.core.errors import ValidationError

PHONE_PATTERN = re.compile(r"[6-9]\d{9}")
_DIGITS_PATTERN = re.compile(r"-?\d+", re.ASCII)
_NON_DIGITS = re.compile(r"[^0-9]")

PhoneInput = Union[int, float, str, None]

REQUIRED_MESSAGE = "Phone number is required"
DIGITS_ONLY_MESSAGE = "Please provide a valid phone number (digits only)"
INVALID_FORMAT_MESSAGE = (
    "Invalid Indian phone number. It must be 10 digits and start with 6, 7, 8, or 9."
)


class PhoneNumberError(ValidationError):
    """Raised by the strict parser. str(error) is the user-facing message."""


def _to_digits(phone: PhoneInput) -> str:
    if isinstance(phone, bool):
        raise PhoneNumberError(DIGITS_ONLY_MESSAGE)
    if isinstance(phone, int):
        if phone < 0:
            raise PhoneNumberError(DIGITS_ONLY_MESSAGE)
        # str() refuses ints beyond the interpreter's digit limit
        if phone.bit_length() > 64:
            raise PhoneNumberError(INVALID_FORMAT_MESSAGE)
        return str(phone)
    if isinstance(phone, float) and phone.is_integer():
        return str(int(phone))
    if isinstance(phone, str):
        digits = phone.strip()
        if _DIGITS_PATTERN.fullmatch(digits):
            return digits
    raise PhoneNumberError(DIGITS_ONLY_MESSAGE)


def convert_phone_to_number(phone: PhoneInput) -> int:
    """
    Parse and validate a phone number.

    Args:
        phone: Integer or digit string (surrounding whitespace allowed)

    Returns:
        The phone number as a positive integer

    Raises:
        PhoneNumberError: If the input is empty, not numeric, not positive,
            or not a 10-digit number starting with 6-9
    """
    if not phone:
        raise PhoneNumberError(REQUIRED_MESSAGE)

    digits = _to_digits(phone)
    if digits.startswith("-") or not digits.strip("0"):
        raise PhoneNumberError(DIGITS_ONLY_MESSAGE)

    # Validate the digits as given so "09876543210" is rejected for its length,
    # and before int() so arbitrarily long strings never reach it
    if not PHONE_PATTERN.fullmatch(digits):
        raise PhoneNumberError(INVALID_FORMAT_MESSAGE)

    return int(digits)


def safe_convert_phone_to_number(phone: PhoneInput) -> Optional[int]:
    """Like convert_phone_to_number() but returns None instead of raising."""
    try:
        return convert_phone_to_number(phone)
    except PhoneNumberError:
        return None


def is_valid_phone_number(phone: PhoneInput) -> bool:
    return safe_convert_phone_to_number(phone) is not None


def format_phone_for_display(phone: Union[int, str]) -> str:
    """
    Render a phone number for display.

    - 10 digits: (123) 456-7890
    - 11 digits starting with 1: +1 (234) 567-8901
    - any other length of 10+: +<prefix> XXXX XXXXXX
    - anything shorter is returned unchanged
    """
    text = str(phone)

    if len(text) == 10:
        return f"({text[:3]}) {text[3:6]}-{text[6:]}"
    if len(text) == 11 and text.startswith("1"):
        return f"+1 ({text[1:4]}) {text[4:7]}-{text[7:]}"
    if len(text) >= 10:
        return f"+{text[:-10]} {text[-10:-6]} {text[-6:]}"

    return text


def parse_formatted_phone(formatted_phone: str) -> int:
    """Strip every non-digit from a display string and validate the result."""
    return convert_phone_to_number(_NON_DIGITS.sub("", formatted_phone))
