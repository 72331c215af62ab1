"""
Accumulating validation helpers.

Validators never stop at the first problem: each rule appends its message to
an ErrorListBuilder and the caller reports the whole list at once.
"""

from typing import Any, Iterable, List

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from app.core.phone import PhoneNumberError, convert_phone_to_number

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(value: Any) -> bool:
    """Syntax check only (email-validator via EmailStr); no DNS lookup."""
    if not isinstance(value, str):
        return False
    try:
        _email_adapter.validate_python(value)
    except SchemaValidationError:
        return False
    return True


def is_blank(value: Any) -> bool:
    """True for None, non-strings and strings that are empty after stripping."""
    return not isinstance(value, str) or not value.strip()


class ErrorListBuilder:
    """
    Collects human-readable validation messages.

    Usage:
        errors = (
            ErrorListBuilder()
            .require_text(data.get("title"), "Job title is required")
            .one_of(data.get("jobType"), JOB_TYPES, "Invalid job type")
            .build()
        )
    """

    def __init__(self):
        self._errors: List[str] = []

    def add(self, message: str) -> "ErrorListBuilder":
        self._errors.append(message)
        return self

    def check(self, condition: bool, message: str) -> "ErrorListBuilder":
        if not condition:
            self._errors.append(message)
        return self

    def require(self, value: Any, message: str) -> "ErrorListBuilder":
        return self.check(value not in (None, ""), message)

    def require_text(self, value: Any, message: str) -> "ErrorListBuilder":
        return self.check(not is_blank(value), message)

    def length_between(self, value: Any, minimum: int, maximum: int, message: str) -> "ErrorListBuilder":
        return self.check(
            isinstance(value, str) and minimum <= len(value) <= maximum,
            message,
        )

    def one_of(self, value: Any, choices: Iterable[str], message: str) -> "ErrorListBuilder":
        return self.check(value in tuple(choices), message)

    def email(self, value: Any, message: str) -> "ErrorListBuilder":
        return self.check(is_valid_email(value), message)

    def phone(self, value: Any, missing_message: str) -> "ErrorListBuilder":
        """Missing phone gets missing_message; a malformed one gets the parser's message."""
        if value in (None, ""):
            return self.add(missing_message)
        try:
            convert_phone_to_number(value)
        except PhoneNumberError as e:
            self.add(e.message)
        return self

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def build(self) -> List[str]:
        return list(self._errors)
