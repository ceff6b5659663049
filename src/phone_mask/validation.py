"""Submit-time checks for a masked phone value."""

from __future__ import annotations
import re

from .layout import US_PHONE, MaskLayout, only_digits
from .types import PhoneValidationError

_ALLOWED = re.compile(r"^[0-9()+\-\s]+$")

REQUIRED_MESSAGE = "Contact Phone Number is required."
INVALID_MESSAGE = "Please enter a valid phone number."


def validate_phone(value: str | None, layout: MaskLayout = US_PHONE) -> str:
    """Return the digits of a phone value, or raise PhoneValidationError.

    A blank value or the bare template counts as missing.  Anything other
    than digits, parentheses, plus, dash and whitespace is rejected.
    """
    value = value or ""
    if not value.strip() or value == layout.template:
        raise PhoneValidationError(REQUIRED_MESSAGE)
    if not _ALLOWED.match(value.strip()):
        raise PhoneValidationError(INVALID_MESSAGE)
    return only_digits(value)


def is_complete(value: str | None, layout: MaskLayout = US_PHONE) -> bool:
    """True once every digit slot is filled."""
    return len(only_digits(value)) == layout.capacity
