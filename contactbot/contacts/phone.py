"""Phone number normalization."""

from __future__ import annotations

import re

MIN_DIGITS = 10
MAX_DIGITS = 15

_NON_DIGIT = re.compile(r"\D")


def _digits(value: object) -> str:
    return _NON_DIGIT.sub("", str(value))


def is_valid_phone_number(value: object) -> bool:
    if value is None or value == "":
        return False
    return MIN_DIGITS <= len(_digits(value)) <= MAX_DIGITS


def format_phone_number(value: object) -> str | None:
    """Return ``+<digits>`` for a 10-15 digit number, else ``None``."""
    if not is_valid_phone_number(value):
        return None
    return "+" + _digits(value)
