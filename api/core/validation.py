"""
Small input checks shared by the create endpoints.
"""

from __future__ import annotations

import re

from .errors import ValidationError

MAX_NAME_CHARS = 100
MAX_BODY_CHARS = 1000
# Upper bound of a Postgres SERIAL column.
MAX_ROW_ID = 2_147_483_647

_LEADING_INT = re.compile(r"\s*\+?0*(\d+)")


def require_fields(values: dict[str, str | None]) -> dict[str, str]:
    """
    Fail unless every field is present and non-empty.

    The error names all required fields, not just the missing ones.
    """
    if any(not value for value in values.values()):
        raise ValidationError(f"Todos los campos son requeridos: {', '.join(values)}")
    return {name: str(value) for name, value in values.items()}


def check_max_length(value: str, max_chars: int, message: str) -> None:
    if len(value) > max_chars:
        raise ValidationError(message)


def parse_positive_int(raw: str | None, default: int, *, maximum: int = MAX_ROW_ID) -> int:
    """
    Lenient integer parsing for query strings: "3" and "3abc" give 3.

    Anything unparseable, or below 1, falls back to `default`. Values above
    `maximum`, however many digits they have, are clamped to it.
    """
    match = _LEADING_INT.match(raw or "")
    if match is None:
        return default
    digits = match.group(1)
    if len(digits) > len(str(maximum)):
        return maximum
    value = int(digits)
    if value < 1:
        return default
    return min(value, maximum)
