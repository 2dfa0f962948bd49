"""
Reusable field checks for request schemas.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_HTTP_URL = TypeAdapter(AnyHttpUrl)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_EMAIL_RE = re.compile(EMAIL_PATTERN)


def current_year() -> int:
    return date.today().year


def is_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def check_email(value: str) -> str:
    value = (value or "").strip()
    if not is_email(value):
        raise ValueError("Invalid email address")
    return value


def check_url_or_empty(value: str | None) -> str | None:
    """
    Accept an absolute http(s) URL, an empty string, or None.
    """
    if value is None:
        return None
    value = value.strip()
    if value == "":
        return value
    try:
        _HTTP_URL.validate_python(value)
    except PydanticValidationError as exc:
        raise ValueError("Invalid URL") from exc
    return value


def reject_null(value: Any) -> Any:
    """
    Required columns may be omitted from a partial update but never cleared.
    """
    if value is None:
        raise ValueError("Field cannot be null")
    return value


def check_year(value: int | None, *, minimum: int) -> int | None:
    if value is None:
        return None
    if value < minimum or value > current_year():
        raise ValueError(f"Year must be between {minimum} and {current_year()}")
    return value


def blank_to_none(value: str | None) -> str | None:
    """
    Empty optional strings are stored as NULL.
    """
    if value is None:
        return None
    return value if value.strip() else None
