"""Shared validation utilities"""

import html
import re
import uuid
from datetime import datetime
from typing import Optional

from ..errors import ValidationError

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
WEEKDAYS = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def require_id(value: Optional[str], label: str) -> str:
    """
    Ensure an identifier is well formed.

    Raises:
        ValidationError: "invalid <label> ID" when missing or not a UUID
    """
    if not value or not validate_uuid(value):
        raise ValidationError(f"invalid {label} ID")
    return str(uuid.UUID(value))


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def clean_text(value: Optional[str], max_length: int = 500) -> Optional[str]:
    """Strip, length-check and HTML-escape free text from users"""
    if value is None:
        return None
    value = str(value).strip()
    if len(value) > max_length:
        raise ValidationError(f"text exceeds maximum length of {max_length} characters")
    return html.escape(value, quote=True)


def parse_time_of_day(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)"""
    if not value or not TIME_OF_DAY_PATTERN.match(value):
        raise ValidationError(f"invalid time of day: {value!r} (expected HH:MM)")
    hour, minute = value.split(":")
    return int(hour), int(minute)


def weekday_key(moment: datetime) -> str:
    """Three-letter lowercase weekday key used by open hours ("mon", "tue", ...)"""
    return WEEKDAYS[moment.weekday()]
