"""
Field checks shared by the participant and organizer signup routes.

Each check returns an error message for the client, or None when the value
is acceptable.
"""

import re
from datetime import date
from typing import Any, Optional

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
PHONE_RE = re.compile(r"[0-9]{10}")
PASSWORD_MIN_LENGTH = 8
MINIMUM_AGE = 18


def normalize_email(value: Any) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def check_email(email: str) -> Optional[str]:
    if not EMAIL_RE.fullmatch(email):
        return "Invalid email format"
    return None


def check_password(password: str) -> Optional[str]:
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
    return None


def check_phone(phone: str) -> Optional[str]:
    if not PHONE_RE.fullmatch(phone):
        return "Phone number must be 10 digits"
    return None


def parse_birth_date(val: Any) -> Optional[date]:
    """
    Parse a YYYY-MM-DD birth date.

    Returns:
        date: The parsed date, or None if invalid.
    """
    if not isinstance(val, str):
        return None
    try:
        return date.fromisoformat(val.strip()[:10])
    except ValueError:
        return None


def age_on(birth_date: date, today: date) -> int:
    """Full years between birth_date and today, counting the birthday itself."""
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def check_age(birth_date: date, today: Optional[date] = None) -> Optional[str]:
    if age_on(birth_date, today or date.today()) < MINIMUM_AGE:
        return f"You must be at least {MINIMUM_AGE} years old"
    return None


def first_error(*checks: Optional[str]) -> Optional[str]:
    """Return the first non-None message, so the earliest failing check wins."""
    for message in checks:
        if message:
            return message
    return None
