"""Helper utility functions."""

import re
from datetime import datetime, time
from typing import Union

from dateutil import parser as date_parser

# Year that dateutil falls back to when the text names none.
_NO_YEAR = datetime(1, 1, 1)


def normalize_date(value: str) -> str:
    """
    Normalize a calendar date to YYYY-MM-DD.

    Accepts the canonical form as well as looser spellings the model or a
    client may send ("March 10, 2025", "2025/03/10").

    Args:
        value: Raw date text

    Returns:
        Date string in YYYY-MM-DD format

    Raises:
        ValueError: If the text is not a date or names no year
    """
    text = str(value).strip()
    if not text:
        raise ValueError("Date is empty.")

    try:
        return datetime.strptime(text, "%Y-%m-%d").strftime("%Y-%m-%d")
    except ValueError:
        pass

    if re.fullmatch(r"[\d:\s]+(am|pm)?", text, re.IGNORECASE) and ":" in text:
        raise ValueError(f"'{value}' looks like a time, not a date.")

    try:
        parsed = date_parser.parse(text, fuzzy=False, default=_NO_YEAR)
    except (ValueError, OverflowError):
        raise ValueError(f"'{value}' is not a valid date. Please use YYYY-MM-DD.")
    if parsed.year == _NO_YEAR.year:
        raise ValueError(f"'{value}' has no year. Which year is meant?")
    return parsed.strftime("%Y-%m-%d")


def normalize_time(value: Union[str, time]) -> str:
    """
    Normalize a time of day to 24-hour HH:MM.

    Postgres returns ``time`` columns as HH:MM:SS; users and models may say
    "10am" or "2:30 pm".

    Raises:
        ValueError: If the text is not a time of day
    """
    if isinstance(value, time):
        return value.strftime("%H:%M")

    text = str(value).strip().lower()
    if not text:
        raise ValueError("Time is empty.")

    match = re.fullmatch(r"(\d{1,2})(?::(\d{2}))?(?::(\d{2}))?\s*(am|pm)?", text)
    if not match:
        try:
            parsed = date_parser.parse(text, fuzzy=False)
        except (ValueError, OverflowError):
            raise ValueError(f"'{value}' is not a valid time. Please use HH:MM.")
        return parsed.strftime("%H:%M")

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    period = match.group(4)

    if period:
        if hour < 1 or hour > 12:
            raise ValueError(f"'{value}' is not a valid time. Please use HH:MM.")
        if period == "pm" and hour < 12:
            hour += 12
        elif period == "am" and hour == 12:
            hour = 0
    elif match.group(2) is None:
        # A bare number like "10" is too vague to book against.
        raise ValueError(f"'{value}' is not a valid time. Please use HH:MM.")

    if hour > 23 or minute > 59:
        raise ValueError(f"'{value}' is not a valid time. Please use HH:MM.")

    return f"{hour:02d}:{minute:02d}"


def parse_clock(value: str) -> time:
    """Parse HH:MM into a ``datetime.time``."""
    return datetime.strptime(normalize_time(value), "%H:%M").time()


def sanitize_phone(phone: str) -> str:
    """
    Sanitize a phone number.

    Keeps the digits and a leading ``+`` for international numbers.

    Args:
        phone: Raw phone number input

    Returns:
        Normalized phone number
    """
    text = str(phone).strip()
    digits = re.sub(r'\D', '', text)
    if text.startswith("+") and digits:
        return f"+{digits}"
    return digits


def format_time_for_speech(value: str) -> str:
    """Render HH:MM as e.g. '2:30 PM'."""
    try:
        return datetime.strptime(value, "%H:%M").strftime("%I:%M %p").lstrip("0")
    except ValueError:
        return value


def format_date_for_speech(value: str) -> str:
    """Render YYYY-MM-DD as e.g. 'Monday, March 10'."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").strftime("%A, %B %d").replace(" 0", " ")
    except ValueError:
        return value
