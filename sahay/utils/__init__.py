"""Utility functions package."""

from .helpers import (
    format_date_for_speech,
    format_time_for_speech,
    normalize_date,
    normalize_time,
    parse_clock,
    sanitize_phone,
)

__all__ = [
    "format_date_for_speech",
    "format_time_for_speech",
    "normalize_date",
    "normalize_time",
    "parse_clock",
    "sanitize_phone",
]
