# quickschedule/timeutils.py

import secrets
from datetime import date as Date, datetime, time

MINUTES_PER_DAY = 24 * 60

CANCEL_TOKEN_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
CANCEL_TOKEN_LENGTH = 32


def parse_time(value: str) -> int:
    """Parse "HH:MM" into minutes since midnight. Raises ValueError on malformed input."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_time(minutes: int) -> str:
    """Minutes since midnight -> "HH:MM" (wraps past midnight)."""
    minutes = minutes % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_of_week(value: str) -> int:
    """Day of week for a "YYYY-MM-DD" date, Sunday = 0."""
    # noon keeps us clear of any midnight DST edge
    at_noon = datetime.combine(Date.fromisoformat(value), time(12, 0))
    return at_noon.isoweekday() % 7


def format_date(value: str) -> str:
    """Long US form, e.g. "March 15, 2024"."""
    d = Date.fromisoformat(value)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def format_time_display(value: str) -> str:
    """12-hour clock, e.g. "2:30 PM"."""
    hours, minutes = divmod(parse_time(value), 60)
    period = "PM" if hours >= 12 else "AM"
    hour = hours % 12 or 12
    return f"{hour}:{minutes:02d} {period}"


def generate_confirmation_number(booking_date: str, sequence: int) -> str:
    """QS-YYYY-MMDD-NNN, scoped to the booking date."""
    digits = booking_date.replace("-", "")[:8]
    year, month_day = digits[:4], digits[4:8]
    return f"QS-{year}-{month_day}-{sequence:03d}"


def generate_cancel_token() -> str:
    return "".join(secrets.choice(CANCEL_TOKEN_ALPHABET) for _ in range(CANCEL_TOKEN_LENGTH))
