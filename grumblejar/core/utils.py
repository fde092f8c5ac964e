"""
Utility functions for GrumbleJar.
"""

import calendar
from datetime import datetime, timezone


def utcnow() -> datetime:
    """
    Current time as naive UTC.

    SQLite drops tzinfo on the way back, so every stored timestamp is naive UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def one_month_before(moment: datetime) -> datetime:
    """
    Same wall-clock time one calendar month earlier.

    The day is clamped to the length of the previous month.

    Examples:
        2026-03-31 12:00 -> 2026-02-28 12:00
        2026-01-15 08:30 -> 2025-12-15 08:30
    """
    year, month = moment.year, moment.month - 1
    if month == 0:
        year, month = year - 1, 12

    last_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def format_points(points: int, signed: bool = False) -> str:
    """
    Format a point amount for display.

    Examples:
        1500 -> "1,500pt"
        10 (signed) -> "+10pt"
        -300 (signed) -> "-300pt"
    """
    if signed and points >= 0:
        return f"+{points:,}pt"
    return f"{points:,}pt"
