"""Date parsing utilities."""

from datetime import date, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("today", "yesterday", "this-week", "last-week", "this-month", "last-month", "last-7-days")


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports:
    - Absolute dates: "2024-03-15", "15 March 2024", "March 15, 2024"
    - Relative dates: "today", "yesterday", "this week", "this month",
      "last week", "last month" (the first day of the period)

    Args:
        date_str: Date string
        today: Reference day for relative dates (defaults to the current day)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or date.today()

    relative = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this week": today - timedelta(days=today.weekday()),
        "last week": today - timedelta(days=today.weekday() + 7),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
    }
    if text in relative:
        return relative[text]

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get inclusive start and end days for a named period.

    Args:
        period: One of today, yesterday, this-week, last-week, this-month,
            last-month, last-7-days

    Returns:
        Tuple of (start_date, end_date)

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "today":
        return today, today
    if period == "yesterday":
        day = today - timedelta(days=1)
        return day, day
    if period == "this-week":
        return today - timedelta(days=today.weekday()), today
    if period == "last-week":
        start = today - timedelta(days=today.weekday() + 7)
        return start, start + timedelta(days=6)
    if period == "this-month":
        return today.replace(day=1), today
    if period == "last-month":
        first = today.replace(day=1)
        return (first - relativedelta(months=1)), first - timedelta(days=1)
    if period == "last-7-days":
        return today - timedelta(days=6), today

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
