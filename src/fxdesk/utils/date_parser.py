"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

PERIODS = ("today", "this-week", "this-month", "last-month", "this-year", "last-30-days")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Accepts "today", "yesterday", "N days ago" and any absolute date that
    dateutil understands ("2024-01-15", "15 Jan 2024", ...). Ambiguous
    numeric dates are read day first, as they are written on receipts.

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text.endswith(" days ago"):
        count = text[: -len(" days ago")].strip()
        if count.isdigit():
            return today - timedelta(days=int(count))

    try:
        if len(text) == 10 and text[4] == "-":
            return date.fromisoformat(text)
        return date_parser.parse(text, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str) -> tuple[date, date]:
    """Get inclusive start and end dates for a named report period.

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "today":
        return today, today
    if period == "this-week":
        return today - timedelta(days=today.weekday()), today
    if period == "this-month":
        return today.replace(day=1), today
    if period == "last-month":
        start = (today - relativedelta(months=1)).replace(day=1)
        return start, today.replace(day=1) - timedelta(days=1)
    if period == "this-year":
        return today.replace(month=1, day=1), today
    if period == "last-30-days":
        return today - timedelta(days=30), today

    raise ValueError(f"Unknown period: '{period}'. Supported periods: {', '.join(PERIODS)}")
