"""
Calendar-day helpers.

Every date in the tracker is a plain ``datetime.date``: no time of day, no
timezone. Differences are whole days.
"""

from datetime import date, datetime, timedelta

from dateutil import parser as date_parser


def normalize(value):
    """
    Normalize a date-like value to a calendar day.
    Returns None for empty, unparseable or non-date input.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError):
        return None


def today():
    """Current local calendar day"""
    return date.today()


def add_days(day, days):
    """Shift a day by a (possibly negative) number of days"""
    if day is None:
        return None
    days = int(days)
    try:
        return day + timedelta(days=days)
    except OverflowError:
        # Clamp to the representable calendar range
        return date.max if days > 0 else date.min


def days_between(start, end):
    """Signed whole-day count end - start"""
    return (end - start).days


def to_iso(day):
    """Render a day as YYYY-MM-DD"""
    if day is None:
        return None
    return day.isoformat()
