"""Time Utilities - UTC timestamps and calendar dates"""
from datetime import date, datetime, timezone
from typing import Optional, Union
from dateutil import parser as date_parser


def utc_now() -> datetime:
    """Get current UTC datetime"""
    return datetime.now(timezone.utc)


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse a calendar date

    Accepts plain ISO dates as well as full timestamps such as
    ``2026-11-01T18:30:00.000Z``; for timestamps the date part is kept.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.isoparse(value).date()


def is_overdue(due_date: Optional[date], today: Optional[date] = None) -> bool:
    """
    Check if a due date has passed

    Args:
        due_date: Due date or None
        today: Reference date, defaults to the current UTC date

    Returns:
        True if overdue, False otherwise
    """
    if due_date is None:
        return False
    today = today or utc_now().date()
    return today > due_date
