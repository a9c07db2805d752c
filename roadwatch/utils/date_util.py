"""
Date helpers for day truncation and input/display formatting.
"""

from datetime import date, datetime, time
from typing import Optional, Union

import pandas as pd
from dateutil import parser

from roadwatch.utils.log_util import app_logger

logger = app_logger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp]


def to_date(date_string: str) -> datetime:
    """
    Convert a date string to a datetime object.

    :param date_string: str - The date string to parse.
    :return: datetime - Parsed datetime object.
    :raises: Exception if date string parsing fails.
    """
    try:
        return parser.parse(date_string)
    except Exception as e:
        logger.error(f"Error parsing date string: {e}", exc_info=True)
        raise


def to_datetime(value: Optional[DateLike]) -> Optional[datetime]:
    """
    Coerce a date-like value into a python datetime, or None if it can't be read.

    :param value: str, date, datetime or pandas Timestamp
    :return: datetime or None
    """
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return parser.parse(value)
        except (ValueError, OverflowError):
            logger.debug(f"Unparseable date value: {value!r}")
            return None
    return None


def to_day(value: Optional[DateLike]) -> Optional[datetime]:
    """Truncate a date-like value to midnight of its day."""
    dt = to_datetime(value)
    if dt is None:
        return None
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_day(value: DateLike) -> datetime:
    """Datetimes pass through untouched; plain dates become 00:00:00."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    return to_date(value)


def end_of_day(value: DateLike) -> datetime:
    """Datetimes pass through untouched; plain dates become 23:59:59.999999."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.max)
    return datetime.combine(to_date(value).date(), time.max)


def month_start(value: datetime) -> datetime:
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def format_date_input(value: Optional[datetime]) -> str:
    """Format as YYYY-MM-DD for date inputs; empty string for None."""
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def format_display_date(value: datetime) -> str:
    """Short display form used in tooltips, e.g. 'Jan 05, 2021'."""
    return value.strftime("%b %d, %Y")
