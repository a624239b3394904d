"""Date manipulation utilities.

All scheduling runs on naive UTC wall-clock datetimes. Offsets are converted
to UTC on the way in; naive values and date-only strings are taken as UTC.
"""

import math
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional

from dateutil.relativedelta import relativedelta

SECONDS_PER_DAY = 24 * 60 * 60

# Bank auto-payments are processed one minute past midnight
PROCESSING_TIME = time(0, 1)


def to_utc_naive(moment: datetime) -> datetime:
    """Drop the offset after converting to UTC; naive values pass through"""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO date or datetime string (``Z`` suffix allowed)"""
    return to_utc_naive(datetime.fromisoformat(value.strip()))


def parse_optional(value: Optional[str]) -> Optional[datetime]:
    return parse_timestamp(value) if value else None


def format_timestamp(moment: datetime) -> str:
    """Format like a browser ``toISOString()``: milliseconds and a ``Z`` suffix"""
    return to_utc_naive(moment).isoformat(timespec="milliseconds") + "Z"


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def at_processing_time(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), PROCESSING_TIME)


def truncate_to_minute(moment: datetime) -> datetime:
    return moment.replace(second=0, microsecond=0)


def add_days(moment: datetime, days: int) -> datetime:
    return moment + timedelta(days=days)


def add_months(moment: datetime, months: int) -> datetime:
    """Calendar month arithmetic; day-of-month is clamped (Jan 31 + 1 -> Feb 28/29)"""
    return moment + relativedelta(months=months)


def days_between_ceil(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounding partial days up (negative if end < start)"""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def whole_days_elapsed(start: datetime, end: datetime) -> int:
    """Completed days from start to end, rounding down"""
    return math.floor((end - start).total_seconds() / SECONDS_PER_DAY)


def months_between_ceil(start: datetime, end: datetime) -> int:
    """Calendar months from start to end, counting a partial month as a full one"""
    if end <= start:
        return 0
    delta = relativedelta(end, start)
    months = delta.years * 12 + delta.months
    if add_months(start, months) < end:
        months += 1
    return months


def generate_month_starts(start: datetime, end: datetime) -> List[datetime]:
    """First day of every month from start's month up to end (inclusive)"""
    cursor = datetime(start.year, start.month, 1)
    months = []
    while cursor <= end:
        months.append(cursor)
        cursor = add_months(cursor, 1)
    return months
