"""Calendar-day classification utilities for on-call periods.

This module provides the low-level date utilities used to classify the
days covered by an on-call period:
- Deriving the local calendar date of an offset-aware timestamp
- Enumerating the calendar dates of a half-open date range
- Classifying a date into the weekday (Mon-Thu) or weekend (Fri-Sun) bucket
- Counting OOH weekdays and weekend days between two timestamps

A "day" is always a calendar date, never a fixed 24-hour block, so
periods spanning a daylight-saving transition are counted by wall-clock date.
"""

import datetime as dt
from typing import Iterator, Tuple

# dt.date.weekday(): Monday == 0 ... Sunday == 6
WEEKEND_WEEKDAYS = frozenset({4, 5, 6})


def calendar_date(timestamp: dt.datetime) -> dt.date:
    """Return the calendar date of a timestamp in its own UTC offset.

    Args:
        timestamp: Offset-aware timestamp (naive values are taken as local
            wall-clock time)

    Returns:
        The date as experienced at the timestamp's own offset

    Example:
        >>> tz = dt.timezone(dt.timedelta(hours=1))
        >>> calendar_date(dt.datetime(2024, 8, 1, 0, 30, tzinfo=tz))
        datetime.date(2024, 8, 1)
    """
    return timestamp.date()


def iter_dates(start_date: dt.date, end_date: dt.date) -> Iterator[dt.date]:
    """Yield every date d with start_date <= d < end_date.

    Example:
        >>> list(iter_dates(dt.date(2024, 8, 30), dt.date(2024, 9, 1)))
        [datetime.date(2024, 8, 30), datetime.date(2024, 8, 31)]
        >>> list(iter_dates(dt.date(2024, 8, 30), dt.date(2024, 8, 30)))
        []
    """
    current = start_date
    while current < end_date:
        yield current
        current += dt.timedelta(days=1)


def is_ooh_weekend_day(day: dt.date) -> bool:
    """Return True if the date falls in the weekend (Friday-Sunday) bucket.

    Friday counts as a weekend day because Friday evening on-call is paid
    at the weekend rate.

    Example:
        >>> is_ooh_weekend_day(dt.date(2024, 9, 20))  # Friday
        True
        >>> is_ooh_weekend_day(dt.date(2024, 9, 19))  # Thursday
        False
    """
    return day.weekday() in WEEKEND_WEEKDAYS


def count_ooh_days(since: dt.datetime, until: dt.datetime) -> Tuple[int, int]:
    """Count OOH weekdays and weekend days covered between two timestamps.

    Every calendar date in [calendar_date(since), calendar_date(until)) is
    counted once. The date of ``until`` itself is never counted, so a period
    that starts and ends on the same date counts nothing, and a period whose
    ``until`` precedes ``since`` counts nothing.

    Args:
        since: Start of the on-call period
        until: End of the on-call period

    Returns:
        Tuple of (weekday_count, weekend_count)

    Example:
        >>> tz = dt.timezone(dt.timedelta(hours=1))
        >>> count_ooh_days(
        ...     dt.datetime(2024, 9, 20, 20, 0, tzinfo=tz),
        ...     dt.datetime(2024, 9, 23, 10, 0, tzinfo=tz),
        ... )
        (0, 3)
    """
    weekdays = 0
    weekend_days = 0

    for day in iter_dates(calendar_date(since), calendar_date(until)):
        if is_ooh_weekend_day(day):
            weekend_days += 1
        else:
            weekdays += 1

    return weekdays, weekend_days
