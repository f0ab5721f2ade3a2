"""Calendar date <-> host day count conversion.

The host stores dates as the number of days since 1 Jan 1960 (day 0).
Time of day is ignored; there is no timezone or leap-second handling.
"""

from __future__ import annotations

import datetime

# Days from 1 March of the (shifted) year to the first of each month,
# indexed by calendar month 0-11.
_MONTH_OFFSETS = (306, 337, 0, 31, 61, 92, 122, 153, 184, 214, 245, 275)

# 1 Jan 1960 is this many days after 1 March 1800.
_EPOCH_OFFSET = 58379

EPOCH = datetime.date(1960, 1, 1)


def to_day_count(year: int, month: int, day: int) -> int:
    """Convert a proleptic Gregorian date to a day count.

    Args:
        year: Four-digit year.
        month: Month as 0-11.
        day: Day of month as 1-31.
    """
    # Years since 1800, with the year boundary moved to 1 March so that the
    # leap day is the last day of the shifted year.
    y = year - 1800
    if month < 2:
        y -= 1

    days = y * 365 + y // 4 - y // 100 + (y // 100 + 2) // 4
    days += _MONTH_OFFSETS[month] + day - 1
    return days - _EPOCH_OFFSET


def date_to_day_count(value: datetime.date) -> int:
    return to_day_count(value.year, value.month - 1, value.day)


def day_count_to_date(days: int) -> datetime.date:
    """Inverse of date_to_day_count()."""
    return EPOCH + datetime.timedelta(days=days)
