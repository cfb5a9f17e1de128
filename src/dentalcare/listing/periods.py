"""Calendar windows used by the appointment lookups."""
from __future__ import annotations

import calendar
import datetime as dt


def month_bounds(year: int, month: int) -> tuple[dt.date, dt.date]:
    """First and last day of the month; raises ValueError for an invalid month."""
    last = calendar.monthrange(year, month)[1]
    return dt.date(year, month, 1), dt.date(year, month, last)


def week_bounds(day: dt.date) -> tuple[dt.date, dt.date]:
    """Monday through Sunday of the ISO week containing ``day``."""
    monday = day - dt.timedelta(days=day.weekday())
    return monday, monday + dt.timedelta(days=6)
