"""
CALENDAR SERVICE
================

Pure date arithmetic for ledger schedules:
- Adding whole days / weeks / months to a date
- Enumerating the unit boundaries covered by an interval

Boundaries are aligned to the start of their unit: every day, every
week start (Sunday) and the first of every month.
"""

from datetime import date, timedelta
from dateutil.relativedelta import relativedelta, SU
from pardna.models import Frequency, PeriodType


PERIOD_TYPES = {
    Frequency.DAILY: PeriodType.DAY,
    Frequency.WEEKLY: PeriodType.WEEK,
    Frequency.MONTHLY: PeriodType.MONTH,
}


def to_frequency(frequency):
    """Coerce a Frequency, its string value or None (MONTHLY) to a Frequency."""
    if isinstance(frequency, Frequency):
        return frequency
    if frequency is None:
        return Frequency.MONTHLY
    try:
        return Frequency(str(frequency).upper())
    except ValueError:
        return Frequency.MONTHLY


def period_type_for(frequency):
    return PERIOD_TYPES[to_frequency(frequency)]


# ============================================================
# INTERVAL ADDITION
# ============================================================

def add_interval(start, frequency, count):
    """
    Add `count` frequency units to `start`.

    Months follow calendar semantics: the day of month is kept and
    clamped to the end of shorter months (Jan 31 + 1 month = Feb 29/28).
    """
    frequency = to_frequency(frequency)

    if frequency == Frequency.DAILY:
        return start + timedelta(days=count)
    if frequency == Frequency.WEEKLY:
        return start + timedelta(weeks=count)
    return start + relativedelta(months=count)


# ============================================================
# INTERVAL ENUMERATION
# ============================================================

def start_of_unit(day, frequency):
    """First day of the day/week/month that contains `day`."""
    frequency = to_frequency(frequency)

    if frequency == Frequency.DAILY:
        return day
    if frequency == Frequency.WEEKLY:
        return day + relativedelta(weekday=SU(-1))
    return day.replace(day=1)


def enumerate_intervals(start, end, frequency):
    """
    Return every unit boundary between start and end (inclusive), ascending.

    enumerate_intervals(s, add_interval(s, f, n), f) always holds at
    least n + 1 boundaries.
    """
    if end < start:
        return []

    boundaries = []
    current = start_of_unit(start, frequency)
    last = start_of_unit(end, frequency)
    step = 0

    while True:
        boundary = add_interval(current, frequency, step)
        if boundary > last:
            break
        boundaries.append(boundary)
        step += 1

    return boundaries


def is_past(day, today=None):
    """True when `day` is strictly before today."""
    today = today or date.today()
    return day < today
