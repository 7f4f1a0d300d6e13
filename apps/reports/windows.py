"""
Calendar windows for time-bucketed reports.

A Window is an inclusive interval [start, end] of timezone-aware datetimes
with a display label. Days, weeks and months are cut in the current Django
timezone (settings.TIME_ZONE), anchored on an explicit ``now`` so callers
and tests control the clock.

Windows:
- daily_windows: the last N calendar days, oldest first
- weekly_windows: the last N Monday-Sunday weeks, oldest first
- monthly_window: one calendar month plus one sub-window per day
"""

import calendar
import datetime
import re
from collections import namedtuple

from django.utils import timezone

from apps.core.exceptions import InvalidInput

DAILY_DEFAULT = 7
DAILY_MAX = 30
WEEKLY_DEFAULT = 4
WEEKLY_MAX = 12

MONTH_KEY_RE = re.compile(r'([0-9]{4})-([0-9]{2})')


# Inclusive time interval with a display label
Window = namedtuple('Window', ['start', 'end', 'label'])

MonthWindow = namedtuple('MonthWindow', ['key', 'window', 'days'])


def clamp_count(raw, default, maximum):
    """
    Interpret a requested window count leniently.

    Anything that is not an integer in [1, maximum] (including None,
    garbage strings, 0 and negatives) becomes ``default``. Never raises.

    Examples:
        clamp_count('14', 7, 30) -> 14
        clamp_count('999', 7, 30) -> 7
        clamp_count('abc', 7, 30) -> 7
    """
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    if 1 <= value <= maximum:
        return value
    return default


def resolve_now(now=None):
    """Return ``now`` as an aware datetime, defaulting to the current time."""
    if now is None:
        return timezone.now()
    if timezone.is_naive(now):
        return timezone.make_aware(now)
    return now


def local_today(now=None):
    """Calendar date of ``now`` in the current timezone."""
    return timezone.localtime(resolve_now(now)).date()


def day_bounds(day):
    """First and last instant of ``day`` in the current timezone."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.datetime.combine(day, datetime.time.min), tz)
    end = timezone.make_aware(datetime.datetime.combine(day, datetime.time.max), tz)
    return start, end


def day_window(day, label=None):
    start, end = day_bounds(day)
    return Window(start, end, day.isoformat() if label is None else label)


def daily_windows(count=DAILY_DEFAULT, now=None):
    """
    One window per calendar day, ending with today.

    Args:
        count: Number of days; clamped to [1, 30], default 7
        now: Reference time (defaults to timezone.now())

    Returns:
        list[Window]: Oldest first, labelled YYYY-MM-DD
    """
    count = clamp_count(count, DAILY_DEFAULT, DAILY_MAX)
    today = local_today(now)
    return [
        day_window(today - datetime.timedelta(days=offset))
        for offset in range(count - 1, -1, -1)
    ]


def weekly_windows(count=WEEKLY_DEFAULT, now=None):
    """
    One window per Monday-Sunday week, ending with the current week.

    Window i (0 = current week) starts ``weekday + 7 * i`` days before today.

    Args:
        count: Number of weeks; clamped to [1, 12], default 4
        now: Reference time (defaults to timezone.now())

    Returns:
        list[Window]: Oldest first, labelled "YYYY-MM-DD to YYYY-MM-DD"
    """
    count = clamp_count(count, WEEKLY_DEFAULT, WEEKLY_MAX)
    today = local_today(now)
    weekday_offset = today.weekday()

    windows = []
    for index in range(count - 1, -1, -1):
        monday = today - datetime.timedelta(days=weekday_offset + 7 * index)
        sunday = monday + datetime.timedelta(days=6)
        windows.append(Window(
            day_bounds(monday)[0],
            day_bounds(sunday)[1],
            f'{monday.isoformat()} to {sunday.isoformat()}',
        ))
    return windows


def parse_month_key(month_key=None, now=None):
    """
    Parse a YYYY-MM key into the first day of that month.

    None selects the current month. Unlike day/week counts, a malformed
    key is an error.

    Raises:
        InvalidInput: If the key is not a valid YYYY-MM month
    """
    if month_key is None:
        return local_today(now).replace(day=1)

    match = MONTH_KEY_RE.fullmatch(month_key) if isinstance(month_key, str) else None
    if match is None:
        raise InvalidInput(
            'Invalid month format, expected YYYY-MM.', code='invalid_month'
        )

    year, month = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= month <= 12:
        raise InvalidInput(
            'Invalid month format, expected YYYY-MM.', code='invalid_month'
        )
    return datetime.date(year, month, 1)


def monthly_window(month_key=None, now=None):
    """
    Whole-month window plus one sub-window per calendar day.

    The number of day windows follows the real calendar (28-31).
    Day windows are labelled with the day-of-month integer.

    Returns:
        MonthWindow: (key 'YYYY-MM', whole-month Window, list of day Windows)

    Raises:
        InvalidInput: If month_key is malformed
    """
    first_day = parse_month_key(month_key, now)
    days_in_month = calendar.monthrange(first_day.year, first_day.month)[1]

    days = [
        day_window(first_day.replace(day=day), label=day)
        for day in range(1, days_in_month + 1)
    ]
    key = first_day.strftime('%Y-%m')
    return MonthWindow(key, Window(days[0].start, days[-1].end, key), days)
