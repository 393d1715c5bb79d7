"""Calendar helpers for the daily and weekly death tables.

Daily records are bucketed into Monday-anchored weeks. The weekly
national statistics table has no date column of its own, so its week
ending dates are rebuilt from the row position.
"""
import re
from datetime import date, timedelta

import pandas as pd

from .errors import ParseError

DAYS_OF_WEEK = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')

MONTH_ABBREVIATIONS = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                       'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')
_MONTH_NUMBERS = {name: number for number, name in enumerate(MONTH_ABBREVIATIONS, start=1)}

_DAY_MONTH_YEAR = re.compile(r'([0-9]{2})-([A-Za-z]{3})-([0-9]{2})')


def parse_day_month_year(value: str) -> date:
    """Parse a ``DD-MMM-YY`` string such as ``05-Mar-20``.

    Two-digit years always land in 2000-2099. The month must be an English
    abbreviation in title case (``Mar``, not ``MAR``) whatever the process
    locale, and no surrounding whitespace is allowed, so every accepted
    string formats back to itself.
    """
    match = _DAY_MONTH_YEAR.fullmatch(value) if isinstance(value, str) else None
    if match is None:
        raise ParseError(f"Expected a DD-MMM-YY date, got {value!r}", stage='parse dates')

    day, month_name, year = match.groups()
    month = _MONTH_NUMBERS.get(month_name)
    if month is None:
        raise ParseError(f"Unrecognised month abbreviation {month_name!r} in {value!r}",
                         stage='parse dates')

    try:
        return date(2000 + int(year), month, int(day))
    except ValueError as e:
        raise ParseError(f"Invalid calendar date {value!r}: {e}", stage='parse dates') from e


def format_day_month_year(d: date) -> str:
    return f"{d.day:02d}-{MONTH_ABBREVIATIONS[d.month - 1]}-{d.year % 100:02d}"


def day_of_week(d: date) -> str:
    return DAYS_OF_WEEK[d.weekday()]


def week_start(d: date) -> date:
    """Return the Monday on or before ``d``."""
    return d - timedelta(days=d.weekday())


def week_ending_from_index(start: date, index: int) -> date:
    """Week ending date of the row at ``index`` in a weekly table.

    The national statistics spreadsheet lists one row per week starting
    at ``start``; nothing in the file records the date, so this relies on
    the vendor keeping a strict weekly cadence.
    """
    return start + timedelta(weeks=index)


def week_starts(dates: pd.Series) -> pd.Series:
    """Vectorised ``week_start`` for a datetime64 Series."""
    normalized = dates.dt.normalize()
    return normalized - pd.to_timedelta(normalized.dt.weekday, unit='D')


def days_of_week(dates: pd.Series) -> pd.Series:
    """Ordered Monday-first categorical of weekday names."""
    names = dates.dt.weekday.map(lambda i: DAYS_OF_WEEK[i])
    return pd.Series(pd.Categorical(names, categories=DAYS_OF_WEEK, ordered=True),
                     index=dates.index, name=dates.name)
