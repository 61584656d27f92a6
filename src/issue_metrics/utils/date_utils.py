"""Date utilities for calendar-day coercion and iteration."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, Set

import pandas as pd

ISO_DATE_FORMAT = "%Y-%m-%d"

# Words pandas resolves against the current clock.
RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


def parse_calendar_date(value: object) -> date | None:
    """
    Convert a date-like value to a calendar date.

    Accepts ``date``, ``datetime``/``pd.Timestamp`` (time of day and timezone are
    dropped, the wall-clock day is kept), ``numpy.datetime64`` and ISO 8601
    date or timestamp strings.

    Returns None for missing values (None, NaN, NaT, blank strings).
    Raises ValueError when the value is present but cannot be read as a date.
    """
    if value is None:
        return None
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    # datetime is a subclass of date, so it must be checked first.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        if text.lower() in RELATIVE_DATE_WORDS:
            raise ValueError(f"Invalid date format: {value!r}")
        try:
            parsed = pd.to_datetime(text, format="ISO8601")
        except (ValueError, TypeError, OverflowError) as exc:
            raise ValueError(f"Invalid date format: {value!r}") from exc
        if pd.isna(parsed):
            return None
        return parsed.date()
    if isinstance(value, (bool, int, float)):
        raise ValueError(f"Invalid date format: {value!r}")
    try:
        parsed = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError) as exc:
        raise ValueError(f"Invalid date format: {value!r}") from exc
    if pd.isna(parsed):
        return None
    return parsed.date()


def to_calendar_date(value: object) -> date | None:
    """Lenient form of parse_calendar_date: unparseable values count as missing."""
    try:
        return parse_calendar_date(value)
    except ValueError:
        return None


def format_calendar_date(value: object) -> str | None:
    """Return the ISO ``YYYY-MM-DD`` form of a date-like value, or None."""
    parsed = to_calendar_date(value)
    return parsed.strftime(ISO_DATE_FORMAT) if parsed else None


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        # Stop before stepping past date.max.
        if current == end:
            return
        current += timedelta(days=1)


def parse_holidays(values: Iterable[object] | None) -> Set[date]:
    """Coerce holiday entries to a set of dates, dropping missing or unparseable ones."""
    if values is None:
        return set()
    if isinstance(values, (str, date)):
        values = [values]
    holidays: Set[date] = set()
    for value in values:
        parsed = to_calendar_date(value)
        if parsed is not None:
            holidays.add(parsed)
    return holidays
