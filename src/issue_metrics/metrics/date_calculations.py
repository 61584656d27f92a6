"""
Issue lifecycle date calculations.

Every count is taken over the inclusive window [issue start, issue closed].
Blocked ranges are merged before counting, and a blocked day is never also
counted as a weekend day or a holiday.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from issue_metrics.utils.date_utils import iter_days, parse_holidays, to_calendar_date

# Organisation holiday calendar (YYYY-MM-DD), used when no holiday list is given.
DEFAULT_HOLIDAYS: Tuple[str, ...] = (
    "2026-01-26",  # Republic Day
    "2026-03-14",  # Holi
    "2026-08-15",  # Independence Day
    "2026-10-02",  # Gandhi Jayanti
    "2026-10-24",  # Diwali
    "2026-12-25",  # Christmas
)


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day interval. Either end may be missing."""

    start: date | None
    end: date | None

    @classmethod
    def from_value(cls, value: object) -> DateRange:
        """
        Build a range from a DateRange, a {"start", "end"} mapping, a
        (start, end) pair or any object with start/end attributes.

        Unrecognised values become an empty (invalid) range.
        """
        if isinstance(value, Mapping):
            start, end = value.get("start"), value.get("end")
        elif isinstance(value, (list, tuple)) and len(value) == 2:
            start, end = value
        elif hasattr(value, "start") and hasattr(value, "end"):
            start, end = value.start, value.end
        else:
            return cls(None, None)
        return cls(to_calendar_date(start), to_calendar_date(end))

    @property
    def is_valid(self) -> bool:
        return self.start is not None and self.end is not None and self.end >= self.start

    @property
    def days(self) -> int:
        """Inclusive length in days, 0 for an invalid range."""
        if not self.is_valid:
            return 0
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.is_valid and self.start <= day <= self.end

    def clip(self, window_start: date, window_end: date) -> DateRange:
        """Intersect with a window; the result is invalid when they do not overlap."""
        if not self.is_valid:
            return self
        return DateRange(max(self.start, window_start), min(self.end, window_end))


@dataclass(frozen=True)
class MetricsResult:
    """Lifecycle metrics for one issue window, all in days."""

    total_days: int
    blocked_days: int
    weekend_days: int
    holiday_days: int
    age_of_issue: int
    time_to_resolve: int

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


def _issue_window(start_date: object, end_date: object) -> Tuple[date, date] | None:
    """Return the coerced (start, end) window, or None when it is missing or inverted."""
    start = to_calendar_date(start_date)
    end = to_calendar_date(end_date)
    if start is None or end is None or end < start:
        return None
    return start, end


def _holiday_set(holidays: Iterable[object] | None) -> Set[date]:
    return parse_holidays(DEFAULT_HOLIDAYS if holidays is None else holidays)


def calculate_total_days(start_date: object, end_date: object) -> int:
    """Total days between two dates, counting both ends (same day -> 1)."""
    window = _issue_window(start_date, end_date)
    if window is None:
        return 0
    start, end = window
    return (end - start).days + 1


def normalize_blocked_ranges(blocked_ranges: Iterable[object] | None) -> List[DateRange]:
    """
    Merge overlapping and adjacent blocked ranges.

    Invalid ranges (missing end, end before start) are dropped. Ranges that
    overlap or touch (next start <= previous end + 1 day) collapse into one, so
    the result is sorted, disjoint and has at least one free day between ranges.
    """
    if blocked_ranges is None:
        return []

    valid_ranges = [
        blocked
        for blocked in (DateRange.from_value(value) for value in blocked_ranges)
        if blocked.is_valid
    ]
    valid_ranges.sort(key=lambda blocked: blocked.start)

    merged: List[DateRange] = []
    for current in valid_ranges:
        if merged and (current.start - merged[-1].end).days <= 1:
            last = merged[-1]
            if current.end > last.end:
                merged[-1] = DateRange(last.start, current.end)
        else:
            merged.append(current)
    return merged


def is_date_blocked(day: object, normalized_ranges: Iterable[DateRange]) -> bool:
    """Return True if the day falls inside any of the ranges (inclusive)."""
    check_date = to_calendar_date(day)
    if check_date is None:
        return False
    return any(blocked.contains(check_date) for blocked in normalized_ranges)


def is_weekend(day: date) -> bool:
    """Saturday or Sunday."""
    return day.weekday() >= 5


def is_holiday(day: object, holidays: Iterable[object] | None = None) -> bool:
    """Return True if the day matches a holiday (default calendar when None)."""
    check_date = to_calendar_date(day)
    if check_date is None:
        return False
    return check_date in _holiday_set(holidays)


def _count_blocked(window: Tuple[date, date], normalized: List[DateRange]) -> int:
    return sum(blocked.clip(*window).days for blocked in normalized)


def _count_weekends(window: Tuple[date, date], normalized: List[DateRange]) -> int:
    return sum(
        1
        for day in iter_days(*window)
        if is_weekend(day) and not is_date_blocked(day, normalized)
    )


def _count_holidays(
    window: Tuple[date, date], normalized: List[DateRange], holiday_dates: Set[date]
) -> int:
    start, end = window
    return sum(
        1
        for holiday in holiday_dates
        if start <= holiday <= end and not is_date_blocked(holiday, normalized)
    )


def calculate_blocked_days(
    start_date: object, end_date: object, blocked_ranges: Iterable[object] | None
) -> int:
    """Blocked days inside the issue window, overlaps counted once."""
    window = _issue_window(start_date, end_date)
    if window is None:
        return 0
    return _count_blocked(window, normalize_blocked_ranges(blocked_ranges))


def calculate_weekend_days(
    start_date: object, end_date: object, blocked_ranges: Iterable[object] | None
) -> int:
    """Saturdays and Sundays inside the issue window that are not blocked."""
    window = _issue_window(start_date, end_date)
    if window is None:
        return 0
    return _count_weekends(window, normalize_blocked_ranges(blocked_ranges))


def calculate_holiday_days(
    start_date: object,
    end_date: object,
    blocked_ranges: Iterable[object] | None,
    holidays: Iterable[object] | None = None,
) -> int:
    """
    Distinct holidays inside the issue window that are not blocked.

    ``holidays=None`` uses DEFAULT_HOLIDAYS; an empty collection means no holidays.
    """
    window = _issue_window(start_date, end_date)
    if window is None:
        return 0
    return _count_holidays(
        window, normalize_blocked_ranges(blocked_ranges), _holiday_set(holidays)
    )


def calculate_age_of_issue(
    start_date: object, end_date: object, blocked_days: int, holiday_days: int
) -> int:
    """Total days - blocked days - holiday days, floored at 0. Weekends still count."""
    total_days = calculate_total_days(start_date, end_date)
    return max(0, total_days - blocked_days - holiday_days)


def calculate_time_to_resolve(
    total_days: int, blocked_days: int, holiday_days: int, weekend_days: int
) -> int:
    """Total days - blocked - holiday - weekend days, floored at 0."""
    return max(0, total_days - blocked_days - holiday_days - weekend_days)


def calculate_issue_metrics(
    start_date: object,
    end_date: object,
    blocked_ranges: Iterable[object] | None = None,
    holidays: Iterable[object] | None = None,
) -> MetricsResult | None:
    """
    Compute every lifecycle metric for one issue.

    Returns None when the window is missing or the closed date is before the start.
    """
    window = _issue_window(start_date, end_date)
    if window is None:
        return None

    normalized = normalize_blocked_ranges(blocked_ranges)
    start, end = window
    total_days = (end - start).days + 1
    blocked_days = _count_blocked(window, normalized)
    weekend_days = _count_weekends(window, normalized)
    holiday_days = _count_holidays(window, normalized, _holiday_set(holidays))

    return MetricsResult(
        total_days=total_days,
        blocked_days=blocked_days,
        weekend_days=weekend_days,
        holiday_days=holiday_days,
        age_of_issue=calculate_age_of_issue(start, end, blocked_days, holiday_days),
        time_to_resolve=calculate_time_to_resolve(
            total_days, blocked_days, holiday_days, weekend_days
        ),
    )
