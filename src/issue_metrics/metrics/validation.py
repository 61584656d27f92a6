"""Validation of an issue start/closed date pair."""

from __future__ import annotations

from dataclasses import dataclass

from issue_metrics.utils.date_utils import parse_calendar_date

MISSING_DATES = "Both dates are required"
INVALID_DATE_FORMAT = "Invalid date format"
END_BEFORE_START = "End date must be on or after start date"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.valid


def validate_date_range(start_date: object, end_date: object) -> ValidationResult:
    """
    Check that both dates are present, parse, and are in order.

    Advisory only: the metric functions guard invalid windows on their own.
    """
    try:
        start = parse_calendar_date(start_date)
        end = parse_calendar_date(end_date)
    except ValueError:
        # A missing date is reported ahead of a malformed one.
        if _is_missing(start_date) or _is_missing(end_date):
            return ValidationResult(False, MISSING_DATES)
        return ValidationResult(False, INVALID_DATE_FORMAT)

    if start is None or end is None:
        return ValidationResult(False, MISSING_DATES)
    if end < start:
        return ValidationResult(False, END_BEFORE_START)
    return ValidationResult(True)


def _is_missing(value: object) -> bool:
    try:
        return parse_calendar_date(value) is None
    except ValueError:
        return False
