"""Pure date-interval engine for issue lifecycle metrics."""

from issue_metrics.metrics.date_calculations import (
    DEFAULT_HOLIDAYS,
    DateRange,
    MetricsResult,
    calculate_age_of_issue,
    calculate_blocked_days,
    calculate_holiday_days,
    calculate_issue_metrics,
    calculate_time_to_resolve,
    calculate_total_days,
    calculate_weekend_days,
    is_date_blocked,
    is_holiday,
    is_weekend,
    normalize_blocked_ranges,
)
from issue_metrics.metrics.validation import ValidationResult, validate_date_range

__all__ = [
    "DEFAULT_HOLIDAYS",
    "DateRange",
    "MetricsResult",
    "ValidationResult",
    "calculate_age_of_issue",
    "calculate_blocked_days",
    "calculate_holiday_days",
    "calculate_issue_metrics",
    "calculate_time_to_resolve",
    "calculate_total_days",
    "calculate_weekend_days",
    "is_date_blocked",
    "is_holiday",
    "is_weekend",
    "normalize_blocked_ranges",
    "validate_date_range",
]
