"""
Tests for issue lifecycle date calculations
"""

from datetime import date, datetime, timedelta

import pytest

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


class TestDateRange:
    """Tests for DateRange"""

    def test_from_mapping(self):
        """Test building a range from a start/end mapping"""
        blocked = DateRange.from_value({"start": "2026-01-01", "end": date(2026, 1, 3)})
        assert blocked == DateRange(date(2026, 1, 1), date(2026, 1, 3))
        assert blocked.days == 3

    def test_from_pair(self):
        """Test building a range from a (start, end) pair"""
        blocked = DateRange.from_value(("2026-01-01", "2026-01-01"))
        assert blocked.is_valid is True
        assert blocked.days == 1

    def test_unrecognised_value_is_invalid(self):
        """Test that junk becomes an empty range"""
        assert DateRange.from_value("2026-01-01").is_valid is False
        assert DateRange.from_value(None).is_valid is False

    def test_end_before_start_is_invalid(self):
        """Test inverted range"""
        blocked = DateRange(date(2026, 1, 5), date(2026, 1, 1))
        assert blocked.is_valid is False
        assert blocked.days == 0
        assert blocked.contains(date(2026, 1, 3)) is False

    def test_clip_without_overlap(self):
        """Test clipping to a window it does not touch"""
        blocked = DateRange(date(2026, 2, 1), date(2026, 2, 5))
        assert blocked.clip(date(2026, 1, 1), date(2026, 1, 31)).days == 0


class TestCalculateTotalDays:
    """Tests for calculate_total_days"""

    def test_same_day_is_one(self):
        """Test that a single-day issue spans one day"""
        assert calculate_total_days("2026-01-01", "2026-01-01") == 1

    def test_inclusive_count(self, jan_window):
        """Test that both endpoints are counted"""
        assert calculate_total_days(*jan_window) == 31

    def test_time_of_day_ignored(self):
        """Test truncation to day granularity"""
        start = datetime(2026, 1, 1, 23, 59)
        end = datetime(2026, 1, 2, 0, 1)
        assert calculate_total_days(start, end) == 2

    @pytest.mark.parametrize(
        "start,end",
        [
            (None, "2026-01-01"),
            ("2026-01-01", None),
            ("not-a-date", "2026-01-05"),
            ("2026-01-10", "2026-01-01"),
        ],
    )
    def test_unusable_window_is_zero(self, start, end):
        """Test missing, unparseable and inverted windows"""
        assert calculate_total_days(start, end) == 0


class TestNormalizeBlockedRanges:
    """Tests for normalize_blocked_ranges"""

    def test_empty_input(self):
        """Test None and empty list"""
        assert normalize_blocked_ranges(None) == []
        assert normalize_blocked_ranges([]) == []

    def test_adjacent_ranges_merge(self):
        """Test that a range starting the day after another ends is merged"""
        merged = normalize_blocked_ranges(
            [
                {"start": "2026-01-01", "end": "2026-01-05"},
                {"start": "2026-01-06", "end": "2026-01-10"},
            ]
        )
        assert merged == [DateRange(date(2026, 1, 1), date(2026, 1, 10))]

    def test_gap_keeps_ranges_apart(self):
        """Test that a two-day gap is not merged"""
        merged = normalize_blocked_ranges(
            [
                {"start": "2026-01-08", "end": "2026-01-10"},
                {"start": "2026-01-01", "end": "2026-01-05"},
            ]
        )
        assert merged == [
            DateRange(date(2026, 1, 1), date(2026, 1, 5)),
            DateRange(date(2026, 1, 8), date(2026, 1, 10)),
        ]

    def test_open_ended_range_at_date_max(self):
        """Test a range running to date.max absorbs later ranges"""
        merged = normalize_blocked_ranges(
            [(date(2026, 1, 1), date.max), (date(2026, 2, 1), date(2026, 2, 2))]
        )
        assert merged == [DateRange(date(2026, 1, 1), date.max)]

    def test_adjacent_ranges_merge_at_date_max(self):
        """Test adjacency on the last representable days"""
        day_before = date.max - timedelta(days=1)
        merged = normalize_blocked_ranges([(date.max, date.max), (day_before, day_before)])
        assert merged == [DateRange(day_before, date.max)]

    def test_one_free_day_keeps_ranges_apart(self):
        """Test that a single free day between ranges is not merged"""
        merged = normalize_blocked_ranges(
            [("2026-01-01", "2026-01-05"), ("2026-01-07", "2026-01-10")]
        )
        assert len(merged) == 2

    def test_overlapping_and_contained_ranges(self):
        """Test overlap, containment and unsorted input"""
        merged = normalize_blocked_ranges(
            [
                {"start": "2026-01-04", "end": "2026-01-08"},
                {"start": "2026-01-02", "end": "2026-01-06"},
                {"start": "2026-01-03", "end": "2026-01-04"},
                {"start": "2026-03-01", "end": "2026-03-02"},
            ]
        )
        assert merged == [
            DateRange(date(2026, 1, 2), date(2026, 1, 8)),
            DateRange(date(2026, 3, 1), date(2026, 3, 2)),
        ]

    def test_invalid_ranges_dropped(self):
        """Test that missing, inverted and unparseable ranges are ignored"""
        merged = normalize_blocked_ranges(
            [
                {"start": None, "end": "2026-01-05"},
                {"start": "2026-01-05"},
                {"start": "2026-01-10", "end": "2026-01-01"},
                {"start": "garbage", "end": "2026-01-03"},
                {"start": "2026-01-20", "end": "2026-01-21"},
            ]
        )
        assert merged == [DateRange(date(2026, 1, 20), date(2026, 1, 21))]

    def test_idempotent(self):
        """Test that normalizing twice changes nothing"""
        ranges = [
            {"start": "2026-01-01", "end": "2026-01-05"},
            {"start": "2026-01-06", "end": "2026-01-07"},
            {"start": "2026-01-03", "end": "2026-01-04"},
            {"start": "2026-02-01", "end": "2026-02-01"},
        ]
        once = normalize_blocked_ranges(ranges)
        assert normalize_blocked_ranges(once) == once

    def test_output_disjoint_and_not_adjacent(self):
        """Test consecutive merged ranges keep a free day between them"""
        merged = normalize_blocked_ranges(
            [
                ("2026-01-01", "2026-01-02"),
                ("2026-01-04", "2026-01-05"),
                ("2026-01-06", "2026-01-06"),
                ("2026-01-12", "2026-01-20"),
                ("2026-01-15", "2026-01-16"),
            ]
        )
        for current, following in zip(merged, merged[1:]):
            assert (following.start - current.end).days > 1

    def test_input_not_mutated(self):
        """Test that the caller's ranges are left alone"""
        ranges = [
            {"start": "2026-01-01", "end": "2026-01-05"},
            {"start": "2026-01-03", "end": "2026-01-09"},
        ]
        normalize_blocked_ranges(ranges)
        assert ranges[0] == {"start": "2026-01-01", "end": "2026-01-05"}


class TestClassifiers:
    """Tests for blocked, weekend and holiday classification"""

    def test_is_date_blocked_inclusive(self):
        """Test both range ends are blocked"""
        normalized = normalize_blocked_ranges([("2026-01-10", "2026-01-15")])
        assert is_date_blocked(date(2026, 1, 10), normalized) is True
        assert is_date_blocked("2026-01-15", normalized) is True
        assert is_date_blocked(date(2026, 1, 16), normalized) is False
        assert is_date_blocked(None, normalized) is False

    def test_is_weekend(self):
        """Test Saturday and Sunday only"""
        assert is_weekend(date(2026, 1, 3)) is True
        assert is_weekend(date(2026, 1, 4)) is True
        assert is_weekend(date(2026, 1, 5)) is False
        assert is_weekend(date(2026, 1, 2)) is False

    def test_is_holiday_default_calendar(self):
        """Test the built-in holiday list"""
        assert is_holiday("2026-01-26") is True
        assert is_holiday(datetime(2026, 12, 25, 18, 30)) is True
        assert is_holiday("2026-01-27") is False

    def test_is_holiday_custom_calendar(self):
        """Test a caller-supplied holiday list"""
        assert is_holiday(date(2026, 1, 26), []) is False
        assert is_holiday(date(2026, 5, 1), ["2026-05-01"]) is True

    def test_default_holidays(self):
        """Test the reference holiday list"""
        assert DEFAULT_HOLIDAYS == (
            "2026-01-26",
            "2026-03-14",
            "2026-08-15",
            "2026-10-02",
            "2026-10-24",
            "2026-12-25",
        )


class TestCalculateBlockedDays:
    """Tests for calculate_blocked_days"""

    def test_range_inside_window(self, jan_window):
        """Test a fully contained range"""
        assert calculate_blocked_days(*jan_window, [("2026-01-10", "2026-01-15")]) == 6

    def test_range_clipped_to_window(self):
        """Test a range that starts before the window"""
        blocked = [{"start": "2026-01-05", "end": "2026-01-12"}]
        assert calculate_blocked_days("2026-01-10", "2026-01-20", blocked) == 3

    def test_range_outside_window(self, jan_window):
        """Test a range entirely after the window"""
        assert calculate_blocked_days(*jan_window, [("2026-02-01", "2026-02-10")]) == 0

    def test_overlaps_counted_once(self):
        """Test overlapping ranges are not double counted"""
        blocked = [("2026-01-02", "2026-01-06"), ("2026-01-04", "2026-01-08")]
        assert calculate_blocked_days("2026-01-01", "2026-01-10", blocked) == 7

    def test_no_ranges(self, jan_window):
        """Test None blocked ranges"""
        assert calculate_blocked_days(*jan_window, None) == 0


class TestCalculateWeekendDays:
    """Tests for calculate_weekend_days"""

    def test_first_ten_days_of_january(self):
        """Test Jan 3, 4 and 10 are the only weekend days"""
        assert calculate_weekend_days("2026-01-01", "2026-01-10", []) == 3

    def test_blocked_saturday_not_counted(self):
        """Test that a blocked Saturday is not a weekend day"""
        blocked = [("2026-01-03", "2026-01-03")]
        assert calculate_weekend_days("2026-01-01", "2026-01-04", blocked) == 1

    def test_full_month(self, jan_window):
        """Test nine weekend days in January 2026, two of them blocked"""
        assert calculate_weekend_days(*jan_window, []) == 9
        assert calculate_weekend_days(*jan_window, [("2026-01-10", "2026-01-15")]) == 7


class TestCalculateHolidayDays:
    """Tests for calculate_holiday_days"""

    def test_default_holiday_in_window(self):
        """Test Republic Day is picked up from the default list"""
        assert calculate_holiday_days("2026-01-20", "2026-01-30", []) == 1

    def test_blocked_holiday_not_counted(self):
        """Test that blocked status wins over holiday"""
        blocked = [("2026-01-26", "2026-01-26")]
        assert calculate_holiday_days("2026-01-20", "2026-01-30", blocked) == 0

    def test_duplicates_count_once(self):
        """Test holidays are deduplicated by calendar day"""
        holidays = ["2026-01-26", "2026-01-26", date(2026, 1, 26), datetime(2026, 1, 26, 15)]
        assert calculate_holiday_days("2026-01-01", "2026-01-31", [], holidays) == 1

    def test_outside_window_and_unparseable_ignored(self, jan_window):
        """Test holidays outside the window or unreadable are skipped"""
        holidays = ["2025-12-31", "2026-02-01", "not-a-date", None, "2026-01-01"]
        assert calculate_holiday_days(*jan_window, [], holidays) == 1

    def test_explicit_empty_list_means_no_holidays(self):
        """Test [] is not replaced by the default list"""
        assert calculate_holiday_days("2026-01-20", "2026-01-30", [], []) == 0


class TestHeadlineMetrics:
    """Tests for Age of Issue and Time to Resolve"""

    def test_age_of_issue(self):
        """Test total - blocked - holiday"""
        assert calculate_age_of_issue("2026-01-01", "2026-01-31", 6, 1) == 24

    def test_age_of_issue_floors_at_zero(self):
        """Test contradictory inputs never give a negative age"""
        assert calculate_age_of_issue("2026-01-01", "2026-01-02", 5, 5) == 0

    def test_time_to_resolve(self):
        """Test total - blocked - holiday - weekend"""
        assert calculate_time_to_resolve(31, 6, 1, 7) == 17

    def test_time_to_resolve_floors_at_zero(self):
        """Test the floor"""
        assert calculate_time_to_resolve(2, 0, 1, 2) == 0


class TestCalculateIssueMetrics:
    """Tests for the calculate_issue_metrics bundle"""

    def test_no_blocked_no_holidays(self):
        """Test ten days in early January"""
        result = calculate_issue_metrics("2026-01-01", "2026-01-10", [], [])
        assert result == MetricsResult(
            total_days=10,
            blocked_days=0,
            weekend_days=3,
            holiday_days=0,
            age_of_issue=10,
            time_to_resolve=7,
        )

    def test_no_default_holiday_in_early_january(self):
        """Test the default list has nothing in Jan 1-10"""
        result = calculate_issue_metrics("2026-01-01", "2026-01-10")
        assert result.holiday_days == 0
        assert result.age_of_issue == 10

    def test_blocked_week_in_january(self, jan_window):
        """Test a blocked range removes days from age"""
        result = calculate_issue_metrics(*jan_window, [("2026-01-10", "2026-01-15")], [])
        assert result.total_days == 31
        assert result.blocked_days == 6
        assert result.age_of_issue == 25
        assert result.weekend_days == 7
        assert result.time_to_resolve == 18

    def test_blocked_holiday_with_default_calendar(self):
        """Test a blocked Republic Day is counted as blocked only"""
        result = calculate_issue_metrics(
            "2026-01-20", "2026-01-30", [{"start": "2026-01-26", "end": "2026-01-26"}]
        )
        assert result.holiday_days == 0
        assert result.blocked_days == 1
        assert result.weekend_days == 2
        assert result.age_of_issue == 10
        assert result.time_to_resolve == 8

    def test_holiday_on_weekend_counted_in_both(self):
        """Test a Saturday holiday is a weekend day and a holiday"""
        result = calculate_issue_metrics("2026-10-24", "2026-10-25")
        assert result.weekend_days == 2
        assert result.holiday_days == 1
        assert result.age_of_issue == 1
        assert result.time_to_resolve == 0

    def test_inverted_window_has_no_result(self):
        """Test closed date before start"""
        blocked = [("2026-01-01", "2026-01-31")]
        assert calculate_issue_metrics("2026-01-10", "2026-01-01", blocked) is None
        assert calculate_total_days("2026-01-10", "2026-01-01") == 0
        assert calculate_blocked_days("2026-01-10", "2026-01-01", blocked) == 0
        assert calculate_weekend_days("2026-01-10", "2026-01-01", blocked) == 0
        assert calculate_holiday_days("2026-01-10", "2026-01-01", blocked, ["2026-01-05"]) == 0

    def test_missing_window_has_no_result(self):
        """Test missing dates"""
        assert calculate_issue_metrics(None, "2026-01-01") is None

    def test_window_ending_on_date_max(self):
        """Test the last representable day is counted without overflow"""
        result = calculate_issue_metrics(date.max, date.max, holidays=[])
        weekend = 1 if is_weekend(date.max) else 0
        assert result.total_days == 1
        assert result.weekend_days == weekend
        assert result.age_of_issue == 1
        assert result.time_to_resolve == 1 - weekend

    def test_blocked_until_date_max(self):
        """Test an open-ended blocked range covering the window end"""
        blocked = [(date(2026, 1, 5), date.max)]
        result = calculate_issue_metrics(date(2026, 1, 1), date(2026, 1, 10), blocked, [])
        assert result.blocked_days == 6
        assert result.age_of_issue == 4
        tail = calculate_issue_metrics(date.max - timedelta(days=2), date.max, blocked, [])
        assert tail.blocked_days == 3

    def test_relative_words_have_no_result(self):
        """Test clock-relative words do not produce metrics"""
        assert calculate_issue_metrics("now", "today", holidays=[]) is None
        assert calculate_total_days("today", "today") == 0

    def test_to_dict(self):
        """Test plain dict export"""
        result = calculate_issue_metrics("2026-01-05", "2026-01-05", [], [])
        assert result.to_dict() == {
            "total_days": 1,
            "blocked_days": 0,
            "weekend_days": 0,
            "holiday_days": 0,
            "age_of_issue": 1,
            "time_to_resolve": 1,
        }
