"""Gold layer: compute lifecycle metrics for every valid issue."""

from __future__ import annotations

from dataclasses import fields
from datetime import date
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Set

import pandas as pd

from issue_metrics.metrics.date_calculations import (
    MetricsResult,
    calculate_issue_metrics,
)
from issue_metrics.utils.config import GOLD_DIR
from issue_metrics.utils.date_utils import parse_holidays, to_calendar_date
from issue_metrics.utils.holidays import load_holiday_file, resolve_holidays
from issue_metrics.utils.profiling import log_profile

logger = logging.getLogger(__name__)

METRIC_COLUMNS = [field.name for field in fields(MetricsResult)]


def read_silver(silver_path: Path) -> pd.DataFrame:
    """Read Silver data from disk."""
    return pd.read_parquet(silver_path)


def group_blocked_ranges(blocked_df: pd.DataFrame) -> Dict[str, List[Dict[str, object]]]:
    """Map issue_id -> list of {"start", "end"} ranges."""
    grouped: Dict[str, List[Dict[str, object]]] = {}
    for issue_id, start, end in zip(
        blocked_df["issue_id"], blocked_df["start_date"], blocked_df["end_date"]
    ):
        grouped.setdefault(issue_id, []).append({"start": start, "end": end})
    return grouped


def issue_years(df: pd.DataFrame) -> Set[int]:
    """Calendar years touched by any issue window."""
    years: Set[int] = set()
    for start, end in zip(df["start_date"], df["closed_date"]):
        start_day, end_day = to_calendar_date(start), to_calendar_date(end)
        if start_day and end_day and end_day >= start_day:
            years.update(range(start_day.year, end_day.year + 1))
    return years


def calculate_lifecycle_metrics(
    df: pd.DataFrame,
    blocked_df: pd.DataFrame,
    holidays: Iterable[date] | None = None,
) -> pd.DataFrame:
    """
    Add one column per lifecycle metric.

    Rows whose window cannot be measured get NA metrics rather than zeros.
    """
    df = df.copy()
    blocked_by_issue = group_blocked_ranges(blocked_df)
    holiday_set = None if holidays is None else set(holidays)

    results = [
        calculate_issue_metrics(start, end, blocked_by_issue.get(issue_id, []), holiday_set)
        for issue_id, start, end in zip(df["issue_id"], df["start_date"], df["closed_date"])
    ]
    for col in METRIC_COLUMNS:
        values = [getattr(result, col) if result is not None else None for result in results]
        df[col] = pd.array(values, dtype="Int64")

    unmeasured = sum(1 for result in results if result is None)
    if unmeasured:
        logger.warning("Gold: %d issue(s) have no measurable window", unmeasured)
    return df


def write_gold(df: pd.DataFrame, output_path: Path) -> Path:
    """Write Gold data to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    return output_path


def _summarize(df: pd.DataFrame, key: str) -> pd.DataFrame:
    summary = (
        df.groupby(key, dropna=False)
        .agg(
            issue_count=("issue_id", "count"),
            age_avg_days=("age_of_issue", "mean"),
            time_to_resolve_avg_days=("time_to_resolve", "mean"),
            blocked_days_total=("blocked_days", "sum"),
        )
        .reset_index()
    )
    for col in ["age_avg_days", "time_to_resolve_avg_days"]:
        summary[col] = summary[col].astype("float").round(2)
    return summary


def build_metric_reports(df: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    """Build aggregated reports from Gold data."""
    required_cols = {"issue_id", "issue_type", "assignee", *METRIC_COLUMNS}
    missing = required_cols - set(df.columns)
    if missing:
        missing_list = ", ".join(sorted(missing))
        raise ValueError(f"Gold data is missing required columns: {missing_list}")

    return {
        "age_avg_by_issue_type.csv": _summarize(df, "issue_type"),
        "age_avg_by_assignee.csv": _summarize(df, "assignee"),
    }


def write_metric_reports(df: pd.DataFrame, output_dir: Path | None = None) -> Dict[str, Path]:
    """Write aggregated reports to disk."""
    output_dir = output_dir or GOLD_DIR / "reports"
    output_dir.mkdir(parents=True, exist_ok=True)
    output_paths: Dict[str, Path] = {}
    for filename, report_df in build_metric_reports(df).items():
        output_path = output_dir / filename
        report_df.to_csv(output_path, index=False)
        output_paths[filename] = output_path
    return output_paths


def format_metrics_breakdown(result: MetricsResult | None) -> str:
    """Readable breakdown of how Age of Issue and Time to Resolve were reached."""
    if result is None:
        return "Please enter valid issue start and closed dates to see the metrics."

    return "\n".join(
        [
            f"Age of Issue: {result.age_of_issue} days",
            f"  Total Days: {result.total_days}",
            f"  - Blocked Days: {result.blocked_days}",
            f"  - Holiday Count: {result.holiday_days}",
            f"  = Age of Issue: {result.age_of_issue} days",
            f"Time to Resolve: {result.time_to_resolve} days",
            f"  Total Days: {result.total_days}",
            f"  - Blocked Days: {result.blocked_days}",
            f"  - Holiday Count: {result.holiday_days}",
            f"  - Weekend Days: {result.weekend_days}",
            f"  = Time to Resolve: {result.time_to_resolve} days",
        ]
    )


def run_gold(
    silver_outputs: Dict[str, Path],
    holidays: Iterable[object] | None = None,
    output_dir: Path | None = None,
) -> Path:
    """
    Execute the Gold pipeline.

    Holidays, in order: the ``holidays`` argument, the list shipped with the
    export, then the configured HOLIDAY_SOURCE.
    """
    output_dir = output_dir or GOLD_DIR
    issues = read_silver(silver_outputs["issues"])
    blocked = read_silver(silver_outputs["blocked_ranges"])

    if holidays is not None:
        holiday_set = parse_holidays(holidays)
    elif "holidays" in silver_outputs:
        holiday_set = load_holiday_file(silver_outputs["holidays"])
    else:
        holiday_set = resolve_holidays(years=issue_years(issues))

    gold_df = calculate_lifecycle_metrics(issues, blocked, holiday_set)
    log_profile(logger, "Gold", gold_df)
    output_path = write_gold(gold_df, output_dir / "issues_gold.parquet")
    write_metric_reports(gold_df, output_dir / "reports")
    logger.info("Gold: wrote %d issue(s) to %s", len(gold_df), output_path)
    return output_path
