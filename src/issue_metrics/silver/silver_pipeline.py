"""Silver layer: clean Bronze issues and reject rows whose issue window is unusable."""

from __future__ import annotations

from datetime import date
import logging
from pathlib import Path
from typing import Dict, Tuple

import pandas as pd

from issue_metrics.metrics.validation import (
    END_BEFORE_START,
    INVALID_DATE_FORMAT,
    MISSING_DATES,
    validate_date_range,
)
from issue_metrics.utils.config import SILVER_CLEAN_DIR, SILVER_REJECTS_DIR
from issue_metrics.utils.date_utils import format_calendar_date
from issue_metrics.utils.profiling import log_profile

logger = logging.getLogger(__name__)

OPEN_STATUSES = ["Open", "In Progress", "To Do", "Blocked"]

REJECT_REASONS = {
    MISSING_DATES: "missing_dates",
    INVALID_DATE_FORMAT: "invalid_date_format",
    END_BEFORE_START: "end_before_start",
}


def read_bronze(bronze_path: Path) -> pd.DataFrame:
    """Read Bronze data from disk."""
    return pd.read_parquet(bronze_path)


def standardize_text(df: pd.DataFrame) -> pd.DataFrame:
    """Trim and title-case status/issue type, label missing assignees."""
    df = df.copy()
    df["status"] = df["status"].astype("string").str.strip().str.title()
    df["issue_type"] = df["issue_type"].astype("string").str.strip().str.title()
    df["assignee"] = df["assignee"].astype("string").fillna("Unassigned")
    return df


def fill_open_issues(df: pd.DataFrame, as_of: date | None) -> pd.DataFrame:
    """
    Measure still-open issues up to ``as_of`` by using it as their closed date.

    Rows are left untouched when as_of is None.
    """
    if as_of is None:
        return df
    df = df.copy()
    is_open = df["closed_date"].isna() & df["status"].isin(OPEN_STATUSES)
    df.loc[is_open, "closed_date"] = as_of.isoformat()
    logger.debug("Filled closed_date for %d open issue(s) as of %s", int(is_open.sum()), as_of)
    return df


def tag_window_rejects(df: pd.DataFrame) -> pd.Series:
    """Return a reject reason per row for the start/closed window (NA when valid)."""
    reasons = [
        pd.NA if result.valid else REJECT_REASONS[result.reason]
        for result in (
            validate_date_range(start, end)
            for start, end in zip(df["start_date"], df["closed_date"])
        )
    ]
    return pd.Series(reasons, index=df.index, dtype="string")


def clean_dates(df: pd.DataFrame, columns: Tuple[str, ...]) -> pd.DataFrame:
    """Store date columns as ISO ``YYYY-MM-DD`` strings (NA when unusable)."""
    df = df.copy()
    for col in columns:
        df[col] = df[col].map(format_calendar_date).astype("string")
    return df


def split_quality_checks(df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split rows into valid and rejected sets with a reject_reason column.
    """
    df = df.copy()
    missing_issue_id = df["issue_id"].isna()
    duplicate_issue_id = df["issue_id"].duplicated(keep="first") & ~missing_issue_id

    # One reason per row; later masks take priority.
    reject_reason = tag_window_rejects(df)
    reject_reason = reject_reason.mask(duplicate_issue_id, "duplicate_issue_id")
    reject_reason = reject_reason.mask(missing_issue_id, "missing_issue_id")

    rejects = df[reject_reason.notna()].copy()
    rejects["reject_reason"] = reject_reason[reject_reason.notna()]

    valid = df[reject_reason.isna()].copy()
    return valid, rejects


def clean_blocked_ranges(blocked_df: pd.DataFrame, issue_ids: pd.Series) -> pd.DataFrame:
    """Keep ranges of valid issues, dates as ISO strings. Bad ranges are left for the engine to drop."""
    kept = blocked_df[blocked_df["issue_id"].isin(issue_ids)]
    return clean_dates(kept, ("start_date", "end_date")).reset_index(drop=True)


def write_silver(df: pd.DataFrame, output_path: Path) -> Path:
    """Write Silver data to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    return output_path


def run_silver(
    bronze_outputs: Dict[str, Path],
    as_of: date | None = None,
    output_dir: Path | None = None,
    rejects_dir: Path | None = None,
) -> Dict[str, Path]:
    """
    Execute the Silver pipeline.

    Returns paths keyed by "issues", "blocked_ranges", "rejects" (only when rows
    were rejected) and "holidays" (passed through from Bronze).
    """
    output_dir = output_dir or SILVER_CLEAN_DIR
    rejects_dir = rejects_dir or SILVER_REJECTS_DIR

    issues = standardize_text(read_bronze(bronze_outputs["issues"]))
    issues = fill_open_issues(issues, as_of)
    valid, rejects = split_quality_checks(issues)
    valid = clean_dates(valid, ("start_date", "closed_date"))
    blocked = clean_blocked_ranges(read_bronze(bronze_outputs["blocked_ranges"]), valid["issue_id"])

    log_profile(logger, "Silver", valid)
    outputs = {
        "issues": write_silver(valid, output_dir / "issues_silver.parquet"),
        "blocked_ranges": write_silver(blocked, output_dir / "blocked_ranges_silver.parquet"),
    }
    if not rejects.empty:
        outputs["rejects"] = write_silver(rejects, rejects_dir / "issues_rejects.parquet")
        log_profile(logger, "Silver rejects", rejects)
        logger.warning(
            "Silver: rejected %d issue(s): %s",
            len(rejects),
            rejects["reject_reason"].value_counts().to_dict(),
        )
    if "holidays" in bronze_outputs:
        outputs["holidays"] = bronze_outputs["holidays"]

    logger.info("Silver: %d valid issue(s), %d blocked range(s)", len(valid), len(blocked))
    return outputs
