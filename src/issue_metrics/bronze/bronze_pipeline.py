"""Bronze layer: flatten raw issue JSON into issue and blocked-range tables."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List, Sequence, Union

import pandas as pd

from issue_metrics.utils.config import BRONZE_DIR
from issue_metrics.utils.holidays import write_holiday_file
from issue_metrics.utils.profiling import log_profile

logger = logging.getLogger(__name__)

ISSUE_COLUMNS = [
    "issue_id",
    "issue_type",
    "status",
    "assignee",
    "start_date",
    "closed_date",
]
BLOCKED_RANGE_COLUMNS = ["issue_id", "start_date", "end_date"]

# Alternative field names, first match wins.
FIELD_FALLBACKS = {
    "issue_id": ["id", "key"],
    "issue_type": ["issue_type", "fields.issuetype.name"],
    "status": ["status", "fields.status.name"],
    "assignee": ["assignee", "assignee.name", "fields.assignee.displayName"],
    "start_date": ["start_date", "created_at", "fields.created"],
    "closed_date": ["closed_date", "resolved_at", "fields.resolutiondate"],
    "blocked_ranges": ["blocked_ranges", "blocked"],
}


def read_raw_json(raw_file_path: Path) -> Dict:
    """Read the raw JSON file from disk."""
    with raw_file_path.open("r", encoding="utf-8") as file:
        return json.load(file)


def validate_raw_schema(raw_json: Dict) -> None:
    """Validate minimal raw JSON structure."""
    if not isinstance(raw_json, dict) or "issues" not in raw_json:
        raise ValueError("Raw JSON is missing required 'issues' field.")
    if not isinstance(raw_json["issues"], list):
        raise ValueError("Raw JSON 'issues' field must be a list.")
    if "holidays" in raw_json and not isinstance(raw_json["holidays"], list):
        raise ValueError("Raw JSON 'holidays' field must be a list.")


def normalize_issues(raw_json: Dict) -> pd.DataFrame:
    """Normalize nested issue JSON into a flat table (list fields stay as lists)."""
    validate_raw_schema(raw_json)
    return pd.json_normalize(raw_json["issues"])


def _as_text(value: object) -> object:
    # Keep raw values as strings so mixed payload types still write to Parquet.
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return pd.NA
    # Numeric ids come back as floats once a column holds a missing value.
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def select_and_rename_fields(df: pd.DataFrame) -> pd.DataFrame:
    """Select issue fields under their canonical names, blocked ranges kept as a list column."""
    selected = pd.DataFrame(index=df.index)
    for target_col, source_cols in FIELD_FALLBACKS.items():
        present = [col for col in source_cols if col in df.columns]
        if not present:
            selected[target_col] = pd.NA
            continue
        column = df[present[0]]
        for fallback in present[1:]:
            column = column.where(column.notna(), df[fallback])
        selected[target_col] = column

    # Assignee may arrive as {"name": ...} or [{"name": ...}].
    def _assignee_name(value: object) -> object:
        if isinstance(value, list):
            value = value[0] if value else None
        if isinstance(value, dict):
            value = value.get("name") or value.get("displayName")
        return _as_text(value)

    selected["assignee"] = selected["assignee"].map(_assignee_name)
    for col in ["issue_id", "issue_type", "status", "start_date", "closed_date"]:
        selected[col] = selected[col].map(_as_text).astype("string")
    selected["assignee"] = selected["assignee"].astype("string")
    return selected[ISSUE_COLUMNS + ["blocked_ranges"]]


def extract_blocked_ranges(df: pd.DataFrame) -> pd.DataFrame:
    """Explode the blocked_ranges list column into one row per range."""
    rows: List[Dict[str, object]] = []
    for issue_id, ranges in zip(df["issue_id"], df["blocked_ranges"]):
        if not isinstance(ranges, list):
            continue
        for blocked in ranges:
            if isinstance(blocked, dict):
                start, end = blocked.get("start"), blocked.get("end")
            elif isinstance(blocked, (list, tuple)) and len(blocked) == 2:
                start, end = blocked
            else:
                logger.debug("Skipping unrecognised blocked range %r on %s", blocked, issue_id)
                continue
            rows.append(
                {"issue_id": issue_id, "start_date": _as_text(start), "end_date": _as_text(end)}
            )
    return pd.DataFrame(rows, columns=BLOCKED_RANGE_COLUMNS).astype("string")


def extract_payload_holidays(raw_json: Dict) -> List[str] | None:
    """Holiday entries shipped with the export, or None when it carries no holiday list."""
    if "holidays" not in raw_json:
        return None
    return [str(value) for value in raw_json["holidays"] if value is not None]


def add_source_file(df: pd.DataFrame, source_file: Path) -> pd.DataFrame:
    """Add a source file column for lineage."""
    df = df.copy()
    df["source_file"] = source_file.name
    return df


def basic_quality_checks(df: pd.DataFrame) -> Dict[str, int]:
    """Counts of missing required fields and duplicate ids."""
    return {
        "missing_issue_id": int(df["issue_id"].isna().sum()),
        "missing_start_date": int(df["start_date"].isna().sum()),
        "missing_closed_date": int(df["closed_date"].isna().sum()),
        "duplicate_issue_id": int(df["issue_id"].dropna().duplicated().sum()),
    }


def write_bronze(df: pd.DataFrame, output_path: Path) -> Path:
    """Write Bronze data to disk."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    return output_path


RawPathInput = Union[Path, str, Sequence[Path], Sequence[str]]


def _coerce_raw_paths(raw_file_path: RawPathInput) -> List[Path]:
    if isinstance(raw_file_path, (Path, str)):
        return [Path(raw_file_path)]
    return [Path(p) for p in raw_file_path]


def run_bronze(raw_file_path: RawPathInput, output_dir: Path | None = None) -> Dict[str, Path]:
    """
    Execute the Bronze pipeline.

    Returns paths keyed by "issues", "blocked_ranges" and, when any export
    carries a holiday list (even an empty one), "holidays".
    """
    output_dir = output_dir or BRONZE_DIR
    issue_frames: List[pd.DataFrame] = []
    blocked_frames: List[pd.DataFrame] = []
    payload_holidays: List[str] | None = None

    for path in _coerce_raw_paths(raw_file_path):
        raw_json = read_raw_json(path)
        selected = select_and_rename_fields(normalize_issues(raw_json))
        blocked_frames.append(extract_blocked_ranges(selected))
        issue_frames.append(add_source_file(selected.drop(columns=["blocked_ranges"]), path))
        shipped = extract_payload_holidays(raw_json)
        if shipped is not None:
            payload_holidays = (payload_holidays or []) + shipped

    issues_df = (
        pd.concat(issue_frames, ignore_index=True)
        if issue_frames
        else pd.DataFrame(columns=ISSUE_COLUMNS + ["source_file"])
    )
    blocked_df = (
        pd.concat(blocked_frames, ignore_index=True)
        if blocked_frames
        else pd.DataFrame(columns=BLOCKED_RANGE_COLUMNS)
    )
    logger.info(
        "Bronze: %d issue(s), %d blocked range(s), checks=%s",
        len(issues_df),
        len(blocked_df),
        basic_quality_checks(issues_df),
    )
    log_profile(logger, "Bronze", issues_df)

    outputs = {
        "issues": write_bronze(issues_df, output_dir / "issues_bronze.parquet"),
        "blocked_ranges": write_bronze(blocked_df, output_dir / "blocked_ranges_bronze.parquet"),
    }
    if payload_holidays is not None:
        outputs["holidays"] = write_holiday_file(payload_holidays, output_dir / "holidays.txt")
    return outputs
