"""Issue table profiling, logged by each pipeline layer at DEBUG level."""

from __future__ import annotations

from dataclasses import fields
import logging
from typing import Dict, List, Sequence

import pandas as pd

from issue_metrics.metrics.date_calculations import MetricsResult

PROFILE_CATEGORICALS = ("issue_type", "status", "assignee", "reject_reason")
METRIC_COLUMNS = tuple(field.name for field in fields(MetricsResult))
PREVIEW_COLUMNS = (
    "issue_id",
    "status",
    "start_date",
    "closed_date",
    "age_of_issue",
    "time_to_resolve",
)


def profile_issue_table(
    df: pd.DataFrame,
    categorical_columns: Sequence[str] = PROFILE_CATEGORICALS,
    top_n: int = 5,
) -> Dict[str, object]:
    """
    Generate lightweight profiling metrics for an issue table.

    Returns:
        dict with row count, distinct issue count, null percentage for columns
        that have gaps, top values for categorical columns, and min/mean/max
        for any lifecycle metric columns.
    """
    null_pct = (df.isna().mean() * 100).round(2)

    top_values: Dict[str, Dict[str, int]] = {}
    for col in categorical_columns:
        if col in df.columns:
            counts = df[col].astype("string").value_counts(dropna=True).head(top_n)
            top_values[col] = {str(value): int(count) for value, count in counts.items()}

    metric_stats: Dict[str, Dict[str, float]] = {}
    for col in METRIC_COLUMNS:
        if col not in df.columns:
            continue
        values = pd.to_numeric(df[col], errors="coerce").dropna()
        if values.empty:
            continue
        metric_stats[col] = {
            "min": int(values.min()),
            "mean": round(float(values.mean()), 2),
            "max": int(values.max()),
        }

    return {
        "row_count": int(len(df)),
        "issue_count": int(df["issue_id"].nunique(dropna=True)) if "issue_id" in df.columns else 0,
        "null_pct": null_pct[null_pct > 0].to_dict(),
        "top_values": top_values,
        "metric_stats": metric_stats,
    }


def format_profile_output(profile: Dict[str, object]) -> str:
    """Format profiling metrics into a readable string."""
    sections: List[str] = [
        f"Row count: {profile.get('row_count', 0)}",
        f"Distinct issues: {profile.get('issue_count', 0)}",
    ]

    null_pct = profile.get("null_pct", {})
    if null_pct:
        sections.append("Null % by column:")
        sections.extend(f"  - {col}: {pct}%" for col, pct in sorted(null_pct.items()))

    top_values = profile.get("top_values", {})
    if top_values:
        sections.append("Top values:")
        for col, values in sorted(top_values.items()):
            sections.append(f"  - {col}:")
            sections.extend(f"      {value}: {count}" for value, count in values.items())

    metric_stats = profile.get("metric_stats", {})
    if metric_stats:
        sections.append("Metrics (days):")
        sections.extend(
            f"  - {col}: min {stats['min']}, mean {stats['mean']}, max {stats['max']}"
            for col, stats in metric_stats.items()
        )

    return "\n".join(sections)


def preview_dataframe(df: pd.DataFrame, n: int = 5) -> str:
    """Return a readable preview of the first N rows, key issue columns only."""
    columns = [col for col in PREVIEW_COLUMNS if col in df.columns] or list(df.columns)
    lines = df.head(n)[columns].to_string(index=False).splitlines()
    if len(lines) > 1:
        lines.insert(1, "-" * len(lines[0]))
    return "\n".join(lines)


def log_profile(logger: logging.Logger, layer: str, df: pd.DataFrame) -> None:
    """Log a profile and preview of a layer's issue table when DEBUG is enabled."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("%s profile:\n%s", layer, format_profile_output(profile_issue_table(df)))
    logger.debug("%s preview:\n%s", layer, preview_dataframe(df))
