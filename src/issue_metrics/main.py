"""Main orchestration for the issue metrics pipeline."""

from __future__ import annotations

from datetime import date
from pathlib import Path

from issue_metrics.bronze.bronze_pipeline import run_bronze
from issue_metrics.gold.gold_pipeline import run_gold
from issue_metrics.ingestion.ingest_issues import ingest_raw_data
from issue_metrics.silver.silver_pipeline import run_silver
from issue_metrics.utils.logging_config import setup_logging


def run_pipeline(source_path: Path | None = None, as_of: date | None = None) -> Path:
    """Run the end-to-end pipeline and return the Gold table path."""
    setup_logging()
    raw_path = ingest_raw_data(source_path)
    bronze_outputs = run_bronze(raw_path)
    silver_outputs = run_silver(bronze_outputs, as_of=as_of)
    return run_gold(silver_outputs)


if __name__ == "__main__":
    run_pipeline()
