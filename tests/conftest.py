"""
Pytest configuration and shared fixtures

Provides a sample raw issue export and isolated data directories for the
pipeline layers.
"""

import json
from datetime import date
from pathlib import Path

import pytest


@pytest.fixture
def jan_window():
    """January 2026, Thursday 1st to Saturday 31st"""
    return date(2026, 1, 1), date(2026, 1, 31)


@pytest.fixture
def raw_payload():
    """Raw export covering valid issues and every reject reason"""
    return {
        "holidays": ["2026-01-26", "2026-01-26", "not-a-holiday"],
        "issues": [
            {
                "id": "ISS-1",
                "issue_type": "Bug",
                "status": "Done",
                "assignee": "Ana",
                "start_date": "2026-01-01",
                "closed_date": "2026-01-10",
                "blocked_ranges": [{"start": "2026-01-05", "end": None}],
            },
            {
                "id": "ISS-2",
                "issue_type": "Task",
                "status": "done",
                "assignee": {"name": "Ben"},
                "start_date": "2026-01-01",
                "closed_date": "2026-01-31",
                "blocked_ranges": [{"start": "2026-01-10", "end": "2026-01-15"}],
            },
            {
                "id": "ISS-3",
                "issue_type": "bug",
                "status": "Resolved",
                "start_date": "2026-01-20T09:15:00Z",
                "closed_date": "2026-01-30",
                "blocked_ranges": [["2026-01-26", "2026-01-26"]],
            },
            {
                "id": "ISS-4",
                "issue_type": "Bug",
                "status": "Done",
                "assignee": "Ana",
                "start_date": "2026-02-10",
                "closed_date": "2026-02-01",
            },
            {
                "id": "ISS-1",
                "issue_type": "Bug",
                "status": "Done",
                "assignee": "Ana",
                "start_date": "2026-01-01",
                "closed_date": "2026-01-10",
            },
            {
                "issue_type": "Bug",
                "status": "Done",
                "start_date": "2026-01-01",
                "closed_date": "2026-01-02",
            },
            {
                "id": "ISS-7",
                "issue_type": "Story",
                "status": "Done",
                "start_date": "bad-date",
                "closed_date": "2026-01-02",
            },
            {
                "id": "ISS-8",
                "issue_type": "Story",
                "status": "Open",
                "assignee": "Ana",
                "start_date": "2026-01-05",
                "closed_date": None,
            },
        ],
    }


@pytest.fixture
def raw_file(tmp_path, raw_payload) -> Path:
    """Raw export written to disk"""
    path = tmp_path / "issues_raw.json"
    path.write_text(json.dumps(raw_payload), encoding="utf-8")
    return path


@pytest.fixture
def data_dirs(tmp_path, monkeypatch):
    """Point every pipeline layer at a temporary data directory"""
    data_dir = tmp_path / "data"
    dirs = {
        "raw": data_dir / "raw",
        "bronze": data_dir / "bronze",
        "silver": data_dir / "silver" / "clean",
        "rejects": data_dir / "silver" / "rejects",
        "gold": data_dir / "gold",
        "reference": data_dir / "reference",
    }
    monkeypatch.setattr("issue_metrics.ingestion.ingest_issues.RAW_DIR", dirs["raw"])
    monkeypatch.setattr("issue_metrics.bronze.bronze_pipeline.BRONZE_DIR", dirs["bronze"])
    monkeypatch.setattr("issue_metrics.silver.silver_pipeline.SILVER_CLEAN_DIR", dirs["silver"])
    monkeypatch.setattr("issue_metrics.silver.silver_pipeline.SILVER_REJECTS_DIR", dirs["rejects"])
    monkeypatch.setattr("issue_metrics.gold.gold_pipeline.GOLD_DIR", dirs["gold"])
    monkeypatch.setattr("issue_metrics.utils.holidays.REFERENCE_DIR", dirs["reference"])
    monkeypatch.setattr("issue_metrics.utils.holidays.HOLIDAY_SOURCE", "default")
    return dirs
