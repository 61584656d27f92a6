"""Holiday calendar sources: built-in list, local file, or public holiday API."""

from __future__ import annotations

from datetime import date
import json
import logging
from pathlib import Path
from typing import Iterable, Set
from urllib.request import urlopen

from issue_metrics.metrics.date_calculations import DEFAULT_HOLIDAYS
from issue_metrics.utils.config import (
    DEFAULT_HOLIDAY_YEAR,
    HOLIDAY_API_URL,
    HOLIDAY_COUNTRY_CODE,
    HOLIDAY_SOURCE,
    HOLIDAYS_FILE,
    REFERENCE_DIR,
)
from issue_metrics.utils.date_utils import parse_holidays, to_calendar_date

logger = logging.getLogger(__name__)

HOLIDAY_SOURCES = ("default", "file", "api")


def load_holiday_file(path: Path = HOLIDAYS_FILE) -> Set[date]:
    """
    Read holidays from a text file (one date per line, # comments) or a JSON list.

    Unparseable lines are skipped.
    """
    if not path.exists():
        raise FileNotFoundError(f"Holiday file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        entries = json.loads(text)
        if not isinstance(entries, list):
            raise ValueError(f"Holiday file {path} must contain a JSON list.")
    else:
        entries = [
            line.split("#", 1)[0].strip() for line in text.splitlines()
        ]
        entries = [entry for entry in entries if entry]
    holidays = parse_holidays(entries)
    skipped = sum(1 for entry in entries if to_calendar_date(entry) is None)
    if skipped > 0:
        logger.debug("Skipped %d unusable holiday entries in %s", skipped, path)
    return holidays


def write_holiday_file(holidays: Iterable[object], path: Path = HOLIDAYS_FILE) -> Path:
    """Write holidays as sorted ISO dates, one per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [day.isoformat() for day in sorted(parse_holidays(holidays))]
    path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
    return path


def fetch_public_holidays(
    year: int | None = None,
    country_code: str | None = None,
    api_url: str | None = None,
) -> Set[date]:
    """
    Fetch national public holidays for a given year and country.

    Responses are cached under the reference directory and reused on later runs.
    """
    base_url = api_url or HOLIDAY_API_URL
    country = country_code or HOLIDAY_COUNTRY_CODE
    holiday_year = year if year is not None else DEFAULT_HOLIDAY_YEAR
    url = f"{base_url}/{holiday_year}/{country}"

    cache_path = REFERENCE_DIR / f"holidays_{country}_{holiday_year}.json"
    if cache_path.exists():
        payload = cache_path.read_text(encoding="utf-8")
    else:
        logger.info("Fetching public holidays from %s", url)
        with urlopen(url, timeout=30) as response:
            payload = response.read().decode("utf-8")
        REFERENCE_DIR.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(payload, encoding="utf-8")

    holidays = json.loads(payload)

    # Regional holidays carry a "counties" list; keep nationwide public ones only.
    filtered = [
        item
        for item in holidays
        if item.get("counties") is None and "Public" in (item.get("types") or [])
    ]

    return {date.fromisoformat(item["date"]) for item in filtered}


def resolve_holidays(
    source: str | None = None,
    years: Iterable[int] | None = None,
    path: Path | None = None,
) -> Set[date]:
    """
    Return the holiday set for the configured source.

    ``years`` is only used by the api source; DEFAULT_HOLIDAY_YEAR when empty.
    """
    holiday_source = (source or HOLIDAY_SOURCE).strip().lower()
    if holiday_source == "default":
        return parse_holidays(DEFAULT_HOLIDAYS)
    if holiday_source == "file":
        return load_holiday_file(path or HOLIDAYS_FILE)
    if holiday_source == "api":
        holiday_years = sorted(set(years or [])) or [DEFAULT_HOLIDAY_YEAR]
        holidays: Set[date] = set()
        for year in holiday_years:
            holidays |= fetch_public_holidays(int(year))
        return holidays
    raise ValueError(
        f"Unknown holiday source {holiday_source!r}; expected one of {', '.join(HOLIDAY_SOURCES)}."
    )
