#!/usr/bin/env python3
"""Load builder flakiness statistics from CSV.

The CSV is an export of the analytics query, one row per builder:

    name,flaky_rate,flaky_number,total_number,recent_commit,flaky_build_url

Only name and flaky_rate are required.
"""

import csv
import logging
import math
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuilderStatistic:
    name: str
    flaky_rate: float
    flaky_number: int = 0
    total_number: int = 0
    recent_commit: str = ""
    flaky_build_url: str = ""


def parse_threshold(value: str | None) -> float:
    """Parse the flaky-rate threshold. Raises ValueError if malformed."""
    if value is None or not str(value).strip():
        raise ValueError("Missing flaky rate threshold")
    try:
        threshold = float(value)
    except ValueError:
        raise ValueError(f"Invalid flaky rate threshold: '{value}'") from None
    if not math.isfinite(threshold):
        raise ValueError(f"Invalid flaky rate threshold: '{value}'")
    return threshold


def _int_field(row: dict, key: str) -> int:
    try:
        return int(row.get(key) or 0)
    except ValueError:
        return 0


def parse_row(row: dict) -> BuilderStatistic | None:
    """Build a BuilderStatistic from a CSV row, or None if unusable."""
    name = (row.get("name") or "").strip()
    if not name:
        return None
    try:
        rate = float(row.get("flaky_rate") or "")
    except ValueError:
        return None
    if not math.isfinite(rate) or not 0 <= rate <= 1:
        return None
    return BuilderStatistic(
        name=name,
        flaky_rate=rate,
        flaky_number=_int_field(row, "flaky_number"),
        total_number=_int_field(row, "total_number"),
        recent_commit=(row.get("recent_commit") or "").strip(),
        flaky_build_url=(row.get("flaky_build_url") or "").strip(),
    )


def load_statistics(csv_path: str) -> list[BuilderStatistic]:
    """Read statistics from csv_path, preserving row order."""
    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))

    statistics = []
    for i, row in enumerate(rows, 2):
        stat = parse_row(row)
        if stat is None:
            logger.warning("Skipping malformed statistics row %d in %s", i, csv_path)
            continue
        statistics.append(stat)
    logger.debug("Loaded %d builder statistics from %s", len(statistics), csv_path)
    return statistics

