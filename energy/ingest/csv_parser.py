"""Parse uploaded energy CSV files into validated readings."""

from __future__ import annotations

import csv
import io
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from ..schema import EnergyReadingIn
from ..telemetry import get_logger

_logger = get_logger(__name__)

CSV_COLUMNS = ("timestamp", "kWh", "cost", "co2", "source")
UPLOAD_SOURCE = "Manual Upload"
PREVIEW_ROWS = 5

_TEMPLATE_ROWS = (
    ("2024-01-01T00:00:00Z", "125.5", "15.06", "50.2", "Main Meter"),
    ("2024-01-01T01:00:00Z", "118.3", "14.20", "47.3", "Main Meter"),
    ("2024-01-01T02:00:00Z", "112.7", "13.52", "45.1", "Main Meter"),
)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one CSV upload.

    Attributes:
        data: Every valid reading, in file order.
        errors: One message per rejected row.
        preview: The first few valid readings.
    """

    data: List[EnergyReadingIn] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    preview: List[EnergyReadingIn] = field(default_factory=list)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); ``None`` if invalid."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _parse_number(value: Optional[str]) -> Optional[float]:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _normalise_keys(row: Dict[Optional[str], Optional[str]]) -> Dict[str, str]:
    lookup = {c.lower(): c for c in CSV_COLUMNS}
    out: Dict[str, str] = {}
    for key, value in row.items():
        if key is None or value is None:
            continue
        canonical = lookup.get(key.strip().lower())
        if canonical:
            out[canonical] = value.strip() if isinstance(value, str) else value
    return out


def parse_energy_csv(text: str, preview_rows: int = PREVIEW_ROWS) -> ParseResult:
    """Parse CSV *text* with a ``timestamp,kWh,cost,co2,source`` header.

    Empty lines are skipped and rows are numbered from 1 after the header.
    A row is rejected when timestamp, kWh or cost is blank, when the
    timestamp cannot be parsed, or when a numeric column is not a number.
    ``co2`` defaults to 0 and ``source`` to ``"Manual Upload"``.

    Args:
        text: Raw CSV content.
        preview_rows: Number of valid rows to include in the preview.

    Returns:
        A :class:`ParseResult`.
    """
    data: List[EnergyReadingIn] = []
    errors: List[str] = []

    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff")))
    index = 0
    for raw in reader:
        if not any((v or "").strip() for v in raw.values() if isinstance(v, str)):
            continue
        index += 1
        row = _normalise_keys(raw)

        if not row.get("timestamp") or not row.get("kWh") or not row.get("cost"):
            errors.append(f"Row {index}: Missing required fields (timestamp, kWh, cost)")
            continue

        timestamp = parse_timestamp(row["timestamp"])
        if timestamp is None:
            errors.append(f"Row {index}: Invalid timestamp format")
            continue

        kwh = _parse_number(row["kWh"])
        cost = _parse_number(row["cost"])
        co2 = _parse_number(row.get("co2") or "0")
        if kwh is None or cost is None or co2 is None:
            errors.append(f"Row {index}: Invalid numeric values")
            continue

        data.append(EnergyReadingIn(
            timestamp=timestamp,
            kwh=kwh,
            cost=cost,
            co2=co2,
            source=row.get("source") or UPLOAD_SOURCE,
        ))

    _logger.info("Parsed CSV upload: %d valid rows, %d errors", len(data), len(errors))
    return ParseResult(data=data, errors=errors, preview=data[:preview_rows])


def template_csv() -> str:
    """Return the downloadable CSV template."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(_TEMPLATE_ROWS)
    return buf.getvalue()
