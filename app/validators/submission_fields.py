"""
app/validators/submission_fields.py

Lenient field parsing for stored ESG submissions.

Submissions are hand-entered or device-originated and arrive with numbers
encoded as strings, years as free text and timestamps in several formats.
Every parser here returns ``None`` on failure instead of raising; callers
decide whether a missing value drops a metric or takes a fallback.
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any

TIMESTAMP_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT = re.compile(
    r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_leading_int(value: Any) -> int | None:
    """
    Parse the integer prefix of *value*: ``"2022"``, ``" 2022 "``,
    ``"2022-23"`` and ``2022.0`` all give ``2022``.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def parse_finite_float(value: Any) -> float | None:
    """
    Parse the numeric prefix of *value* as a float.

    Returns ``None`` for booleans, blanks, non-numeric text, NaN and
    infinities so that only finite numbers ever reach the rollups.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _LEADING_FLOAT.match(str(value))
        if match is None:
            return None
        try:
            number = float(match.group(1))
        except (OverflowError, ValueError):
            return None
    return number if math.isfinite(number) else None


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-like timestamp, a known date format, or epoch milliseconds.

    Naive results are treated as UTC.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    else:
        parsed = _parse_timestamp_text(str(value).strip())
        if parsed is None:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def timestamp_millis(value: Any) -> int:
    """
    Epoch milliseconds for *value*; missing or unparseable values map to 0.
    """

    parsed = parse_timestamp(value)
    if parsed is None:
        return 0
    return int((parsed - _EPOCH).total_seconds() * 1000)


def _parse_timestamp_text(raw: str) -> datetime | None:
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        pass

    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(raw, fmt)
        except ValueError:
            continue
    return None
