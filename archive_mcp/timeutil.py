# archive_mcp/timeutil.py

import time
from dataclasses import dataclass
from typing import Optional, Union

import pandas as pd

from archive_mcp.errors import InvalidTimestamp

Timestamp = Union[int, float, str]

DAY_MS = 24 * 60 * 60 * 1000
DEFAULT_LIMIT = 100

# pandas resolves these against the current clock
RELATIVE_KEYWORDS = frozenset({"now", "today"})


@dataclass(frozen=True)
class TimeRange:
    start: int
    end: int

    def as_params(self) -> dict:
        return {"start": self.start, "end": self.end}


def now_ms() -> int:
    """Current wall-clock time as Unix milliseconds."""
    return int(time.time() * 1000)


def to_absolute_time(value: Timestamp) -> int:
    """Converts a Unix-ms number or a date string into Unix milliseconds.

    Strings are parsed with pandas, so anything `pd.Timestamp` understands
    (ISO 8601, '2024-01-31', '2024-01-31 12:00') is accepted, except the relative
    keywords 'now' and 'today'. Strings without an offset are taken as UTC.

    Raises:
        InvalidTimestamp: If the value is not a number and cannot be parsed as a date.
    """
    if isinstance(value, bool):
        raise InvalidTimestamp(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise InvalidTimestamp(value)
        return int(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimestamp(value)
    if value.strip().lower() in RELATIVE_KEYWORDS:
        raise InvalidTimestamp(value)

    try:
        ts = pd.Timestamp(value.strip())
    except (ValueError, TypeError, OverflowError) as e:
        raise InvalidTimestamp(value) from e
    if pd.isna(ts):
        raise InvalidTimestamp(value)

    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.value // 1_000_000)  # ns -> ms


def resolve_time_range(start: Optional[Timestamp] = None, end: Optional[Timestamp] = None) -> TimeRange:
    """Fills in a missing start (24h ago) and a missing end (now), each on its own."""
    now = now_ms()
    return TimeRange(
        start=to_absolute_time(start) if start is not None else now - DAY_MS,
        end=to_absolute_time(end) if end is not None else now,
    )


def resolve_limit(limit: Optional[int] = None) -> int:
    return limit if limit is not None else DEFAULT_LIMIT
