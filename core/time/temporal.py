"""
GuestDesk Core Time - Temporal Helpers
======================================
Pure functions over timestamps coming from the hotel backend.

Backend rows carry ISO-8601 strings. Parsing is total: a missing or
malformed value yields None, never an exception, so a single bad row
cannot break a timeline or a dashboard.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional


# ══════════════════════════════════════════════════════════════
# PARSING
# ══════════════════════════════════════════════════════════════

# Postgres prints offsets as "+00" and trims fraction digits; older
# fromisoformat wants "+00:00" and exactly 3 or 6 digits.
_PG_TIMESTAMP = re.compile(
    r"^(?P<base>\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(?::\d{2})?)"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[+-]\d{2}(?::?\d{2})?)?$"
)


def _normalize_iso(raw: str) -> str:
    match = _PG_TIMESTAMP.match(raw)
    if match is None:
        return raw
    text = match.group("base")
    fraction = match.group("fraction")
    if fraction:
        text += "." + fraction[:6].ljust(6, "0")
    offset = match.group("offset")
    if offset:
        digits = offset[1:].replace(":", "")
        text += f"{offset[0]}{digits[:2]}:{digits[2:] or '00'}"
    return text


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware UTC datetime.

    Accepts datetime instances, "Z" suffixes and naive strings (read as
    UTC). Returns None for None, blanks and anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(_normalize_iso(raw))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def isoformat_or_none(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


# ══════════════════════════════════════════════════════════════
# TIME WINDOW - half-open interval [start, end)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimeWindow:
    """
    A half-open time interval [start, end).

    Invariant: start <= end (enforced at construction).
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"TimeWindow start ({self.start}) must be <= end ({self.end})."
            )

    def contains(self, dt: Optional[datetime]) -> bool:
        if dt is None:
            return False
        return self.start <= dt < self.end


def day_window(day: date, tz: tzinfo) -> TimeWindow:
    """The local calendar day `day` in `tz`, as a UTC window."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = start + timedelta(days=1)
    return TimeWindow(
        start=start.astimezone(timezone.utc),
        end=end.astimezone(timezone.utc),
    )


def days_window(first: date, last: date, tz: tzinfo) -> TimeWindow:
    """Local days first..last inclusive, as a UTC window."""
    if last < first:
        raise ValueError(f"last ({last}) must not be before first ({first}).")
    return TimeWindow(
        start=day_window(first, tz).start,
        end=day_window(last, tz).end,
    )
