"""
GuestDesk Core Time - Public API
================================
Injected clocks and total timestamp parsing.
"""

from core.time.clock import Clock, FixedClock, SystemClock
from core.time.temporal import (
    TimeWindow,
    day_window,
    days_window,
    isoformat_or_none,
    parse_timestamp,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "TimeWindow",
    "day_window",
    "days_window",
    "isoformat_or_none",
    "parse_timestamp",
]
