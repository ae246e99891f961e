"""
GuestDesk Core Time - Clock
===========================
Time is injected, never read ad hoc. Pure projections take `now` as an
argument; services and HTTP handlers receive a Clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Injectable time source."""

    def now_utc(self) -> datetime:
        ...  # pragma: no cover


class SystemClock:
    """Wall clock used by the live Django wiring."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Clock frozen at a given instant, for tests.

        clock = FixedClock(datetime(2026, 3, 1, 9, tzinfo=timezone.utc))
        clock.advance(minutes=30)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def advance(self, **delta: float) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(**delta)
