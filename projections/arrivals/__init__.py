"""
GuestDesk Projections - Owner Arrivals Dashboard
================================================
Client-side aggregation over the rows of the arrivals dashboard view.
The backend has already computed each booking's operational state;
this read model only filters, counts, buckets and pages.

Arrived means CHECKED_IN or PARTIALLY_ARRIVED. A partially arrived
booking is never counted or badged as Ready.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from core.primitives.stay import ArrivalRow, ArrivalState
from core.time import TimeWindow, day_window, days_window

DEFAULT_PAGE_SIZE = 5
TIMELINE_FIRST_HOUR = 6
TIMELINE_LAST_HOUR = 22


class DateFilter(Enum):
    TODAY = "TODAY"
    TOMORROW = "TOMORROW"
    LATE = "LATE"
    CUSTOM = "CUSTOM"
    ALL = "ALL"


class StatusFilter(Enum):
    ALL = "ALL"
    EXPECTED = "EXPECTED"
    WAITING_HOUSEKEEPING = "WAITING_HOUSEKEEPING"
    WAITING_ROOM = "WAITING_ROOM"
    READY = "READY"
    PARTIALLY_ARRIVED = "PARTIALLY_ARRIVED"
    ARRIVED = "ARRIVED"
    NO_ROOMS = "NO_ROOMS"


_STATUS_FILTER_STATES: Dict[StatusFilter, frozenset] = {
    StatusFilter.EXPECTED:             frozenset({ArrivalState.EXPECTED}),
    StatusFilter.WAITING_HOUSEKEEPING: frozenset({ArrivalState.WAITING_HOUSEKEEPING}),
    StatusFilter.WAITING_ROOM:         frozenset({ArrivalState.WAITING_ROOM_ASSIGNMENT}),
    StatusFilter.READY:                frozenset({ArrivalState.READY_TO_CHECKIN}),
    StatusFilter.PARTIALLY_ARRIVED:    frozenset({ArrivalState.PARTIALLY_ARRIVED}),
    StatusFilter.ARRIVED:              frozenset({ArrivalState.CHECKED_IN, ArrivalState.PARTIALLY_ARRIVED}),
    StatusFilter.NO_ROOMS:             frozenset({ArrivalState.NO_ROOMS}),
}

_ROOM_STATUS_LABELS: Dict[ArrivalState, str] = {
    ArrivalState.CHECKED_IN:              "INHOUSE",
    ArrivalState.PARTIALLY_ARRIVED:       "INHOUSE",
    ArrivalState.READY_TO_CHECKIN:        "READY",
    ArrivalState.WAITING_HOUSEKEEPING:    "DIRTY",
    ArrivalState.WAITING_ROOM_ASSIGNMENT: "UNASSIGNED",
    ArrivalState.NO_ROOMS:                "UNASSIGNED",
}


def room_status_label(state: ArrivalState) -> str:
    """Room status badge shown in the folio summary tab."""
    return _ROOM_STATUS_LABELS.get(state, "WAITING")


def date_filter_window(
    kind: DateFilter,
    now: datetime,
    tz: tzinfo,
    custom_from: Optional[date] = None,
    custom_to: Optional[date] = None,
) -> Optional[TimeWindow]:
    """
    Scheduled check-in window for a date filter, in the hotel time zone.

    Returns None for ALL and LATE (LATE is not a window, see is_late).
    """
    today = now.astimezone(tz).date()
    if kind is DateFilter.TODAY:
        return day_window(today, tz)
    if kind is DateFilter.TOMORROW:
        return day_window(today + timedelta(days=1), tz)
    if kind is DateFilter.CUSTOM:
        if custom_from is None or custom_to is None:
            raise ValueError("CUSTOM date filter requires custom_from and custom_to.")
        return days_window(custom_from, custom_to, tz)
    return None


def is_late(row: ArrivalRow, now: datetime) -> bool:
    """Scheduled before now and nobody has arrived yet."""
    if row.scheduled_checkin_at is None:
        return False
    return row.scheduled_checkin_at < now and not row.has_arrived


@dataclass(frozen=True)
class ArrivalStats:
    total: int = 0
    arrived: int = 0
    ready: int = 0
    pre_checked: int = 0
    waiting_room: int = 0
    payment_pending: int = 0
    vip: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "arrived": self.arrived,
            "ready": self.ready,
            "pre_checked": self.pre_checked,
            "waiting_room": self.waiting_room,
            "payment_pending": self.payment_pending,
            "vip": self.vip,
        }


@dataclass(frozen=True)
class HourBucket:
    hour: int
    arrived: int
    expected: int

    @property
    def total(self) -> int:
        return self.arrived + self.expected

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hour": f"{self.hour}:00",
            "arrived": self.arrived,
            "expected": self.expected,
            "total": self.total,
        }


@dataclass(frozen=True)
class Page:
    rows: Tuple[ArrivalRow, ...]
    page: int
    total_pages: int
    total_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": [r.to_dict() for r in self.rows],
            "page": self.page,
            "total_pages": self.total_pages,
            "total_rows": self.total_rows,
        }


class ArrivalsReadModel:
    """
    Read model over one fetch of the arrivals dashboard rows.

    Queries return new lists; the model never mutates its rows.
    """

    def __init__(self, rows: Iterable[ArrivalRow] = ()) -> None:
        self._rows: Tuple[ArrivalRow, ...] = tuple(rows)

    @property
    def rows(self) -> List[ArrivalRow]:
        return list(self._rows)

    # ── scoping ───────────────────────────────────────────────

    def in_window(self, window: Optional[TimeWindow]) -> ArrivalsReadModel:
        if window is None:
            return self
        return ArrivalsReadModel(
            r for r in self._rows if window.contains(r.scheduled_checkin_at)
        )

    def late(self, now: datetime) -> ArrivalsReadModel:
        return ArrivalsReadModel(r for r in self._rows if is_late(r, now))

    def with_room_type(self, room_type_id: Optional[str]) -> ArrivalsReadModel:
        if not room_type_id:
            return self
        return ArrivalsReadModel(
            r for r in self._rows if room_type_id in r.room_type_ids
        )

    # ── aggregates ────────────────────────────────────────────

    def stats(self) -> ArrivalStats:
        rows = self._rows
        return ArrivalStats(
            total=len(rows),
            arrived=sum(1 for r in rows if r.has_arrived),
            ready=sum(1 for r in rows if r.state is ArrivalState.READY_TO_CHECKIN),
            pre_checked=sum(1 for r in rows if r.booking_status == "PRE_CHECKED_IN"),
            waiting_room=sum(
                1 for r in rows if r.state is ArrivalState.WAITING_ROOM_ASSIGNMENT
            ),
            payment_pending=sum(1 for r in rows if r.payment_pending),
            vip=sum(1 for r in rows if r.vip_flag),
        )

    def hourly_timeline(self, tz: tzinfo) -> List[HourBucket]:
        """Arrived/expected counts per local scheduled hour, 06:00 to 22:00."""
        arrived: Dict[int, int] = {}
        expected: Dict[int, int] = {}
        for row in self._rows:
            if row.scheduled_checkin_at is None:
                continue
            hour = row.scheduled_checkin_at.astimezone(tz).hour
            bucket = arrived if row.has_arrived else expected
            bucket[hour] = bucket.get(hour, 0) + 1
        return [
            HourBucket(hour=h, arrived=arrived.get(h, 0), expected=expected.get(h, 0))
            for h in range(TIMELINE_FIRST_HOUR, TIMELINE_LAST_HOUR + 1)
        ]

    # ── list ──────────────────────────────────────────────────

    def filter_list(
        self,
        search: str = "",
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> List[ArrivalRow]:
        rows = list(self._rows)
        needle = (search or "").strip().lower()
        if needle:
            rows = [
                r for r in rows
                if needle in r.guest_name.lower() or needle in r.booking_code.lower()
            ]
        states = _STATUS_FILTER_STATES.get(status_filter)
        if states is not None:
            rows = [r for r in rows if r.state in states]
        return rows


def paginate(
    rows: List[ArrivalRow],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page:
    if page_size <= 0:
        raise ValueError("page_size must be positive.")
    total_pages = math.ceil(len(rows) / page_size)
    page = max(1, page)
    start = (page - 1) * page_size
    return Page(
        rows=tuple(rows[start:start + page_size]),
        page=page,
        total_pages=total_pages,
        total_rows=len(rows),
    )
