"""
Tests for projections.arrivals - owner arrivals dashboard read model.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from core.primitives.stay import ArrivalRow, ArrivalState
from projections.arrivals import (
    ArrivalsReadModel,
    DateFilter,
    StatusFilter,
    date_filter_window,
    is_late,
    paginate,
    room_status_label,
)

IST = ZoneInfo("Asia/Kolkata")
# 10:00 IST on 1 March 2026.
NOW = datetime(2026, 3, 1, 4, 30, tzinfo=timezone.utc)


def _local(hour: int, day: int = 1) -> datetime:
    return datetime(2026, 3, day, hour, 0, tzinfo=IST).astimezone(timezone.utc)


def _row(booking_id, state, hour=14, day=1, **overrides) -> ArrivalRow:
    fields = dict(
        booking_id=booking_id,
        booking_code=f"BK-{booking_id}",
        guest_name=f"Guest {booking_id}",
        booking_status="CONFIRMED",
        scheduled_checkin_at=_local(hour, day),
        scheduled_checkout_at=_local(hour, day) + timedelta(days=1),
        state=state,
    )
    fields.update(overrides)
    return ArrivalRow(**fields)


ROWS = [
    _row("1", ArrivalState.CHECKED_IN, hour=8),
    _row("2", ArrivalState.PARTIALLY_ARRIVED, hour=8),
    _row("3", ArrivalState.READY_TO_CHECKIN, hour=12, vip_flag=True),
    _row("4", ArrivalState.WAITING_ROOM_ASSIGNMENT, hour=12, payment_pending=True),
    _row("5", ArrivalState.EXPECTED, hour=9, booking_status="PRE_CHECKED_IN",
         room_type_ids=("deluxe",)),
    _row("6", ArrivalState.WAITING_HOUSEKEEPING, hour=23),
    _row("7", ArrivalState.NO_ROOMS, hour=14, day=2),
]


class TestDateFilters:
    def test_today_window_uses_hotel_zone(self):
        window = date_filter_window(DateFilter.TODAY, NOW, IST)
        model = ArrivalsReadModel(ROWS).in_window(window)
        assert [r.booking_id for r in model.rows] == ["1", "2", "3", "4", "5", "6"]

    def test_tomorrow(self):
        window = date_filter_window(DateFilter.TOMORROW, NOW, IST)
        model = ArrivalsReadModel(ROWS).in_window(window)
        assert [r.booking_id for r in model.rows] == ["7"]

    def test_custom_range_inclusive(self):
        window = date_filter_window(
            DateFilter.CUSTOM, NOW, IST, date(2026, 3, 2), date(2026, 3, 2),
        )
        assert window.contains(_local(0, day=2))
        assert not window.contains(_local(0, day=3))

    def test_custom_requires_both_dates(self):
        with pytest.raises(ValueError):
            date_filter_window(DateFilter.CUSTOM, NOW, IST, date(2026, 3, 2))

    @pytest.mark.parametrize("kind", [DateFilter.ALL, DateFilter.LATE])
    def test_no_window(self, kind):
        assert date_filter_window(kind, NOW, IST) is None
        assert ArrivalsReadModel(ROWS).in_window(None).rows == ROWS

    def test_late_excludes_arrived(self):
        late = ArrivalsReadModel(ROWS).late(NOW)
        # Scheduled before 10:00 IST and nobody has arrived.
        assert [r.booking_id for r in late.rows] == ["5"]

    def test_is_late_without_schedule(self):
        row = _row("x", ArrivalState.EXPECTED, scheduled_checkin_at=None)
        assert not is_late(row, NOW)


class TestStats:
    def test_stats(self):
        stats = ArrivalsReadModel(ROWS[:6]).stats()
        assert stats.total == 6
        assert stats.arrived == 2
        assert stats.ready == 1
        assert stats.pre_checked == 1
        assert stats.waiting_room == 1
        assert stats.payment_pending == 1
        assert stats.vip == 1

    def test_partially_arrived_never_ready(self):
        stats = ArrivalsReadModel([_row("p", ArrivalState.PARTIALLY_ARRIVED)]).stats()
        assert stats.arrived == 1
        assert stats.ready == 0
        assert room_status_label(ArrivalState.PARTIALLY_ARRIVED) == "INHOUSE"

    def test_room_type_scopes_stats(self):
        stats = ArrivalsReadModel(ROWS).with_room_type("deluxe").stats()
        assert stats.total == 1
        assert stats.pre_checked == 1

    def test_empty_room_type_keeps_all(self):
        model = ArrivalsReadModel(ROWS)
        assert model.with_room_type(None) is model
        assert model.with_room_type("") is model


class TestHourlyTimeline:
    def test_buckets_cover_six_to_twenty_two(self):
        buckets = ArrivalsReadModel(ROWS).hourly_timeline(IST)
        assert [b.hour for b in buckets] == list(range(6, 23))
        assert len(buckets) == 17

    def test_counts_by_local_hour(self):
        buckets = {b.hour: b for b in ArrivalsReadModel(ROWS[:6]).hourly_timeline(IST)}
        assert (buckets[8].arrived, buckets[8].expected) == (2, 0)
        assert (buckets[12].arrived, buckets[12].expected) == (0, 2)
        assert buckets[9].total == 1
        # 23:00 falls outside the chart.
        assert sum(b.total for b in buckets.values()) == 5

    def test_to_dict(self):
        bucket = ArrivalsReadModel(ROWS[:2]).hourly_timeline(IST)[2]
        assert bucket.to_dict() == {"hour": "8:00", "arrived": 2, "expected": 0, "total": 2}


class TestListFilters:
    def test_search_matches_name_or_code(self):
        model = ArrivalsReadModel(ROWS)
        assert [r.booking_id for r in model.filter_list(search="guest 3")] == ["3"]
        assert [r.booking_id for r in model.filter_list(search="bk-4")] == ["4"]
        assert len(model.filter_list(search="   ")) == len(ROWS)

    @pytest.mark.parametrize("status,expected", [
        (StatusFilter.ARRIVED, ["1", "2"]),
        (StatusFilter.PARTIALLY_ARRIVED, ["2"]),
        (StatusFilter.READY, ["3"]),
        (StatusFilter.WAITING_ROOM, ["4"]),
        (StatusFilter.EXPECTED, ["5"]),
        (StatusFilter.WAITING_HOUSEKEEPING, ["6"]),
        (StatusFilter.NO_ROOMS, ["7"]),
        (StatusFilter.ALL, ["1", "2", "3", "4", "5", "6", "7"]),
    ])
    def test_status_filter(self, status, expected):
        rows = ArrivalsReadModel(ROWS).filter_list(status_filter=status)
        assert [r.booking_id for r in rows] == expected


class TestPagination:
    def test_pages_of_five(self):
        page = paginate(ROWS, page=2)
        assert [r.booking_id for r in page.rows] == ["6", "7"]
        assert page.total_pages == 2
        assert page.total_rows == 7

    def test_empty(self):
        page = paginate([], page=1)
        assert page.rows == ()
        assert page.total_pages == 0

    def test_page_below_one_clamped(self):
        assert paginate(ROWS, page=0).page == 1

    def test_rejects_bad_page_size(self):
        with pytest.raises(ValueError):
            paginate(ROWS, page_size=0)


class TestRoomStatusLabel:
    @pytest.mark.parametrize("state,label", [
        (ArrivalState.CHECKED_IN, "INHOUSE"),
        (ArrivalState.READY_TO_CHECKIN, "READY"),
        (ArrivalState.WAITING_HOUSEKEEPING, "DIRTY"),
        (ArrivalState.WAITING_ROOM_ASSIGNMENT, "UNASSIGNED"),
        (ArrivalState.EXPECTED, "WAITING"),
        (ArrivalState.UNKNOWN, "WAITING"),
    ])
    def test_labels(self, state, label):
        assert room_status_label(state) == label
