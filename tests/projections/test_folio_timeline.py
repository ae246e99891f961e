"""
Tests for projections.folio_timeline - merged, sorted folio activity timeline.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.primitives.stay import (
    ActivityEvent,
    BookingSnapshot,
    EntryKind,
    EventCategory,
    LedgerEntry,
)
from projections.folio_timeline import (
    CHARGE_SORT_PRIORITY,
    TimelineItem,
    TimelineSource,
    build_timeline,
    clean_charge_description,
    normalize_arrival_type,
    resolver_from_mapping,
    sort_timeline,
)

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
BOOKING_ID = "b-100"


def _booking(**overrides) -> BookingSnapshot:
    fields = dict(
        id=BOOKING_ID,
        code="BK-100",
        guest_name="Asha Rao",
        scheduled_checkin_at=T0,
        scheduled_checkout_at=T0 + timedelta(days=2),
        room_numbers="204",
        source="WALK_IN",
        status="CHECKED_IN",
    )
    fields.update(overrides)
    return BookingSnapshot(**fields)


def _entry(entry_id, kind, amount, minutes=0, description="") -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        kind=kind,
        amount=Decimal(amount),
        description=description,
        created_at=T0 + timedelta(minutes=minutes),
        raw_kind=kind.value,
    )


def _event(category, event_type, minutes=0, priority=0, **kwargs) -> ActivityEvent:
    return ActivityEvent(
        category=category,
        event_type=event_type,
        event_time=T0 + timedelta(minutes=minutes),
        sort_priority=priority,
        **kwargs,
    )


def _mixed_inputs():
    booking = _booking(
        actual_checkin_at=T0 + timedelta(minutes=30),
        created_at=T0 - timedelta(days=3),
    )
    ledger = [
        _entry("e1", EntryKind.ROOM_CHARGE, "4500", minutes=120, description="Room night 1"),
        _entry("e2", EntryKind.FOOD_CHARGE, "700", minutes=360),
        _entry("e3", EntryKind.PAYMENT, "1500", minutes=40),
        _entry("e4", EntryKind.OTHER, "300", minutes=360, description="Laundry"),
    ]
    activity = [
        _event(EventCategory.FOOD, "ORDER", minutes=360, priority=3, id="a3",
               title="Food order", description="Dinner", amount=Decimal("700")),
        _event(EventCategory.PAYMENT, "PAYMENT", minutes=40, priority=2, id="a2",
               title="Payment received", actor_id="staff-1"),
        _event(EventCategory.SERVICE, "TICKET", minutes=360, priority=5, id="a4",
               title="Towels requested"),
    ]
    return booking, ledger, activity


class TestEmptyInput:
    def test_no_booking_returns_empty(self):
        assert build_timeline(None, [], []) == []

    def test_no_booking_ignores_other_inputs(self):
        _, ledger, activity = _mixed_inputs()
        assert build_timeline(None, ledger, activity) == []

    def test_none_ledger_and_activity_treated_as_empty(self):
        items = build_timeline(_booking(created_at=T0), None, None)
        assert [i.type_label for i in items] == ["BOOKING"]


class TestDeterminism:
    def test_identical_inputs_identical_output(self):
        booking, ledger, activity = _mixed_inputs()
        resolver = resolver_from_mapping({"staff-1": "Ravi"})
        first = build_timeline(booking, ledger, activity, resolver)
        second = build_timeline(booking, ledger, activity, resolver)
        assert [i.to_dict() for i in first] == [i.to_dict() for i in second]

    def test_inputs_not_mutated(self):
        booking, ledger, activity = _mixed_inputs()
        ledger_before, activity_before = list(ledger), list(activity)
        build_timeline(booking, ledger, activity)
        assert ledger == ledger_before
        assert activity == activity_before


class TestOrdering:
    def test_adjacent_pairs_respect_sort_invariant(self):
        booking, ledger, activity = _mixed_inputs()
        items = build_timeline(booking, ledger, activity)
        for x, y in zip(items, items[1:]):
            assert x.timestamp > y.timestamp or (
                x.timestamp == y.timestamp and x.sort_priority <= y.sort_priority
            )

    def test_equal_timestamp_ordered_by_priority(self):
        booking, ledger, activity = _mixed_inputs()
        items = build_timeline(booking, ledger, activity)
        same_time = [i for i in items if i.timestamp == T0 + timedelta(minutes=360)]
        assert [i.sort_priority for i in same_time] == [3, 5, 5]
        # Merge order breaks the tie: activity before ledger.
        assert [i.source for i in same_time[1:]] == [
            TimelineSource.ACTIVITY, TimelineSource.LEDGER,
        ]

    def test_undated_items_sort_last(self):
        booking = _booking()
        activity = [
            ActivityEvent(category=EventCategory.SERVICE, event_type="TICKET",
                          event_time=None, id="undated", title="Lost time"),
            _event(EventCategory.SERVICE, "TICKET", minutes=-600, id="old", title="Old"),
        ]
        items = build_timeline(booking, [], activity)
        assert [i.id for i in items] == ["old", "undated"]

    def test_naive_booking_timestamp_read_as_utc(self):
        booking = _booking(created_at=datetime(2026, 3, 1, 9, 0))
        (item,) = build_timeline(booking, [], [])
        assert item.type_label == "BOOKING"
        assert item.timestamp == T0

    def test_mixed_naive_and_aware_inputs(self):
        booking = _booking(created_at=datetime(2026, 2, 27, 9, 0))
        ledger = [
            LedgerEntry(id="naive", kind=EntryKind.ROOM_CHARGE, amount=Decimal("100"),
                        created_at=datetime(2026, 3, 1, 11, 0)),
        ]
        activity = [
            ActivityEvent(category=EventCategory.SERVICE, event_type="TICKET",
                          event_time=datetime(2026, 3, 1, 10, 0), id="naive-evt"),
            _event(EventCategory.SERVICE, "TICKET", minutes=0, id="aware-evt"),
        ]
        items = build_timeline(booking, ledger, activity)
        assert [i.id for i in items] == [
            "naive", "naive-evt", "aware-evt", f"synthetic-created-{BOOKING_ID}",
        ]
        assert all(i.timestamp.tzinfo is not None for i in items)

    def test_serialized_items_resort_identically(self):
        booking, ledger, activity = _mixed_inputs()
        items = build_timeline(booking, ledger, activity)
        restored = [TimelineItem.from_dict(i.to_dict()) for i in items]
        assert restored == items
        assert sort_timeline(restored) == items


class TestSyntheticMilestones:
    def test_real_checkin_suppresses_synthetic(self):
        booking = _booking(actual_checkin_at=T0 + timedelta(minutes=30))
        activity = [_event(EventCategory.ARRIVAL, "checked_in", minutes=31, id="real",
                           title="Guest checked in")]
        items = build_timeline(booking, [], activity)
        checkins = [i for i in items if i.type_label == "CHECK-IN"]
        assert len(checkins) == 1
        assert checkins[0].id == "real"
        assert checkins[0].is_synthetic is False

    def test_synthetic_checkin_kept_without_real_event(self):
        booking = _booking(actual_checkin_at=T0 + timedelta(minutes=30))
        items = build_timeline(booking, [], [])
        checkins = [i for i in items if i.type_label == "CHECK-IN"]
        assert len(checkins) == 1
        assert checkins[0].is_synthetic is True
        assert checkins[0].id == f"synthetic-checkin-{BOOKING_ID}"
        assert checkins[0].description == "Guest checked in"
        assert checkins[0].secondary_description == "Room 204"

    def test_checkout_suppression_leaves_checkin(self):
        booking = _booking(
            actual_checkin_at=T0,
            actual_checkout_at=T0 + timedelta(days=2),
        )
        activity = [_event(EventCategory.ARRIVAL, "CHECKOUT", minutes=2880, id="out")]
        items = build_timeline(booking, [], activity)
        labels = [(i.type_label, i.is_synthetic) for i in items]
        assert labels == [("CHECK-OUT", False), ("CHECK-IN", True)]

    @pytest.mark.parametrize("raw", ["CHECKIN", "checkin", "CHECK_IN", "inhouse", "Checked_In"])
    def test_every_checkin_synonym_suppresses(self, raw):
        booking = _booking(actual_checkin_at=T0)
        activity = [_event(EventCategory.ARRIVAL, raw, id="real")]
        items = build_timeline(booking, [], activity)
        assert [i.is_synthetic for i in items if i.type_label == "CHECK-IN"] == [False]

    def test_non_arrival_category_never_suppresses(self):
        booking = _booking(actual_checkin_at=T0)
        activity = [_event(EventCategory.SERVICE, "CHECKED_IN", id="svc")]
        items = build_timeline(booking, [], activity)
        assert any(i.is_synthetic and i.type_label == "CHECK-IN" for i in items)

    def test_checkout_synthetic_text(self):
        booking = _booking(actual_checkout_at=T0)
        (item,) = build_timeline(booking, [], [])
        assert (item.description, item.secondary_description) == (
            "Guest checked out", "Stay completed",
        )

    def test_room_fallback_text(self):
        booking = _booking(actual_checkin_at=T0, room_numbers=None)
        (item,) = build_timeline(booking, [], [])
        assert item.secondary_description == "Room assigned"

    def test_creation_item(self):
        (item,) = build_timeline(_booking(created_at=T0), [], [])
        assert item.type_label == "BOOKING"
        assert item.style == "booking"
        assert item.description == "Booking created"
        assert item.secondary_description == "Via WALK IN"

    def test_creation_item_default_source(self):
        (item,) = build_timeline(_booking(created_at=T0, source=None), [], [])
        assert item.secondary_description == "Via Direct Entry"

    def test_no_creation_item_without_created_at(self):
        assert build_timeline(_booking(), [], []) == []


class TestLedgerCharges:
    @pytest.mark.parametrize("kind", [EntryKind.PAYMENT, EntryKind.REFUND, EntryKind.FOOD_CHARGE])
    def test_skipped_kinds_produce_no_charge(self, kind):
        items = build_timeline(_booking(), [_entry("e1", kind, "100")], [])
        assert [i for i in items if i.type_label == "CHARGE"] == []

    def test_room_charge_always_produces_charge(self):
        items = build_timeline(_booking(), [_entry("e1", EntryKind.ROOM_CHARGE, "4500")], [])
        (charge,) = items
        assert charge.type_label == "CHARGE"
        assert charge.style == "charge"
        assert charge.sort_priority == CHARGE_SORT_PRIORITY
        assert charge.source is TimelineSource.LEDGER

    def test_description_cleanup(self):
        entry = _entry("e1", EntryKind.ROOM_CHARGE, "500",
                       description="Charge Added: Extra Bed (₹500)")
        (charge,) = build_timeline(_booking(), [entry], [])
        assert charge.description == "Extra Bed • ₹500"

    def test_missing_description_uses_kind(self):
        entry = LedgerEntry(id="e9", kind=EntryKind.OTHER, amount=Decimal("250"),
                            created_at=T0, raw_kind="LATE_CHECKOUT")
        (charge,) = build_timeline(_booking(), [entry], [])
        assert charge.description == "LATE CHECKOUT • ₹250"

    def test_lakh_grouping_in_charge(self):
        entry = _entry("e1", EntryKind.ROOM_CHARGE, "150000", description="Suite week")
        (charge,) = build_timeline(_booking(), [entry], [])
        assert charge.description == "Suite week • ₹1,50,000"

    @pytest.mark.parametrize("raw,expected", [
        ("charge added: Minibar #12", "Minibar 12"),
        ("Room (₹1,234.50) upgrade", "Room upgrade"),
        ("  Extra   Bed  ", "Extra Bed"),
        ("", ""),
    ])
    def test_clean_charge_description(self, raw, expected):
        assert clean_charge_description(raw) == expected


class TestActivityItems:
    def test_payment_actor_fallback(self):
        event = _event(EventCategory.PAYMENT, "PAYMENT", id="p", title="Payment received",
                       description="UPI", actor_id="ghost")
        resolver = resolver_from_mapping({"staff-1": "Ravi"})
        (item,) = build_timeline(_booking(), [], [event], resolver)
        assert "Collected by System" in item.secondary_description

    def test_payment_actor_resolved(self):
        event = _event(EventCategory.PAYMENT, "PAYMENT", id="p", title="Payment received",
                       description="UPI", actor_id="staff-1")
        resolver = resolver_from_mapping({"staff-1": "Ravi"})
        (item,) = build_timeline(_booking(), [], [event], resolver)
        assert item.secondary_description == "UPI • Collected by Ravi"
        assert item.style == "payment"

    def test_no_resolver_means_system(self):
        event = _event(EventCategory.PAYMENT, "PAYMENT", id="p", actor_id="staff-1")
        (item,) = build_timeline(_booking(), [], [event])
        assert item.secondary_description == "Collected by System"

    def test_food_amount_appended(self):
        event = _event(EventCategory.FOOD, "ORDER", id="f", title="Food order",
                       description="Dinner", amount=Decimal("700"))
        (item,) = build_timeline(_booking(), [], [event])
        assert item.description == "Food order"
        assert item.secondary_description == "Dinner (₹700)"
        assert item.style == "food"

    def test_food_without_amount(self):
        event = _event(EventCategory.FOOD, "ORDER", id="f", description="Dinner")
        (item,) = build_timeline(_booking(), [], [event])
        assert item.secondary_description == "Dinner"
        assert item.description == "Dinner"

    def test_arrival_label_mapping(self):
        event = _event(EventCategory.ARRIVAL, "precheckin", id="x")
        (item,) = build_timeline(_booking(), [], [event])
        assert item.type_label == "PRE-CHECKIN"
        assert item.style == "arrival"

    def test_unknown_types_pass_through(self):
        events = [
            _event(EventCategory.ARRIVAL, "LATE_ARRIVAL_NOTE", id="x"),
            _event(EventCategory.OTHER, "SOMETHING_NEW", minutes=-1, id="y"),
        ]
        items = build_timeline(_booking(), [], events)
        assert [(i.type_label, i.style) for i in items] == [
            ("LATE_ARRIVAL_NOTE", "arrival"),
            ("SOMETHING_NEW", "generic"),
        ]

    def test_fallback_id_when_event_has_none(self):
        event = ActivityEvent(category=EventCategory.SERVICE, event_type="TICKET",
                              event_time=T0, raw_time="2026-03-01T09:00:00Z")
        (item,) = build_timeline(_booking(), [], [event])
        assert item.id == "SERVICE-2026-03-01T09:00:00Z-0"
        assert item.source_id is None

    def test_normalize_arrival_type_unknown(self):
        assert normalize_arrival_type("ARRIVED_BY_BOAT") is None
