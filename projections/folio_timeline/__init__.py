"""
GuestDesk Projections - Folio Activity Timeline
===============================================
Merges three already-fetched inputs for one booking into a single,
newest-first, display-ready timeline:

- synthetic milestones derived from the booking snapshot
  (checked in, checked out, booking created),
- the backend activity stream (arrival, food, payment, service events),
- folio ledger charges (room and misc; payments, refunds and food are
  represented elsewhere and skipped).

A synthetic check-in/check-out milestone is dropped as soon as the
activity stream carries the real ARRIVAL event for it.

Pure: no I/O, no clock, no module state. Same inputs, same output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import (
    Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple,
)

from core.primitives.money import RUPEE, format_inr
from core.primitives.stay import (
    ActivityEvent,
    BookingSnapshot,
    EntryKind,
    EventCategory,
    LedgerEntry,
)
from core.time import isoformat_or_none, parse_timestamp

ActorNameResolver = Callable[[str], Optional[str]]

CHARGE_SORT_PRIORITY = 5
SYSTEM_ACTOR_LABEL = "System"

# Ledger kinds shown through the activity stream or other folio tabs.
SKIPPED_LEDGER_KINDS = frozenset({
    EntryKind.PAYMENT, EntryKind.REFUND, EntryKind.FOOD_CHARGE,
})

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class TimelineSource(Enum):
    BOOKING = "BOOKING"
    ACTIVITY = "ACTIVITY"
    LEDGER = "LEDGER"


class ArrivalEventType(Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    PRE_CHECKIN = "PRE_CHECKIN"
    ROOM_ASSIGNED = "ROOM_ASSIGNED"
    ROOM_REASSIGNED = "ROOM_REASSIGNED"
    NO_SHOW = "NO_SHOW"
    CANCEL = "CANCEL"


# Every spelling the backend has used for an arrival event type.
# Keys are matched after upper-casing the raw type.
ARRIVAL_TYPE_SYNONYMS: Dict[str, ArrivalEventType] = {
    "CHECKIN":         ArrivalEventType.CHECK_IN,
    "CHECK_IN":        ArrivalEventType.CHECK_IN,
    "CHECKED_IN":      ArrivalEventType.CHECK_IN,
    "INHOUSE":         ArrivalEventType.CHECK_IN,
    "CHECKOUT":        ArrivalEventType.CHECK_OUT,
    "CHECK_OUT":       ArrivalEventType.CHECK_OUT,
    "CHECKED_OUT":     ArrivalEventType.CHECK_OUT,
    "PRECHECKIN":      ArrivalEventType.PRE_CHECKIN,
    "PRE_CHECKIN":     ArrivalEventType.PRE_CHECKIN,
    "ROOM_ASSIGNED":   ArrivalEventType.ROOM_ASSIGNED,
    "ROOM_REASSIGNED": ArrivalEventType.ROOM_REASSIGNED,
    "NO_SHOW":         ArrivalEventType.NO_SHOW,
    "CANCEL":          ArrivalEventType.CANCEL,
}

ARRIVAL_TYPE_LABELS: Dict[ArrivalEventType, str] = {
    ArrivalEventType.CHECK_IN:        "CHECK-IN",
    ArrivalEventType.CHECK_OUT:       "CHECK-OUT",
    ArrivalEventType.PRE_CHECKIN:     "PRE-CHECKIN",
    ArrivalEventType.ROOM_ASSIGNED:   "ROOM_ASSIGNED",
    ArrivalEventType.ROOM_REASSIGNED: "ROOM_REASSIGNED",
    ArrivalEventType.NO_SHOW:         "NO_SHOW",
    ArrivalEventType.CANCEL:          "CANCEL",
}

CATEGORY_STYLES: Dict[EventCategory, str] = {
    EventCategory.ARRIVAL: "arrival",
    EventCategory.FOOD:    "food",
    EventCategory.PAYMENT: "payment",
    EventCategory.SERVICE: "service",
    EventCategory.OTHER:   "generic",
}

BOOKING_STYLE = "booking"
CHARGE_STYLE = "charge"
BOOKING_LABEL = "BOOKING"
CHARGE_LABEL = "CHARGE"

# Synthetic milestones the activity stream can replace.
SUPPRESSIBLE_SYNTHETICS = frozenset({
    ArrivalEventType.CHECK_IN, ArrivalEventType.CHECK_OUT,
})


def normalize_arrival_type(raw: str) -> Optional[ArrivalEventType]:
    return ARRIVAL_TYPE_SYNONYMS.get(str(raw or "").strip().upper())


def resolver_from_mapping(names: Mapping[str, str]) -> ActorNameResolver:
    """Actor resolver over a pre-fetched id -> display name mapping."""
    snapshot = dict(names)
    return snapshot.get


# ══════════════════════════════════════════════════════════════
# TIMELINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TimelineItem:
    id: str
    type_label: str
    timestamp: Optional[datetime]
    description: str
    secondary_description: str
    style: str
    source: TimelineSource
    source_id: Optional[str] = None
    is_synthetic: bool = False
    sort_priority: int = 0

    def __post_init__(self):
        # Naive timestamps are read as UTC so mixed items stay comparable.
        object.__setattr__(self, "timestamp", parse_timestamp(self.timestamp))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type_label,
            "timestamp": isoformat_or_none(self.timestamp),
            "description": self.description,
            "secondary_description": self.secondary_description,
            "style": self.style,
            "source": self.source.value,
            "source_id": self.source_id,
            "is_synthetic": self.is_synthetic,
            "sort_priority": self.sort_priority,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TimelineItem:
        return cls(
            id=str(data["id"]),
            type_label=str(data["type"]),
            timestamp=parse_timestamp(data.get("timestamp")),
            description=str(data.get("description") or ""),
            secondary_description=str(data.get("secondary_description") or ""),
            style=str(data.get("style") or CATEGORY_STYLES[EventCategory.OTHER]),
            source=TimelineSource(data["source"]),
            source_id=data.get("source_id"),
            is_synthetic=bool(data.get("is_synthetic")),
            sort_priority=int(data.get("sort_priority") or 0),
        )


# ══════════════════════════════════════════════════════════════
# ORDERING
# ══════════════════════════════════════════════════════════════

def timeline_sort_key(item: TimelineItem) -> Tuple[int, timedelta, int]:
    """
    Newest first, then lower sort_priority first.

    Items without a usable timestamp sort after every dated item.
    """
    if item.timestamp is None:
        return (1, timedelta(0), item.sort_priority)
    return (0, _EPOCH - item.timestamp, item.sort_priority)


def sort_timeline(items: Iterable[TimelineItem]) -> List[TimelineItem]:
    # sorted() is stable: equal keys keep their merge order.
    return sorted(items, key=timeline_sort_key)


# ══════════════════════════════════════════════════════════════
# CHARGE DESCRIPTION CLEANUP
# ══════════════════════════════════════════════════════════════

_CHARGE_PREFIX = re.compile(r"^\s*charge added:\s*", re.IGNORECASE)
_HASH_MARKER = re.compile(r"#\s*")
_WHITESPACE = re.compile(r"\s+")


def _amount_parenthetical(symbol: str) -> "re.Pattern[str]":
    return re.compile(
        r"\s*\(\s*" + re.escape(symbol) + r"\s*[\d,]+(?:\.\d+)?\s*\)\s*"
    )


def clean_charge_description(text: str, symbol: str = RUPEE) -> str:
    """
    Strip posting noise from a ledger description.

    "Charge Added: Extra Bed (₹500)" -> "Extra Bed"
    """
    cleaned = _CHARGE_PREFIX.sub("", text or "")
    cleaned = _amount_parenthetical(symbol).sub(" ", cleaned)
    cleaned = _HASH_MARKER.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


# ══════════════════════════════════════════════════════════════
# ITEM FACTORIES
# ══════════════════════════════════════════════════════════════

def _synthetic_items(
    booking: BookingSnapshot,
) -> List[Tuple[Optional[ArrivalEventType], TimelineItem]]:
    candidates: List[Tuple[Optional[ArrivalEventType], TimelineItem]] = []

    if booking.actual_checkin_at is not None:
        candidates.append((ArrivalEventType.CHECK_IN, TimelineItem(
            id=f"synthetic-checkin-{booking.id}",
            type_label=ARRIVAL_TYPE_LABELS[ArrivalEventType.CHECK_IN],
            timestamp=booking.actual_checkin_at,
            description="Guest checked in",
            secondary_description=f"Room {booking.room_numbers or 'assigned'}",
            style=CATEGORY_STYLES[EventCategory.ARRIVAL],
            source=TimelineSource.BOOKING,
            source_id=booking.id,
            is_synthetic=True,
        )))

    if booking.actual_checkout_at is not None:
        candidates.append((ArrivalEventType.CHECK_OUT, TimelineItem(
            id=f"synthetic-checkout-{booking.id}",
            type_label=ARRIVAL_TYPE_LABELS[ArrivalEventType.CHECK_OUT],
            timestamp=booking.actual_checkout_at,
            description="Guest checked out",
            secondary_description="Stay completed",
            style=CATEGORY_STYLES[EventCategory.ARRIVAL],
            source=TimelineSource.BOOKING,
            source_id=booking.id,
            is_synthetic=True,
        )))

    if booking.created_at is not None:
        via = (booking.source or "").replace("_", " ").strip() or "Direct Entry"
        candidates.append((None, TimelineItem(
            id=f"synthetic-created-{booking.id}",
            type_label=BOOKING_LABEL,
            timestamp=booking.created_at,
            description="Booking created",
            secondary_description=f"Via {via}",
            style=BOOKING_STYLE,
            source=TimelineSource.BOOKING,
            source_id=booking.id,
            is_synthetic=True,
        )))

    return candidates


def _join(*parts: str, sep: str = " • ") -> str:
    return sep.join(p for p in (part.strip() for part in parts) if p)


def _resolve_actor(actor_id: Optional[str], resolver: Optional[ActorNameResolver]) -> str:
    if not actor_id or resolver is None:
        return SYSTEM_ACTOR_LABEL
    name = resolver(actor_id)
    if not name or not str(name).strip():
        return SYSTEM_ACTOR_LABEL
    return str(name).strip()


def _activity_item(
    event: ActivityEvent,
    index: int,
    resolver: Optional[ActorNameResolver],
    symbol: str,
) -> TimelineItem:
    category = event.category
    label = event.event_type
    secondary = event.description

    if category is EventCategory.ARRIVAL:
        arrival_type = normalize_arrival_type(event.event_type)
        if arrival_type is not None:
            label = ARRIVAL_TYPE_LABELS[arrival_type]
    elif category is EventCategory.FOOD:
        if event.amount:
            secondary = _join(event.description, f"({format_inr(event.amount, symbol)})", sep=" ")
    elif category is EventCategory.PAYMENT:
        collector = _resolve_actor(event.actor_id, resolver)
        secondary = _join(event.description, f"Collected by {collector}")

    return TimelineItem(
        id=event.id or f"{category.value}-{event.raw_time}-{index}",
        type_label=label,
        timestamp=event.event_time,
        description=event.title or event.description,
        secondary_description=secondary,
        style=CATEGORY_STYLES[category],
        source=TimelineSource.ACTIVITY,
        source_id=event.id,
        sort_priority=event.sort_priority,
    )


def _charge_item(entry: LedgerEntry, symbol: str) -> TimelineItem:
    base = entry.description or entry.raw_kind.replace("_", " ")
    return TimelineItem(
        id=entry.id,
        type_label=CHARGE_LABEL,
        timestamp=entry.created_at,
        description=_join(clean_charge_description(base, symbol), format_inr(entry.amount, symbol)),
        secondary_description="",
        style=CHARGE_STYLE,
        source=TimelineSource.LEDGER,
        source_id=entry.id,
        sort_priority=CHARGE_SORT_PRIORITY,
    )


# ══════════════════════════════════════════════════════════════
# BUILDER
# ══════════════════════════════════════════════════════════════

def build_timeline(
    booking: Optional[BookingSnapshot],
    ledger: Optional[Sequence[LedgerEntry]] = None,
    activity: Optional[Sequence[ActivityEvent]] = None,
    actor_name_resolver: Optional[ActorNameResolver] = None,
    *,
    currency_symbol: str = RUPEE,
) -> List[TimelineItem]:
    """
    Build the unified activity timeline for one booking.

    Returns [] when there is no booking. Never raises for data-shape
    problems: unknown categories and types fall through to generic
    display, missing optional fields degrade to empty text or "System".
    """
    if booking is None:
        return []

    synthetic = _synthetic_items(booking)

    suppressed = set()
    activity_items: List[TimelineItem] = []
    for index, event in enumerate(activity or ()):
        if event.category is EventCategory.ARRIVAL:
            arrival_type = normalize_arrival_type(event.event_type)
            if arrival_type in SUPPRESSIBLE_SYNTHETICS:
                suppressed.add(arrival_type)
        activity_items.append(_activity_item(event, index, actor_name_resolver, currency_symbol))

    charge_items = [
        _charge_item(entry, currency_symbol)
        for entry in (ledger or ())
        if entry.kind not in SKIPPED_LEDGER_KINDS
    ]

    kept_synthetic = [item for kind, item in synthetic if kind not in suppressed]
    return sort_timeline(kept_synthetic + activity_items + charge_items)
