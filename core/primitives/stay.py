"""
GuestDesk Stay Primitives - Typed backend records
=================================================
Every row that crosses the data-access boundary is turned into one of
these frozen records before any folio or dashboard logic sees it.

RULES:
- Raw enum strings are normalized into closed enums here, once.
- Timestamps are parsed here; unparseable values become None.
- Amounts are Decimal and never negative; the entry kind carries direction.
- A row missing its identifier, or carrying a non-numeric amount, is
  refused with RowValidationError. Callers log and skip it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from core.primitives.money import ZERO, to_decimal
from core.time import isoformat_or_none, parse_timestamp

logger = logging.getLogger("guestdesk.boundary")


class RowValidationError(ValueError):
    """A backend row could not be turned into a typed record."""

    def __init__(self, entity: str, detail: str):
        self.entity = entity
        self.detail = detail
        super().__init__(f"Invalid {entity} row: {detail}")


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class EntryKind(Enum):
    """Folio ledger entry kind."""
    ROOM_CHARGE = "ROOM_CHARGE"
    FOOD_CHARGE = "FOOD_CHARGE"
    PAYMENT = "PAYMENT"
    REFUND = "REFUND"
    OTHER = "OTHER"

    @classmethod
    def normalize(cls, raw: Any) -> EntryKind:
        key = str(raw or "").strip().upper()
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


# Kinds that settle the folio rather than charge it.
SETTLEMENT_KINDS = frozenset({EntryKind.PAYMENT, EntryKind.REFUND})


class EventCategory(Enum):
    """Activity stream category."""
    ARRIVAL = "ARRIVAL"
    FOOD = "FOOD"
    PAYMENT = "PAYMENT"
    SERVICE = "SERVICE"
    OTHER = "OTHER"

    @classmethod
    def normalize(cls, raw: Any) -> EventCategory:
        key = str(raw or "").strip().upper()
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


class ArrivalState(Enum):
    """Operational arrival state computed by the dashboard view."""
    CHECKED_IN = "CHECKED_IN"
    PARTIALLY_ARRIVED = "PARTIALLY_ARRIVED"
    WAITING_HOUSEKEEPING = "WAITING_HOUSEKEEPING"
    WAITING_ROOM_ASSIGNMENT = "WAITING_ROOM_ASSIGNMENT"
    READY_TO_CHECKIN = "READY_TO_CHECKIN"
    EXPECTED = "EXPECTED"
    NO_ROOMS = "NO_ROOMS"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def normalize(cls, raw: Any) -> ArrivalState:
        key = str(raw or "").strip().upper()
        try:
            return cls(key)
        except ValueError:
            return cls.UNKNOWN


ARRIVED_STATES = frozenset({ArrivalState.CHECKED_IN, ArrivalState.PARTIALLY_ARRIVED})


# ══════════════════════════════════════════════════════════════
# FIELD HELPERS
# ══════════════════════════════════════════════════════════════

def _require_id(row: Mapping[str, Any], entity: str, *keys: str) -> str:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    raise RowValidationError(entity, f"missing {' / '.join(keys)}")


def _text(row: Mapping[str, Any], key: str) -> str:
    value = row.get(key)
    return "" if value is None else str(value)


def _optional_text(row: Mapping[str, Any], key: str) -> Optional[str]:
    value = row.get(key)
    if value is None or not str(value).strip():
        return None
    return str(value)


def _amount(row: Mapping[str, Any], key: str, entity: str) -> Decimal:
    try:
        return to_decimal(row.get(key))
    except ValueError as exc:
        raise RowValidationError(entity, f"{key}: {exc}") from exc


def _optional_amount(row: Mapping[str, Any], key: str, entity: str) -> Optional[Decimal]:
    value = row.get(key)
    if value is None or value == "":
        return None
    try:
        return to_decimal(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {entity}.{key}: {value!r}")
        return None


def _int_or_default(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _aware_timestamps(record: Any, *names: str) -> None:
    """Read naive datetimes on a frozen record as UTC, in place."""
    for name in names:
        object.__setattr__(record, name, parse_timestamp(getattr(record, name)))


# ══════════════════════════════════════════════════════════════
# BOOKING SNAPSHOT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BookingSnapshot:
    """
    One reservation as the arrivals dashboard view describes it.

    Invariant: scheduled_checkout_at > scheduled_checkin_at when both
    are known (refused at construction otherwise).
    """

    id: str
    code: str
    guest_name: str
    scheduled_checkin_at: Optional[datetime]
    scheduled_checkout_at: Optional[datetime]
    actual_checkin_at: Optional[datetime] = None
    actual_checkout_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    room_numbers: Optional[str] = None
    source: Optional[str] = None
    status: str = ""
    arrival_state: ArrivalState = ArrivalState.UNKNOWN

    def __post_init__(self):
        if not self.id:
            raise RowValidationError("booking", "id must be non-empty")
        _aware_timestamps(
            self,
            "scheduled_checkin_at", "scheduled_checkout_at",
            "actual_checkin_at", "actual_checkout_at", "created_at",
        )
        start, end = self.scheduled_checkin_at, self.scheduled_checkout_at
        if start is not None and end is not None and end <= start:
            raise RowValidationError(
                "booking",
                f"scheduled check-out {end.isoformat()} is not after "
                f"check-in {start.isoformat()}",
            )

    @property
    def nights(self) -> int:
        """Scheduled nights, at least one."""
        start, end = self.scheduled_checkin_at, self.scheduled_checkout_at
        if start is None or end is None:
            return 1
        return max(1, round((end - start).total_seconds() / 86400))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> BookingSnapshot:
        return cls(
            id=_require_id(row, "booking", "booking_id", "id"),
            code=_text(row, "booking_code") or _text(row, "code"),
            guest_name=_text(row, "guest_name"),
            scheduled_checkin_at=parse_timestamp(row.get("scheduled_checkin_at")),
            scheduled_checkout_at=parse_timestamp(row.get("scheduled_checkout_at")),
            actual_checkin_at=parse_timestamp(row.get("actual_checkin_at")),
            actual_checkout_at=parse_timestamp(row.get("actual_checkout_at")),
            created_at=parse_timestamp(row.get("created_at")),
            room_numbers=_optional_text(row, "room_numbers"),
            source=_optional_text(row, "source"),
            status=_text(row, "booking_status") or _text(row, "status"),
            arrival_state=ArrivalState.normalize(row.get("arrival_operational_state")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "guest_name": self.guest_name,
            "status": self.status,
            "room_numbers": self.room_numbers,
            "source": self.source,
            "nights": self.nights,
            "scheduled_checkin_at": isoformat_or_none(self.scheduled_checkin_at),
            "scheduled_checkout_at": isoformat_or_none(self.scheduled_checkout_at),
            "actual_checkin_at": isoformat_or_none(self.actual_checkin_at),
            "actual_checkout_at": isoformat_or_none(self.actual_checkout_at),
            "created_at": isoformat_or_none(self.created_at),
            "arrival_operational_state": self.arrival_state.value,
        }


# ══════════════════════════════════════════════════════════════
# LEDGER ENTRY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerEntry:
    """One posted folio line. Immutable once created."""

    id: str
    kind: EntryKind
    amount: Decimal
    description: str = ""
    created_at: Optional[datetime] = None
    raw_kind: str = ""

    def __post_init__(self):
        if self.amount < 0:
            raise RowValidationError("ledger entry", "amount must be >= 0")
        _aware_timestamps(self, "created_at")

    @property
    def is_settlement(self) -> bool:
        return self.kind in SETTLEMENT_KINDS

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> LedgerEntry:
        entry_id = _require_id(row, "ledger entry", "id")
        raw_kind = _text(row, "entry_type").strip()
        kind = EntryKind.normalize(raw_kind)
        amount = _amount(row, "amount", "ledger entry")
        if amount < 0:
            # Payments are posted negative by the backend; direction lives in kind.
            if kind not in SETTLEMENT_KINDS:
                logger.warning(
                    f"Negative {raw_kind or 'charge'} amount on ledger entry "
                    f"{entry_id}; using absolute value"
                )
            amount = -amount
        return cls(
            id=entry_id,
            kind=kind,
            amount=amount,
            description=_text(row, "description"),
            created_at=parse_timestamp(row.get("created_at")),
            raw_kind=raw_kind or kind.value,
        )


# ══════════════════════════════════════════════════════════════
# ACTIVITY EVENT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ActivityEvent:
    """One lifecycle/operational event from the booking activity stream."""

    category: EventCategory
    event_type: str
    event_time: Optional[datetime]
    sort_priority: int = 0
    id: Optional[str] = None
    amount: Optional[Decimal] = None
    actor_id: Optional[str] = None
    title: str = ""
    description: str = ""
    raw_time: str = ""

    def __post_init__(self):
        _aware_timestamps(self, "event_time")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ActivityEvent:
        event_type = _text(row, "event_type").strip()
        if not event_type:
            raise RowValidationError("activity event", "missing event_type")
        return cls(
            id=_optional_text(row, "id"),
            category=EventCategory.normalize(row.get("event_category")),
            event_type=event_type,
            event_time=parse_timestamp(row.get("event_time")),
            sort_priority=_int_or_default(row.get("sort_priority")),
            amount=_optional_amount(row, "amount", "activity event"),
            actor_id=_optional_text(row, "actor_id"),
            title=_text(row, "title"),
            description=_text(row, "description"),
            raw_time=_text(row, "event_time"),
        )


# ══════════════════════════════════════════════════════════════
# PAYMENT RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PaymentRecord:
    id: str
    amount: Decimal
    method: str
    status: str
    created_at: Optional[datetime] = None
    collected_by: Optional[str] = None
    reference_id: Optional[str] = None

    def __post_init__(self):
        _aware_timestamps(self, "created_at")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> PaymentRecord:
        return cls(
            id=_require_id(row, "payment", "id"),
            amount=abs(_amount(row, "amount", "payment")),
            method=_text(row, "method").upper(),
            status=_text(row, "status").upper(),
            created_at=parse_timestamp(row.get("created_at")),
            collected_by=_optional_text(row, "collected_by"),
            reference_id=_optional_text(row, "reference_id"),
        )


# ══════════════════════════════════════════════════════════════
# ARRIVAL ROW
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ArrivalRow:
    """One row of the owner arrivals dashboard."""

    booking_id: str
    booking_code: str
    guest_name: str
    booking_status: str
    scheduled_checkin_at: Optional[datetime]
    scheduled_checkout_at: Optional[datetime]
    state: ArrivalState
    payment_pending: bool = False
    pending_amount: Decimal = ZERO
    vip_flag: bool = False
    arrival_badge: str = "DIRECT"
    room_type_ids: Tuple[str, ...] = field(default_factory=tuple)
    room_numbers: Optional[str] = None

    def __post_init__(self):
        _aware_timestamps(self, "scheduled_checkin_at", "scheduled_checkout_at")

    @property
    def has_arrived(self) -> bool:
        return self.state in ARRIVED_STATES

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> ArrivalRow:
        room_types = row.get("room_type_ids") or ()
        if isinstance(room_types, str):
            room_types = (room_types,)
        pending = _optional_amount(row, "pending_amount", "arrival")
        return cls(
            booking_id=_require_id(row, "arrival", "booking_id"),
            booking_code=_text(row, "booking_code"),
            guest_name=_text(row, "guest_name"),
            booking_status=_text(row, "booking_status").upper(),
            scheduled_checkin_at=parse_timestamp(row.get("scheduled_checkin_at")),
            scheduled_checkout_at=parse_timestamp(row.get("scheduled_checkout_at")),
            state=ArrivalState.normalize(row.get("arrival_operational_state")),
            payment_pending=bool(row.get("payment_pending")),
            pending_amount=pending if pending is not None else ZERO,
            vip_flag=bool(row.get("vip_flag")),
            arrival_badge=_text(row, "arrival_badge").upper() or "DIRECT",
            room_type_ids=tuple(str(rt) for rt in room_types),
            room_numbers=_optional_text(row, "room_numbers"),
        )

    def to_dict(self) -> dict:
        return {
            "booking_id": self.booking_id,
            "booking_code": self.booking_code,
            "guest_name": self.guest_name,
            "booking_status": self.booking_status,
            "scheduled_checkin_at": isoformat_or_none(self.scheduled_checkin_at),
            "scheduled_checkout_at": isoformat_or_none(self.scheduled_checkout_at),
            "arrival_operational_state": self.state.value,
            "payment_pending": self.payment_pending,
            "pending_amount": str(self.pending_amount),
            "vip_flag": self.vip_flag,
            "arrival_badge": self.arrival_badge,
            "room_type_ids": list(self.room_type_ids),
            "room_numbers": self.room_numbers,
        }


# ══════════════════════════════════════════════════════════════
# STAY RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StayRecord:
    """One guest stay from the guest's recent stays view."""

    id: str
    booking_id: str
    status: str
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    booking_code: str = ""
    hotel_id: Optional[str] = None
    hotel_name: str = ""

    def __post_init__(self):
        _aware_timestamps(self, "check_in", "check_out")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> StayRecord:
        return cls(
            id=_require_id(row, "stay", "id"),
            booking_id=_text(row, "booking_id"),
            status=_text(row, "status"),
            check_in=parse_timestamp(row.get("check_in")),
            check_out=parse_timestamp(row.get("check_out")),
            booking_code=_text(row, "booking_code"),
            hotel_id=_optional_text(row, "hotel_id"),
            hotel_name=_text(row, "hotel_name"),
        )
