"""
GuestDesk Hotel Reservation Engine - Stay Phases and Guest Actions
==================================================================
Engine: hotel_reservation
Scope:  Guest-facing stay lifecycle. Raw booking statuses are folded
        into a small set of phases; each phase opens a fixed set of
        guest actions. Checkout itself is requested through the backend.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional

USER_STAYS_RELATION = "user_recent_stays"
REQUEST_CHECKOUT_RPC = "request_checkout"


class StayPhase(Enum):
    UPCOMING = "UPCOMING"
    IN_HOUSE = "IN_HOUSE"
    CHECKOUT_REQUESTED = "CHECKOUT_REQUESTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


class GuestAction(Enum):
    PRE_CHECKIN = "PRE_CHECKIN"
    VIEW_BILL = "VIEW_BILL"
    ORDER_FOOD = "ORDER_FOOD"
    REQUEST_SERVICE = "REQUEST_SERVICE"
    REQUEST_CHECKOUT = "REQUEST_CHECKOUT"
    LEAVE_REVIEW = "LEAVE_REVIEW"


STATUS_PHASES: Dict[str, StayPhase] = {
    "INHOUSE":            StayPhase.IN_HOUSE,
    "CHECKED_IN":         StayPhase.IN_HOUSE,
    "PARTIALLY_ARRIVED":  StayPhase.IN_HOUSE,
    "CHECKOUT_REQUESTED": StayPhase.CHECKOUT_REQUESTED,
    "ARRIVING":           StayPhase.UPCOMING,
    "EXPECTED":           StayPhase.UPCOMING,
    "CONFIRMED":          StayPhase.UPCOMING,
    "PRE_CHECKED_IN":     StayPhase.UPCOMING,
    "BOOKED":             StayPhase.UPCOMING,
    "CHECKED_OUT":        StayPhase.COMPLETED,
    "CANCELLED":          StayPhase.CANCELLED,
    "NO_SHOW":            StayPhase.CANCELLED,
}

PHASE_ACTIONS: Dict[StayPhase, FrozenSet[GuestAction]] = {
    StayPhase.UPCOMING: frozenset({
        GuestAction.PRE_CHECKIN, GuestAction.VIEW_BILL,
    }),
    StayPhase.IN_HOUSE: frozenset({
        GuestAction.ORDER_FOOD, GuestAction.REQUEST_SERVICE,
        GuestAction.VIEW_BILL, GuestAction.REQUEST_CHECKOUT,
    }),
    StayPhase.CHECKOUT_REQUESTED: frozenset({GuestAction.VIEW_BILL}),
    StayPhase.COMPLETED: frozenset({
        GuestAction.VIEW_BILL, GuestAction.LEAVE_REVIEW,
    }),
    StayPhase.CANCELLED: frozenset(),
    StayPhase.UNKNOWN: frozenset(),
}

CURRENT_PHASES = frozenset({StayPhase.IN_HOUSE, StayPhase.CHECKOUT_REQUESTED})
CLOSED_PHASES = frozenset({StayPhase.COMPLETED, StayPhase.CANCELLED})


def normalize_stay_status(raw: Optional[str]) -> StayPhase:
    """Case-insensitive; spaces and dashes read as underscores."""
    key = (raw or "").strip().upper().replace("-", "_").replace(" ", "_")
    return STATUS_PHASES.get(key, StayPhase.UNKNOWN)


def build_request_checkout_params(cmd) -> dict:
    return {"p_booking_id": cmd.booking_id}


RPC_PARAM_BUILDERS = {
    REQUEST_CHECKOUT_RPC: build_request_checkout_params,
}
