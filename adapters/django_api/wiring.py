"""
GuestDesk Django Adapter Wiring
===============================
Constructs HttpApiDependencies for local/staging live runs.

This module is adapter-only glue:
- no core contract changes
- an in-memory query client seeded with one demo hotel stands in for
  the hotel backend, with the two RPCs the services call
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

from django.conf import settings

from core.query_client import InMemoryQueryClient, QueryClientError
from core.time import Clock, SystemClock
from core.http_api.dependencies import HttpApiDependencies
from engines.hotel_folio.events import (
    ACTIVITY_RELATION,
    ARRIVAL_ROWS_RELATION,
    COLLECT_PAYMENT_RPC,
    LEDGER_RELATION,
    PAYMENTS_RELATION,
    PROFILES_RELATION,
)
from engines.hotel_folio.services import FolioService
from engines.hotel_reservation.events import REQUEST_CHECKOUT_RPC, USER_STAYS_RELATION
from engines.hotel_reservation.services import ArrivalsService, StayService


DEV_HOTEL_ID = "11111111-1111-1111-1111-111111111111"
DEV_BOOKING_ID = "22222222-2222-2222-2222-222222222222"
DEV_GUEST_ID = "33333333-3333-3333-3333-333333333333"
DEV_STAFF_ID = "44444444-4444-4444-4444-444444444444"

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


def _iso(dt: datetime) -> str:
    return dt.isoformat()


def _seed_tables(now: datetime) -> dict[str, list[dict[str, Any]]]:
    checkin = now - timedelta(hours=20)
    created = now - timedelta(days=3)
    return {
        ARRIVAL_ROWS_RELATION: [
            {
                "hotel_id": DEV_HOTEL_ID,
                "booking_id": DEV_BOOKING_ID,
                "booking_code": "BK-1001",
                "guest_name": "Asha Rao",
                "booking_status": "CHECKED_IN",
                "scheduled_checkin_at": _iso(checkin),
                "scheduled_checkout_at": _iso(checkin + timedelta(days=2)),
                "actual_checkin_at": _iso(checkin + timedelta(minutes=30)),
                "created_at": _iso(created),
                "room_numbers": "204",
                "source": "WALK_IN",
                "arrival_operational_state": "CHECKED_IN",
                "payment_pending": True,
                "pending_amount": "3700",
                "vip_flag": False,
                "room_type_ids": ["deluxe"],
            },
        ],
        LEDGER_RELATION: [
            {
                "id": "fe-1",
                "booking_id": DEV_BOOKING_ID,
                "entry_type": "ROOM_CHARGE",
                "amount": "4500",
                "description": "Charge Added: Room 204 night 1 (₹4,500)",
                "created_at": _iso(checkin + timedelta(hours=2)),
            },
            {
                "id": "fe-2",
                "booking_id": DEV_BOOKING_ID,
                "entry_type": "FOOD_CHARGE",
                "amount": "700",
                "description": "Dinner",
                "created_at": _iso(checkin + timedelta(hours=6)),
            },
            {
                "id": "fe-3",
                "booking_id": DEV_BOOKING_ID,
                "entry_type": "PAYMENT",
                "amount": "-1500",
                "description": "Advance",
                "created_at": _iso(checkin + timedelta(minutes=40)),
            },
        ],
        PAYMENTS_RELATION: [
            {
                "id": "pay-1",
                "booking_id": DEV_BOOKING_ID,
                "amount": "1500",
                "method": "UPI",
                "status": "COMPLETED",
                "collected_by": DEV_STAFF_ID,
                "created_at": _iso(checkin + timedelta(minutes=40)),
            },
        ],
        ACTIVITY_RELATION: [
            {
                "id": "act-1",
                "booking_id": DEV_BOOKING_ID,
                "event_category": "ARRIVAL",
                "event_type": "CHECKED_IN",
                "event_time": _iso(checkin + timedelta(minutes=30)),
                "sort_priority": 1,
                "title": "Guest checked in",
                "description": "Room 204",
            },
            {
                "id": "act-2",
                "booking_id": DEV_BOOKING_ID,
                "event_category": "PAYMENT",
                "event_type": "PAYMENT",
                "event_time": _iso(checkin + timedelta(minutes=40)),
                "sort_priority": 2,
                "title": "Payment received",
                "description": "UPI ₹1,500",
                "amount": "1500",
                "actor_id": DEV_STAFF_ID,
            },
            {
                "id": "act-3",
                "booking_id": DEV_BOOKING_ID,
                "event_category": "FOOD",
                "event_type": "ORDER",
                "event_time": _iso(checkin + timedelta(hours=6)),
                "sort_priority": 3,
                "title": "Food order",
                "description": "Dinner",
                "amount": "700",
            },
        ],
        PROFILES_RELATION: [
            {"id": DEV_STAFF_ID, "full_name": "Ravi Kumar"},
        ],
        USER_STAYS_RELATION: [
            {
                "id": "stay-1",
                "guest_id": DEV_GUEST_ID,
                "booking_id": DEV_BOOKING_ID,
                "booking_code": "BK-1001",
                "hotel_id": DEV_HOTEL_ID,
                "hotel_name": "GuestDesk Demo Hotel",
                "status": "inhouse",
                "check_in": _iso(checkin),
                "check_out": _iso(checkin + timedelta(days=2)),
            },
        ],
    }


def _collect_payment_handler(client: InMemoryQueryClient, clock: Clock):
    def _handler(params: dict[str, Any]) -> dict[str, Any]:
        booking_id = params["p_booking_id"]
        amount = Decimal(params["p_amount"])
        if amount <= 0:
            raise QueryClientError(f"rpc {COLLECT_PAYMENT_RPC}", "amount must be positive")
        payment_id = str(uuid.uuid4())
        now = _iso(clock.now_utc())
        client.insert(PAYMENTS_RELATION, {
            "id": payment_id,
            "booking_id": booking_id,
            "amount": str(amount),
            "method": params["p_method"],
            "status": "COMPLETED",
            "created_at": now,
        })
        client.insert(LEDGER_RELATION, {
            "id": f"fe-{payment_id}",
            "booking_id": booking_id,
            "entry_type": "PAYMENT",
            "amount": str(-amount),
            "description": f"Payment via {params['p_method']}",
            "created_at": now,
        })
        return {"success": True, "payment_id": payment_id}

    return _handler


def _request_checkout_handler(client: InMemoryQueryClient):
    def _handler(params: dict[str, Any]) -> dict[str, Any]:
        changed = client.update(
            USER_STAYS_RELATION,
            {"booking_id": params["p_booking_id"]},
            {"status": "checkout_requested"},
        )
        if not changed:
            return {"success": False, "error": "Stay not found."}
        return {"success": True}

    return _handler


def build_query_client(clock: Clock) -> InMemoryQueryClient:
    client = InMemoryQueryClient(_seed_tables(clock.now_utc()))
    client.register_rpc(COLLECT_PAYMENT_RPC, _collect_payment_handler(client, clock))
    client.register_rpc(REQUEST_CHECKOUT_RPC, _request_checkout_handler(client))
    return client


def _create_dependencies() -> HttpApiDependencies:
    clock = SystemClock()
    client = build_query_client(clock)
    hotel_tz = ZoneInfo(settings.GUESTDESK_HOTEL_TIME_ZONE)

    return HttpApiDependencies(
        folio_service=FolioService(
            query_client=client,
            currency_symbol=settings.GUESTDESK_CURRENCY_SYMBOL,
        ),
        stay_service=StayService(query_client=client, clock=clock),
        arrivals_service=ArrivalsService(
            query_client=client, clock=clock, hotel_tz=hotel_tz,
        ),
        clock=clock,
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES
