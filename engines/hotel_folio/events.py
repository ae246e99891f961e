"""
GuestDesk Hotel Folio Engine - Relations, RPCs and Payload Builders
===================================================================
Engine: hotel_folio
Scope:  A booking's folio as staff see it in the arrivals drawer:
        ledger, payments, unified activity timeline, financial summary,
        and the "collect payment" action.

Folio state lives in the hotel backend. This engine reads the views
named below and writes only through the collect_payment RPC.
"""
from __future__ import annotations

ARRIVAL_ROWS_RELATION   = "v_arrival_dashboard_rows"
LEDGER_RELATION         = "folio_entries"
PAYMENTS_RELATION       = "payments"
ACTIVITY_RELATION       = "v_booking_activity"
PROFILES_RELATION       = "profiles"

COLLECT_PAYMENT_RPC     = "collect_payment"

VALID_PAYMENT_METHODS = frozenset({"CASH", "CARD", "UPI", "BANK_TRANSFER"})

PAYMENT_METHOD_LABELS = {
    "CASH":          "Cash",
    "CARD":          "Card (Manual)",
    "BANK_TRANSFER": "Bank Transfer",
    "UPI":           "UPI",
}

# Booking statuses the backend accepts payments for (compared upper-cased).
COLLECTABLE_BOOKING_STATUSES = frozenset({"CHECKED_IN", "INHOUSE", "PRE_CHECKED_IN"})


def build_collect_payment_params(cmd) -> dict:
    return {
        "p_booking_id": cmd.booking_id,
        "p_amount":     str(cmd.amount),
        "p_method":     cmd.method,
    }


RPC_PARAM_BUILDERS = {
    COLLECT_PAYMENT_RPC: build_collect_payment_params,
}
