"""GuestDesk Hotel Folio Engine - Folio View + Collect Payment Service"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from core.commands.rejection import CommandRejectedError, ReasonCode, RejectionReason
from core.primitives.money import RUPEE
from core.primitives.stay import (
    ActivityEvent,
    BookingSnapshot,
    EventCategory,
    LedgerEntry,
    PaymentRecord,
    RowValidationError,
)
from core.query_client import QueryClient, QueryClientError
from core.time import isoformat_or_none
from engines.hotel_folio.commands import CollectPaymentRequest
from engines.hotel_folio.events import (
    ACTIVITY_RELATION,
    ARRIVAL_ROWS_RELATION,
    COLLECT_PAYMENT_RPC,
    COLLECTABLE_BOOKING_STATUSES,
    LEDGER_RELATION,
    PAYMENT_METHOD_LABELS,
    PAYMENTS_RELATION,
    PROFILES_RELATION,
    RPC_PARAM_BUILDERS,
)
from projections.arrivals import room_status_label
from projections.finance import FinancialSummary, summarize
from projections.folio_timeline import (
    SYSTEM_ACTOR_LABEL,
    TimelineItem,
    build_timeline,
    resolver_from_mapping,
)

logger = logging.getLogger("guestdesk.folio")

EMPTY_TIMELINE_MESSAGE = "No activity yet"

T = TypeVar("T")


class PaymentRejectedError(CommandRejectedError):
    """collect_payment refused before or by the backend."""


def _reject(code: str, message: str, **params: Any) -> PaymentRejectedError:
    return PaymentRejectedError(RejectionReason(
        code=code,
        message=message,
        policy_name="hotel_folio.collect_payment",
        params=params,
    ))


@dataclass(frozen=True)
class FolioView:
    """Everything the folio drawer shows for one booking."""

    booking: Optional[BookingSnapshot]
    timeline: Tuple[TimelineItem, ...] = ()
    summary: FinancialSummary = field(default_factory=FinancialSummary)
    payments: Tuple[PaymentRecord, ...] = ()
    staff_names: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_empty_timeline(self) -> bool:
        return not self.timeline

    def collector_name(self, payment: PaymentRecord) -> str:
        if not payment.collected_by:
            return SYSTEM_ACTOR_LABEL
        return self.staff_names.get(payment.collected_by) or SYSTEM_ACTOR_LABEL

    @property
    def room_status(self) -> Optional[str]:
        """Room status badge for the summary tab."""
        if self.booking is None:
            return None
        return room_status_label(self.booking.arrival_state)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "booking": self.booking.to_dict() if self.booking else None,
            "room_status": self.room_status,
            "summary": self.summary.to_dict(),
            "timeline": [item.to_dict() for item in self.timeline],
            "empty_message": EMPTY_TIMELINE_MESSAGE if self.is_empty_timeline else None,
            "payments": [
                {
                    "id": p.id,
                    "amount": str(p.amount),
                    "method": p.method,
                    "method_label": PAYMENT_METHOD_LABELS.get(p.method, p.method),
                    "status": p.status,
                    "collected_by": self.collector_name(p),
                    "reference_id": p.reference_id,
                    "created_at": isoformat_or_none(p.created_at),
                }
                for p in self.payments
            ],
        }


class FolioService:
    """
    Fetches a booking's folio inputs, validates them into typed records
    and composes timeline + summary. Every call is a full recomputation.
    """

    def __init__(self, *, query_client: QueryClient, currency_symbol: str = RUPEE):
        self._client = query_client
        self._currency_symbol = currency_symbol

    # ── reads ─────────────────────────────────────────────────

    def _select(self, relation: str, **query) -> List[dict]:
        try:
            return self._client.select(relation, **query)
        except QueryClientError:
            logger.error(f"Query on {relation} failed", exc_info=True)
            raise

    def _typed_rows(
        self, relation: str, parser: Callable[[Mapping[str, Any]], T], **query
    ) -> List[T]:
        records: List[T] = []
        for row in self._select(relation, **query):
            try:
                records.append(parser(row))
            except RowValidationError as exc:
                logger.warning(f"Skipping row from {relation}: {exc}")
        return records

    def _staff_names(self, actor_ids: set) -> Dict[str, str]:
        if not actor_ids:
            return {}
        rows = self._select(PROFILES_RELATION, in_={"id": sorted(actor_ids)})
        return {
            str(row["id"]): str(row["full_name"])
            for row in rows
            if row.get("id") is not None and row.get("full_name")
        }

    def load_view(self, booking_id: str) -> FolioView:
        bookings = self._typed_rows(
            ARRIVAL_ROWS_RELATION, BookingSnapshot.from_row,
            eq={"booking_id": booking_id},
        )
        if not bookings:
            logger.info(f"No arrival row for booking {booking_id}")
            return FolioView(booking=None)
        booking = bookings[0]

        ledger = self._typed_rows(
            LEDGER_RELATION, LedgerEntry.from_row,
            eq={"booking_id": booking_id}, order=[("created_at", True)],
        )
        payments = self._typed_rows(
            PAYMENTS_RELATION, PaymentRecord.from_row,
            eq={"booking_id": booking_id}, order=[("created_at", False)],
        )
        activity = self._typed_rows(
            ACTIVITY_RELATION, ActivityEvent.from_row,
            eq={"booking_id": booking_id},
            order=[("event_time", False), ("sort_priority", True)],
        )

        actor_ids = {p.collected_by for p in payments if p.collected_by}
        actor_ids |= {
            e.actor_id for e in activity
            if e.category is EventCategory.PAYMENT and e.actor_id
        }
        staff_names = self._staff_names(actor_ids)

        timeline = build_timeline(
            booking, ledger, activity,
            resolver_from_mapping(staff_names),
            currency_symbol=self._currency_symbol,
        )
        return FolioView(
            booking=booking,
            timeline=tuple(timeline),
            summary=summarize(ledger),
            payments=tuple(payments),
            staff_names=staff_names,
        )

    # ── writes ────────────────────────────────────────────────

    def collect_payment(self, request: CollectPaymentRequest) -> FolioView:
        """
        Record a payment through the backend, then return the refreshed view.

        Raises PaymentRejectedError when the folio cannot take the payment.
        """
        view = self.load_view(request.booking_id)
        if view.booking is None:
            raise self._logged(_reject(
                ReasonCode.BOOKING_NOT_FOUND,
                f"Booking {request.booking_id} not found.",
                booking_id=request.booking_id,
            ))

        status = view.booking.status.strip().upper()
        if status not in COLLECTABLE_BOOKING_STATUSES:
            raise self._logged(_reject(
                ReasonCode.PAYMENT_NOT_ALLOWED,
                f"Payments not allowed for booking status: {view.booking.status or 'unknown'}.",
                status=view.booking.status,
            ))

        outstanding = view.summary.outstanding
        if outstanding <= 0:
            raise self._logged(_reject(
                ReasonCode.NO_OUTSTANDING_BALANCE,
                "No outstanding balance on this folio.",
            ))
        if request.amount > outstanding:
            raise self._logged(_reject(
                ReasonCode.OVERPAYMENT,
                f"Payment of {request.amount} exceeds outstanding balance of {outstanding}.",
                amount=str(request.amount),
                outstanding=str(outstanding),
            ))

        params = RPC_PARAM_BUILDERS[COLLECT_PAYMENT_RPC](request)
        logger.info(
            f"Collecting {request.method} payment of {request.amount} "
            f"for booking {request.booking_id} (actor: {request.actor_id or 'unknown'})"
        )
        try:
            result = self._client.rpc(COLLECT_PAYMENT_RPC, params)
        except QueryClientError:
            logger.error(
                f"collect_payment failed for booking {request.booking_id}",
                exc_info=True,
            )
            raise

        if isinstance(result, dict) and result.get("success") is False:
            raise self._logged(_reject(
                ReasonCode.PAYMENT_FAILED,
                str(result.get("error") or "Payment failed."),
            ))
        logger.info(
            f"Payment recorded for booking {request.booking_id}: "
            f"{(result or {}).get('payment_id')}"
        )
        return self.load_view(request.booking_id)

    @staticmethod
    def _logged(error: PaymentRejectedError) -> PaymentRejectedError:
        logger.info(f"collect_payment rejected: {error}")
        return error
