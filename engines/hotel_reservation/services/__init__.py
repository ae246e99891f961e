"""
GuestDesk Hotel Reservation Engine - Current Stay, Checkout, Arrivals Dashboard
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from core.commands.rejection import CommandRejectedError, ReasonCode, RejectionReason
from core.primitives.stay import ArrivalRow, RowValidationError, StayRecord
from core.query_client import QueryClient, QueryClientError
from core.time import Clock, isoformat_or_none
from engines.hotel_folio.events import ARRIVAL_ROWS_RELATION
from engines.hotel_reservation.commands import RequestCheckoutRequest
from engines.hotel_reservation.events import (
    CLOSED_PHASES,
    CURRENT_PHASES,
    PHASE_ACTIONS,
    REQUEST_CHECKOUT_RPC,
    RPC_PARAM_BUILDERS,
    USER_STAYS_RELATION,
    GuestAction,
    StayPhase,
    normalize_stay_status,
)
from projections.arrivals import (
    ArrivalsReadModel,
    ArrivalStats,
    DateFilter,
    HourBucket,
    Page,
    StatusFilter,
    date_filter_window,
    paginate,
)

logger = logging.getLogger("guestdesk.stays")


class CheckoutRejectedError(CommandRejectedError):
    pass


def allowed_guest_actions(phase: StayPhase) -> FrozenSet[GuestAction]:
    return PHASE_ACTIONS.get(phase, frozenset())


def select_current_stay(
    stays: Sequence[StayRecord], now: datetime
) -> Optional[StayRecord]:
    """
    Pick the stay the guest app should focus on.

    stays are most recent first. Preference: a stay in the hotel right
    now, then the next open stay (upcoming, or not yet past check-out),
    then simply the most recent one.
    """
    if not stays:
        return None
    for stay in stays:
        if normalize_stay_status(stay.status) in CURRENT_PHASES:
            return stay
    for stay in stays:
        phase = normalize_stay_status(stay.status)
        if phase in CLOSED_PHASES:
            continue
        if phase is StayPhase.UPCOMING:
            return stay
        if stay.check_out is not None and stay.check_out >= now:
            return stay
    return stays[0]


@dataclass(frozen=True)
class GuestStayView:
    stay: Optional[StayRecord]
    phase: StayPhase = StayPhase.UNKNOWN

    @property
    def actions(self) -> FrozenSet[GuestAction]:
        return allowed_guest_actions(self.phase)

    def to_dict(self) -> Dict[str, Any]:
        if self.stay is None:
            return {"stay": None, "phase": None, "actions": []}
        stay = self.stay
        return {
            "stay": {
                "id": stay.id,
                "booking_id": stay.booking_id,
                "booking_code": stay.booking_code,
                "hotel_id": stay.hotel_id,
                "hotel_name": stay.hotel_name,
                "status": stay.status,
                "check_in": isoformat_or_none(stay.check_in),
                "check_out": isoformat_or_none(stay.check_out),
            },
            "phase": self.phase.value,
            "actions": sorted(a.value for a in self.actions),
        }


class StayService:
    def __init__(self, *, query_client: QueryClient, clock: Clock):
        self._client = query_client
        self._clock = clock

    def _stays(self, guest_id: str) -> List[StayRecord]:
        try:
            rows = self._client.select(
                USER_STAYS_RELATION,
                eq={"guest_id": guest_id},
                order=[("check_in", False)],
            )
        except QueryClientError:
            logger.error(f"Loading stays for guest {guest_id} failed", exc_info=True)
            raise
        stays = []
        for row in rows:
            try:
                stays.append(StayRecord.from_row(row))
            except RowValidationError as exc:
                logger.warning(f"Skipping stay row: {exc}")
        return stays

    def load_current_stay(self, guest_id: str) -> GuestStayView:
        stay = select_current_stay(self._stays(guest_id), self._clock.now_utc())
        if stay is None:
            return GuestStayView(stay=None)
        return GuestStayView(stay=stay, phase=normalize_stay_status(stay.status))

    def request_checkout(self, request: RequestCheckoutRequest) -> GuestStayView:
        """Raises CheckoutRejectedError when checkout cannot be requested."""
        stay = next(
            (s for s in self._stays(request.guest_id) if s.booking_id == request.booking_id),
            None,
        )
        if stay is None:
            raise self._rejected(
                ReasonCode.STAY_NOT_FOUND,
                f"No stay for booking {request.booking_id}.",
                booking_id=request.booking_id,
            )
        phase = normalize_stay_status(stay.status)
        if GuestAction.REQUEST_CHECKOUT not in allowed_guest_actions(phase):
            raise self._rejected(
                ReasonCode.ACTION_NOT_ALLOWED,
                f"Checkout cannot be requested while the stay is {phase.value}.",
                phase=phase.value,
            )

        params = RPC_PARAM_BUILDERS[REQUEST_CHECKOUT_RPC](request)
        logger.info(f"Guest {request.guest_id} requesting checkout for {request.booking_id}")
        try:
            result = self._client.rpc(REQUEST_CHECKOUT_RPC, params)
        except QueryClientError:
            logger.error(
                f"request_checkout failed for booking {request.booking_id}",
                exc_info=True,
            )
            raise
        if isinstance(result, dict) and result.get("success") is False:
            raise self._rejected(
                ReasonCode.CHECKOUT_FAILED,
                str(result.get("error") or "Checkout request failed."),
            )
        return self.load_current_stay(request.guest_id)

    @staticmethod
    def _rejected(code: str, message: str, **params: Any) -> CheckoutRejectedError:
        logger.info(f"request_checkout rejected: {code}: {message}")
        return CheckoutRejectedError(RejectionReason(
            code=code,
            message=message,
            policy_name="hotel_reservation.request_checkout",
            params=params,
        ))


# ══════════════════════════════════════════════════════════════
# OWNER ARRIVALS DASHBOARD
# ══════════════════════════════════════════════════════════════

arrivals_logger = logging.getLogger("guestdesk.arrivals")


@dataclass(frozen=True)
class ArrivalsDashboard:
    stats: ArrivalStats
    timeline: Tuple[HourBucket, ...]
    page: Page

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "timeline": [bucket.to_dict() for bucket in self.timeline],
            "list": self.page.to_dict(),
        }


class ArrivalsService:
    """
    One fetch of the hotel's arrival rows, scoped by date filter and
    room type. Stats and the hourly timeline follow that scope; search
    and status filters only narrow the list.
    """

    def __init__(self, *, query_client: QueryClient, clock: Clock, hotel_tz: tzinfo):
        self._client = query_client
        self._clock = clock
        self._tz = hotel_tz

    def _rows(self, hotel_id: str) -> List[ArrivalRow]:
        try:
            raw = self._client.select(
                ARRIVAL_ROWS_RELATION,
                eq={"hotel_id": hotel_id},
                order=[("scheduled_checkin_at", True)],
            )
        except QueryClientError:
            arrivals_logger.error(f"Loading arrivals for hotel {hotel_id} failed", exc_info=True)
            raise
        rows = []
        for row in raw:
            try:
                rows.append(ArrivalRow.from_row(row))
            except RowValidationError as exc:
                arrivals_logger.warning(f"Skipping arrival row: {exc}")
        return rows

    def dashboard(
        self,
        hotel_id: str,
        *,
        date_filter: DateFilter = DateFilter.TODAY,
        status_filter: StatusFilter = StatusFilter.ALL,
        search: str = "",
        room_type_id: Optional[str] = None,
        page: int = 1,
        custom_from: Optional[date] = None,
        custom_to: Optional[date] = None,
    ) -> ArrivalsDashboard:
        now = self._clock.now_utc()
        model = ArrivalsReadModel(self._rows(hotel_id))
        if date_filter is DateFilter.LATE:
            model = model.late(now)
        else:
            window = date_filter_window(
                date_filter, now, self._tz, custom_from, custom_to,
            )
            model = model.in_window(window)
        context = model.with_room_type(room_type_id)
        return ArrivalsDashboard(
            stats=context.stats(),
            timeline=tuple(context.hourly_timeline(self._tz)),
            page=paginate(context.filter_list(search, status_filter), page),
        )
