"""
GuestDesk HTTP API - Framework-Agnostic Handlers
================================================
Pure handler functions over contracts and injected dependencies.
Every handler returns the JSON envelope; the adapter picks the status
with errors.status_for.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from core.commands.rejection import CommandRejectedError, ReasonCode
from core.http_api.contracts import (
    ArrivalsReadRequest,
    CollectPaymentHttpRequest,
    FolioReadRequest,
    GuestStayReadRequest,
    RequestCheckoutHttpRequest,
)
from core.http_api.errors import (
    BACKEND_UNAVAILABLE,
    HANDLER_EXECUTION_FAILED,
    INVALID_REQUEST,
    error_response,
    rejection_response,
    success_response,
)
from core.query_client import QueryClientError
from engines.hotel_folio.commands import CollectPaymentRequest
from engines.hotel_reservation.commands import RequestCheckoutRequest

logger = logging.getLogger("guestdesk.http")


def _resolve_language(headers: dict[str, Any] | None) -> str:
    for key, value in (headers or {}).items():
        if str(key).strip().lower() != "accept-language":
            continue
        raw = str(value).strip().lower()
        if not raw:
            break
        first_segment = raw.split(",")[0]
        lang = first_segment.split(";")[0].strip()
        if lang:
            return lang
        break
    return "en"


def _success_with_language(
    data: Any,
    *,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return success_response(
        data,
        meta={"lang": _resolve_language(headers)},
    )


def _run(
    call: Callable[[], Any],
    *,
    operation: str,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    try:
        result = call()
    except CommandRejectedError as exc:
        return rejection_response(exc.reason)
    except ValueError as exc:
        return error_response(code=INVALID_REQUEST, message=str(exc), details={})
    except QueryClientError as exc:
        return error_response(
            code=BACKEND_UNAVAILABLE,
            message=f"Backend failed during {operation}.",
            details={"operation": exc.operation},
        )
    except Exception as exc:
        logger.exception(f"Unhandled error in {operation}")
        return error_response(
            code=HANDLER_EXECUTION_FAILED,
            message=f"Failed to execute {operation}.",
            details={"error_type": type(exc).__name__},
        )
    return _success_with_language(result, headers=headers)


# ══════════════════════════════════════════════════════════════
# FOLIO
# ══════════════════════════════════════════════════════════════

def get_folio_view(
    request: FolioReadRequest,
    dependencies,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    payload = _run(
        lambda: dependencies.folio_service.load_view(request.booking_id).to_dict(),
        operation="folio read",
        headers=headers,
    )
    if payload.get("ok") and payload["data"]["booking"] is None:
        return error_response(
            code=ReasonCode.BOOKING_NOT_FOUND,
            message=f"Booking {request.booking_id} not found.",
            details={"booking_id": request.booking_id},
        )
    return payload


def post_collect_payment(
    request: CollectPaymentHttpRequest,
    dependencies,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    def _call():
        command = CollectPaymentRequest(
            booking_id=request.booking_id,
            amount=request.amount,
            method=request.method,
            actor_id=request.actor_id,
        )
        return dependencies.folio_service.collect_payment(command).to_dict()

    return _run(_call, operation="collect payment", headers=headers)


# ══════════════════════════════════════════════════════════════
# ARRIVALS
# ══════════════════════════════════════════════════════════════

def get_arrivals_dashboard(
    request: ArrivalsReadRequest,
    dependencies,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    def _call():
        dashboard = dependencies.arrivals_service.dashboard(
            request.hotel_id,
            date_filter=request.date_filter,
            status_filter=request.status_filter,
            search=request.search,
            room_type_id=request.room_type_id,
            page=request.page,
            custom_from=request.custom_from,
            custom_to=request.custom_to,
        )
        return dashboard.to_dict()

    return _run(_call, operation="arrivals read", headers=headers)


# ══════════════════════════════════════════════════════════════
# GUEST STAY
# ══════════════════════════════════════════════════════════════

def get_guest_stay(
    request: GuestStayReadRequest,
    dependencies,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    return _run(
        lambda: dependencies.stay_service.load_current_stay(request.guest_id).to_dict(),
        operation="guest stay read",
        headers=headers,
    )


def post_request_checkout(
    request: RequestCheckoutHttpRequest,
    dependencies,
    headers: dict[str, Any] | None = None,
) -> dict[str, Any]:
    def _call():
        command = RequestCheckoutRequest(
            guest_id=request.guest_id,
            booking_id=request.booking_id,
        )
        return dependencies.stay_service.request_checkout(command).to_dict()

    return _run(_call, operation="request checkout", headers=headers)
