"""
GuestDesk Django Adapter Views
==============================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import (
    ArrivalsReadRequest,
    CollectPaymentHttpRequest,
    FolioReadRequest,
    GuestStayReadRequest,
    RequestCheckoutHttpRequest,
)
from core.http_api.errors import error_response, status_for
from core.http_api.handlers import (
    get_arrivals_dashboard,
    get_folio_view,
    get_guest_stay,
    post_collect_payment,
    post_request_checkout,
)
from projections.arrivals import DateFilter, StatusFilter


def _headers_from_request(request: HttpRequest) -> dict[str, str]:
    return {str(key): str(value) for key, value in request.headers.items()}


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_enum(enum_cls, value: str | None, field_name: str, default):
    if value is None or value == "":
        return default
    try:
        return enum_cls(value.strip().upper())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"{field_name} must be one of: {allowed}.") from exc


def _parse_optional_date(value: str | None, field_name: str) -> date | None:
    if value is None or value == "":
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an ISO date (YYYY-MM-DD).") from exc


def _parse_page(value: str | None) -> int:
    if value is None or value == "":
        return 1
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError("page must be an integer.") from exc


def _required_query(request: HttpRequest, name: str) -> str:
    value = request.GET.get(name)
    if not value:
        raise ValueError(f"{name} is required.")
    return value


def _required_field(body: dict[str, Any], name: str) -> Any:
    value = body.get(name)
    if value is None or value == "":
        raise ValueError(f"{name} is required.")
    return value


def _respond(payload: dict[str, Any]) -> JsonResponse:
    return JsonResponse(payload, status=status_for(payload))


def _dispatch(handler, contract_factory, request: HttpRequest) -> JsonResponse:
    headers = _headers_from_request(request)
    try:
        contract = contract_factory(request)
    except ValueError as exc:
        return _json_error("INVALID_REQUEST", str(exc), status=400)

    payload = handler(
        contract,
        build_dependencies(),
        headers=headers,
    )
    return _respond(payload)


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _folio_contract(request: HttpRequest) -> FolioReadRequest:
    return FolioReadRequest(booking_id=_required_query(request, "booking_id"))


def _collect_payment_contract(request: HttpRequest) -> CollectPaymentHttpRequest:
    body = _parse_json_body(request)
    return CollectPaymentHttpRequest(
        booking_id=_required_field(body, "booking_id"),
        amount=_required_field(body, "amount"),
        method=_required_field(body, "method"),
        actor_id=body.get("actor_id", ""),
    )


def _arrivals_contract(request: HttpRequest) -> ArrivalsReadRequest:
    params = request.GET
    return ArrivalsReadRequest(
        hotel_id=_required_query(request, "hotel_id"),
        date_filter=_parse_enum(
            DateFilter, params.get("date_filter"), "date_filter", DateFilter.TODAY,
        ),
        status_filter=_parse_enum(
            StatusFilter, params.get("status"), "status", StatusFilter.ALL,
        ),
        search=params.get("search", ""),
        room_type_id=params.get("room_type_id") or None,
        page=_parse_page(params.get("page")),
        custom_from=_parse_optional_date(params.get("from"), "from"),
        custom_to=_parse_optional_date(params.get("to"), "to"),
    )


def _guest_stay_contract(request: HttpRequest) -> GuestStayReadRequest:
    return GuestStayReadRequest(guest_id=_required_query(request, "guest_id"))


def _request_checkout_contract(request: HttpRequest) -> RequestCheckoutHttpRequest:
    body = _parse_json_body(request)
    return RequestCheckoutHttpRequest(
        guest_id=_required_field(body, "guest_id"),
        booking_id=_required_field(body, "booking_id"),
    )


@csrf_exempt
def folio_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(get_folio_view, _folio_contract, request)


@csrf_exempt
def collect_payment_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch(post_collect_payment, _collect_payment_contract, request)


@csrf_exempt
def arrivals_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(get_arrivals_dashboard, _arrivals_contract, request)


@csrf_exempt
def guest_stay_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _dispatch(get_guest_stay, _guest_stay_contract, request)


@csrf_exempt
def request_checkout_view(request: HttpRequest) -> JsonResponse:
    if request.method != "POST":
        return _method_not_allowed()
    return _dispatch(post_request_checkout, _request_checkout_contract, request)
