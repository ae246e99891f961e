"""
GuestDesk HTTP API - Error Mapping
==================================
Stable transport error mapping for command rejections and handler failures.
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse

INVALID_REQUEST = "INVALID_REQUEST"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
HANDLER_EXECUTION_FAILED = "HANDLER_EXECUTION_FAILED"

_TRANSPORT_STATUS = {
    INVALID_REQUEST: 400,
    METHOD_NOT_ALLOWED: 405,
    BACKEND_UNAVAILABLE: 502,
    HANDLER_EXECUTION_FAILED: 500,
    ReasonCode.BOOKING_NOT_FOUND: 404,
    ReasonCode.STAY_NOT_FOUND: 404,
}
REJECTION_STATUS = 409


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(
    data: Any,
    *,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data, meta=meta).to_dict()


def map_rejection_reason(reason: RejectionReason) -> HttpApiErrorBody:
    return HttpApiErrorBody(
        code=reason.code,
        message=reason.message,
        details={
            "policy_name": reason.policy_name,
            "message_key": f"rejection.{reason.code.lower()}",
            "message_params": dict(reason.params),
        },
    )


def rejection_response(reason: RejectionReason) -> dict[str, Any]:
    mapped = map_rejection_reason(reason)
    return error_response(
        code=mapped.code,
        message=mapped.message,
        details=mapped.details,
    )


def status_for(payload: dict[str, Any]) -> int:
    """Transport and not-found codes map directly; other rejections are 409."""
    if payload.get("ok"):
        return 200
    code = (payload.get("error") or {}).get("code", "")
    return _TRANSPORT_STATUS.get(code, REJECTION_STATUS)
