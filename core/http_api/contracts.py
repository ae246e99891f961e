"""
GuestDesk HTTP API - Contracts
==============================
Framework-agnostic request/response DTOs for the folio, arrivals and
guest stay endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from projections.arrivals import DateFilter, StatusFilter


@dataclass(frozen=True)
class FolioReadRequest:
    booking_id: str

    def __post_init__(self):
        if not self.booking_id or not isinstance(self.booking_id, str):
            raise ValueError("booking_id must be a non-empty string.")


@dataclass(frozen=True)
class CollectPaymentHttpRequest:
    booking_id: str
    amount: Any
    method: str
    actor_id: str = ""

    def __post_init__(self):
        if not self.booking_id or not isinstance(self.booking_id, str):
            raise ValueError("booking_id must be a non-empty string.")
        if not self.method or not isinstance(self.method, str):
            raise ValueError("method must be a non-empty string.")
        if not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a string.")


@dataclass(frozen=True)
class ArrivalsReadRequest:
    hotel_id: str
    date_filter: DateFilter = DateFilter.TODAY
    status_filter: StatusFilter = StatusFilter.ALL
    search: str = ""
    room_type_id: Optional[str] = None
    page: int = 1
    custom_from: Optional[date] = None
    custom_to: Optional[date] = None

    def __post_init__(self):
        if not self.hotel_id or not isinstance(self.hotel_id, str):
            raise ValueError("hotel_id must be a non-empty string.")
        if not isinstance(self.date_filter, DateFilter):
            raise ValueError("date_filter must be DateFilter.")
        if not isinstance(self.status_filter, StatusFilter):
            raise ValueError("status_filter must be StatusFilter.")
        if not isinstance(self.page, int) or self.page < 1:
            raise ValueError("page must be int >= 1.")
        if self.date_filter is DateFilter.CUSTOM:
            if self.custom_from is None or self.custom_to is None:
                raise ValueError("CUSTOM date filter requires from and to dates.")
            if self.custom_to < self.custom_from:
                raise ValueError("to date must not be before from date.")


@dataclass(frozen=True)
class GuestStayReadRequest:
    guest_id: str

    def __post_init__(self):
        if not self.guest_id or not isinstance(self.guest_id, str):
            raise ValueError("guest_id must be a non-empty string.")


@dataclass(frozen=True)
class RequestCheckoutHttpRequest:
    guest_id: str
    booking_id: str

    def __post_init__(self):
        if not self.guest_id or not isinstance(self.guest_id, str):
            raise ValueError("guest_id must be a non-empty string.")
        if not self.booking_id or not isinstance(self.booking_id, str):
            raise ValueError("booking_id must be a non-empty string.")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            body = {"ok": True, "data": self.data}
            if self.meta:
                body["meta"] = dict(self.meta)
            return body
        if self.error is None:
            raise ValueError("error must be set when ok is False.")
        return {"ok": False, "error": self.error.to_dict()}
