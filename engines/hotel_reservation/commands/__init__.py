"""GuestDesk Hotel Reservation Engine - Request Commands"""
from __future__ import annotations
from dataclasses import dataclass

HOTEL_GUEST_REQUEST_CHECKOUT_REQUEST = "hotel.guest.request_checkout.request"


@dataclass(frozen=True)
class RequestCheckoutRequest:
    guest_id:   str
    booking_id: str

    def __post_init__(self):
        if not self.guest_id:   raise ValueError("guest_id must be non-empty.")
        if not self.booking_id: raise ValueError("booking_id must be non-empty.")

    @property
    def command_type(self) -> str:
        return HOTEL_GUEST_REQUEST_CHECKOUT_REQUEST
