"""GuestDesk Hotel Folio Engine - Request Commands"""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal

from core.primitives.money import to_decimal
from engines.hotel_folio.events import VALID_PAYMENT_METHODS

HOTEL_FOLIO_COLLECT_PAYMENT_REQUEST = "hotel.folio.collect_payment.request"


@dataclass(frozen=True)
class CollectPaymentRequest:
    """
    Staff-entered payment against a booking's folio.

    amount accepts anything to_decimal accepts and is stored as Decimal.
    """
    booking_id: str
    amount:     Decimal
    method:     str
    actor_id:   str = ""

    def __post_init__(self):
        if not self.booking_id: raise ValueError("booking_id must be non-empty.")
        try:
            amount = to_decimal(self.amount)
        except ValueError as exc:
            raise ValueError("amount must be a positive number.") from exc
        if amount <= 0:
            raise ValueError("amount must be a positive number.")
        object.__setattr__(self, "amount", amount)
        method = (self.method or "").strip().upper()
        if method not in VALID_PAYMENT_METHODS:
            raise ValueError(f"method must be one of {sorted(VALID_PAYMENT_METHODS)}.")
        object.__setattr__(self, "method", method)

    @property
    def command_type(self) -> str:
        return HOTEL_FOLIO_COLLECT_PAYMENT_REQUEST
