"""
GuestDesk Projections - Folio Financial Summary
===============================================
Aggregates a booking's ledger entries into the totals shown on the
folio screen, and decides whether "Collect Payment" is offered.

- room charges     = ROOM_CHARGE amounts
- food charges     = FOOD_CHARGE amounts
- total charges    = every kind except PAYMENT and REFUND
- total payments   = PAYMENT and REFUND amounts (absolute)
- outstanding      = max(0, total charges - total payments)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from core.primitives.money import ZERO
from core.primitives.stay import EntryKind, LedgerEntry


@dataclass(frozen=True)
class FinancialSummary:
    room_charges: Decimal = ZERO
    food_charges: Decimal = ZERO
    total_charges: Decimal = ZERO
    total_payments: Decimal = ZERO

    @property
    def outstanding(self) -> Decimal:
        return max(ZERO, self.total_charges - self.total_payments)

    @property
    def can_collect_payment(self) -> bool:
        return self.outstanding > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_charges": str(self.room_charges),
            "food_charges": str(self.food_charges),
            "total_charges": str(self.total_charges),
            "total_payments": str(self.total_payments),
            "outstanding": str(self.outstanding),
            "can_collect_payment": self.can_collect_payment,
        }


def summarize(ledger: Optional[Iterable[LedgerEntry]]) -> FinancialSummary:
    """Never raises; an empty or missing ledger yields all zeros."""
    room = food = charges = payments = ZERO
    for entry in ledger or ():
        if entry.is_settlement:
            payments += abs(entry.amount)
            continue
        charges += entry.amount
        if entry.kind is EntryKind.ROOM_CHARGE:
            room += entry.amount
        elif entry.kind is EntryKind.FOOD_CHARGE:
            food += entry.amount
    return FinancialSummary(
        room_charges=room,
        food_charges=food,
        total_charges=charges,
        total_payments=payments,
    )
