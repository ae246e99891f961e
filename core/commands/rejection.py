"""
GuestDesk Command Layer - Rejection Model
=========================================
Structured reasons for refused guest and staff actions
(collect payment, request checkout).

Every rejection is:
- Deterministic (same input, same rejection)
- Machine-readable (code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for a refused command.

    Fields:
        code:        Machine-readable code (see ReasonCode).
        message:     Human-readable explanation.
        policy_name: Name of the check that refused the command.
        params:      Values the message was built from.
    """

    code: str
    message: str
    policy_name: str
    params: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")
        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")
        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")


class CommandRejectedError(Exception):
    """Raised by services when a command is refused by a domain check."""

    def __init__(self, reason: RejectionReason):
        self.reason = reason
        super().__init__(f"{reason.code}: {reason.message}")


class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Folio ─────────────────────────────────────────────────
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    PAYMENT_NOT_ALLOWED = "PAYMENT_NOT_ALLOWED"
    NO_OUTSTANDING_BALANCE = "NO_OUTSTANDING_BALANCE"
    OVERPAYMENT = "OVERPAYMENT"
    PAYMENT_FAILED = "PAYMENT_FAILED"

    # ── Stay lifecycle ────────────────────────────────────────
    STAY_NOT_FOUND = "STAY_NOT_FOUND"
    ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"
    CHECKOUT_FAILED = "CHECKOUT_FAILED"
