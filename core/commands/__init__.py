"""
GuestDesk Command Layer
=======================
Refused commands are first-class: every refusal carries a structured
RejectionReason that survives to the HTTP error envelope.
"""

from core.commands.rejection import (
    CommandRejectedError,
    ReasonCode,
    RejectionReason,
)

__all__ = [
    "CommandRejectedError",
    "ReasonCode",
    "RejectionReason",
]
