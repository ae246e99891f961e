"""
GuestDesk Django HTTP adapter.
Thin framework glue over core/http_api handlers.
"""

from adapters.django_api.wiring import (
    DEV_BOOKING_ID,
    DEV_GUEST_ID,
    DEV_HOTEL_ID,
    DEV_STAFF_ID,
    build_dependencies,
)

__all__ = [
    "DEV_HOTEL_ID",
    "DEV_BOOKING_ID",
    "DEV_GUEST_ID",
    "DEV_STAFF_ID",
    "build_dependencies",
]
