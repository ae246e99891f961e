"""
GuestDesk HTTP API - Public API
===============================
"""

from core.http_api.contracts import (
    ArrivalsReadRequest,
    CollectPaymentHttpRequest,
    FolioReadRequest,
    GuestStayReadRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    RequestCheckoutHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    error_response,
    map_rejection_reason,
    rejection_response,
    status_for,
    success_response,
)
from core.http_api.handlers import (
    get_arrivals_dashboard,
    get_folio_view,
    get_guest_stay,
    post_collect_payment,
    post_request_checkout,
)

__all__ = [
    "FolioReadRequest",
    "CollectPaymentHttpRequest",
    "ArrivalsReadRequest",
    "GuestStayReadRequest",
    "RequestCheckoutHttpRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "HttpApiDependencies",
    "error_response",
    "success_response",
    "map_rejection_reason",
    "rejection_response",
    "status_for",
    "get_folio_view",
    "post_collect_payment",
    "get_arrivals_dashboard",
    "get_guest_stay",
    "post_request_checkout",
]
