"""
GuestDesk HTTP API - Dependencies
=================================
Injected services and clock for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.time import Clock
from engines.hotel_folio.services import FolioService
from engines.hotel_reservation.services import ArrivalsService, StayService


@dataclass(frozen=True)
class HttpApiDependencies:
    folio_service: FolioService
    stay_service: StayService
    arrivals_service: ArrivalsService
    clock: Clock
