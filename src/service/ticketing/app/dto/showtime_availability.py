"""Showtime availability DTOs."""

from typing import List

import attrs

from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus


@attrs.define(frozen=True)
class SeatAvailability:
    row: str
    seat_number: str
    status: SeatClaimStatus
    version: int


@attrs.define(frozen=True)
class ShowtimeAvailability:
    """
    Counter vs ground truth for one showtime.

    is_consistent is False when available_seats drifted from
    capacity minus active tickets.
    """

    showtime_id: int
    capacity: int
    available_seats: int
    booked_seats: int
    is_consistent: bool
    seats: List[SeatAvailability] = attrs.field(factory=list)
