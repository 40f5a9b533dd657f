"""Booking DTOs returned by the booking use cases."""

from datetime import datetime
from typing import Optional

import attrs

from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.payment_enums import PaymentStatus


@attrs.define(frozen=True)
class BookingResult:
    """Everything a successful bookTicket produced, committed together"""

    ticket: Ticket
    payment: Payment
    booking: Booking


@attrs.define(frozen=True)
class TicketView:
    """
    A ticket joined with its showtime and payment, for "my tickets" listings.

    showtime_start is None when the showtime row no longer exists.
    """

    ticket: Ticket
    showtime_start: Optional[datetime]
    showtime_end: Optional[datetime]
    movie_id: Optional[int]
    theater_id: Optional[int]
    payment_status: Optional[PaymentStatus]
