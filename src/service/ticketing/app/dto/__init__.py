"""Application layer DTOs"""

from src.service.ticketing.app.dto.booking_result import BookingResult, TicketView
from src.service.ticketing.app.dto.showtime_availability import (
    SeatAvailability,
    ShowtimeAvailability,
)

__all__ = [
    'BookingResult',
    'SeatAvailability',
    'ShowtimeAvailability',
    'TicketView',
]
