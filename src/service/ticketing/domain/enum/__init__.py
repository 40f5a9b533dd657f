"""Booking Domain Enums"""

from src.service.ticketing.domain.enum.booking_status import BookingPaymentStatus, BookingStatus
from src.service.ticketing.domain.enum.payment_enums import PaymentMethod, PaymentStatus
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus

__all__ = [
    'BookingPaymentStatus',
    'BookingStatus',
    'PaymentMethod',
    'PaymentStatus',
    'SeatClaimStatus',
    'TicketStatus',
]
