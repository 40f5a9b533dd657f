"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_booking_repo import IBookingRepo
from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.ticketing.app.interface.i_seat_claim_repo import ISeatClaimRepo
from src.service.ticketing.app.interface.i_showtime_repo import IShowtimeRepo
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo

__all__ = [
    'IBookingRepo',
    'IPaymentRepo',
    'ISeatClaimRepo',
    'IShowtimeRepo',
    'ITicketRepo',
]
