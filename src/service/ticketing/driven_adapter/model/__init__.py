"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.booking_model import BookingModel
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.ticketing.driven_adapter.model.seat_claim_model import SeatClaimModel
from src.service.ticketing.driven_adapter.model.showtime_model import ShowtimeModel
from src.service.ticketing.driven_adapter.model.theater_model import TheaterModel
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel

__all__ = [
    'BookingModel',
    'PaymentModel',
    'SeatClaimModel',
    'ShowtimeModel',
    'TheaterModel',
    'TicketModel',
]
