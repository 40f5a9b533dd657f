"""Booking Domain Value Objects"""

from src.service.ticketing.domain.value_object.money import to_money
from src.service.ticketing.domain.value_object.seat_ref import SeatRef

__all__ = ['SeatRef', 'to_money']
