"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    book_ticket_use_case,
    cancel_booking_use_case,
    hold_seat_use_case,
)
from src.service.ticketing.app.query import (
    get_booking_history_use_case,
    get_showtime_availability_use_case,
    list_user_tickets_use_case,
)
from src.service.ticketing.driving_adapter.http_controller import booking_controller
from src.service.ticketing.driving_adapter.http_controller.auth import current_customer


WIRE_MODULES: list[ModuleType] = [
    book_ticket_use_case,
    cancel_booking_use_case,
    hold_seat_use_case,
    list_user_tickets_use_case,
    get_booking_history_use_case,
    get_showtime_availability_use_case,
    booking_controller,
    current_customer,
]
