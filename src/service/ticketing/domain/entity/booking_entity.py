from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.booking_status import BookingPaymentStatus, BookingStatus
from src.service.ticketing.domain.value_object.money import to_money
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


@attrs.define
class Booking:
    """Customer-facing summary of one purchase, used for booking history"""

    id: UUID
    customer_id: int
    showtime_id: int
    ticket_id: UUID
    payment_id: UUID
    seats: List[str]
    total_amount: Decimal = attrs.field(converter=to_money)
    status: BookingStatus = BookingStatus.PENDING
    payment_status: BookingPaymentStatus = BookingPaymentStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        customer_id: int,
        showtime_id: int,
        ticket_id: UUID,
        payment_id: UUID,
        seats: List[SeatRef],
        total_amount: Decimal,
    ) -> 'Booking':
        if not seats:
            raise DomainError('Booking needs at least one seat')
        now = datetime.now(timezone.utc)
        return cls(
            id=UUID(str(uuid7())),
            customer_id=customer_id,
            showtime_id=showtime_id,
            ticket_id=ticket_id,
            payment_id=payment_id,
            seats=[seat.label for seat in seats],
            total_amount=total_amount,
            status=BookingStatus.CONFIRMED,
            payment_status=BookingPaymentStatus.PAID,
            created_at=now,
            updated_at=now,
        )

    @Logger.io
    def cancel(self) -> 'Booking':
        """
        Cancel booking and mark its payment refunded

        Raises:
            DomainError: When booking is already cancelled
        """
        if self.status == BookingStatus.CANCELLED:
            raise DomainError('Booking already cancelled')

        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            payment_status=BookingPaymentStatus.REFUNDED,
            updated_at=now,
        )
