from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import InvalidOperationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.money import to_money
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


@attrs.define
class Ticket:
    id: UUID
    showtime_id: int
    customer_id: int
    seat_claim_id: UUID
    row: str
    seat_number: str
    price: Decimal = attrs.field(converter=to_money)
    status: TicketStatus
    purchase_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        showtime_id: int,
        customer_id: int,
        seat_claim_id: UUID,
        seat: SeatRef,
        price: Decimal,
    ) -> 'Ticket':
        now = datetime.now(timezone.utc)
        return cls(
            id=UUID(str(uuid7())),
            showtime_id=showtime_id,
            customer_id=customer_id,
            seat_claim_id=seat_claim_id,
            row=seat.row,
            seat_number=seat.seat_number,
            price=price,
            status=TicketStatus.CONFIRMED,
            purchase_date=now,
            created_at=now,
            updated_at=now,
        )

    @property
    def seat(self) -> SeatRef:
        return SeatRef(row=self.row, seat_number=self.seat_number)

    @property
    def is_active(self) -> bool:
        return self.status != TicketStatus.CANCELLED

    def is_owned_by(self, customer_id: int) -> bool:
        return self.customer_id == customer_id

    @Logger.io
    def cancel(self) -> 'Ticket':
        if self.status == TicketStatus.CANCELLED:
            raise InvalidOperationError('Ticket is already cancelled')
        now = datetime.now(timezone.utc)
        return attrs.evolve(self, status=TicketStatus.CANCELLED, updated_at=now)
