from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import InvalidOperationError
from src.service.ticketing.domain.enum.payment_enums import PaymentMethod, PaymentStatus
from src.service.ticketing.domain.value_object.money import to_money


@attrs.define
class Payment:
    """Stand-in payment record; no gateway is called"""

    id: UUID
    ticket_id: UUID
    amount: Decimal = attrs.field(converter=to_money)
    method: PaymentMethod
    status: PaymentStatus
    payment_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create_completed(
        cls, *, ticket_id: UUID, amount: Decimal, method: PaymentMethod = PaymentMethod.ONLINE
    ) -> 'Payment':
        now = datetime.now(timezone.utc)
        return cls(
            id=UUID(str(uuid7())),
            ticket_id=ticket_id,
            amount=amount,
            method=method,
            status=PaymentStatus.COMPLETED,
            payment_date=now,
            updated_at=now,
        )

    def refund(self) -> 'Payment':
        if self.status == PaymentStatus.REFUNDED:
            raise InvalidOperationError('Payment already refunded')
        if self.status != PaymentStatus.COMPLETED:
            raise InvalidOperationError(f'Cannot refund a {self.status.lower()} payment')
        return attrs.evolve(
            self, status=PaymentStatus.REFUNDED, updated_at=datetime.now(timezone.utc)
        )
