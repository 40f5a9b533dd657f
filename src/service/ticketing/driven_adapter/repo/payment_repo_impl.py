from typing import Any, Mapping, Optional
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.enum.payment_enums import PaymentMethod, PaymentStatus
from src.service.ticketing.driven_adapter.model.payment_model import PaymentModel
from src.service.ticketing.driven_adapter.repo.repo_helper import as_utc


payment_table = PaymentModel.__table__


class PaymentRepoImpl(IPaymentRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> Payment:
        return Payment(
            id=row['id'],
            ticket_id=row['ticket_id'],
            amount=row['amount'],
            method=PaymentMethod(row['method']),
            status=PaymentStatus(row['status']),
            payment_date=as_utc(row['payment_date']),
            updated_at=as_utc(row['updated_at']),
        )

    @Logger.io
    async def create(self, *, payment: Payment) -> Payment:
        await self.session.execute(
            insert(payment_table).values(
                id=payment.id,
                ticket_id=payment.ticket_id,
                amount=payment.amount,
                method=payment.method.value,
                status=payment.status.value,
                payment_date=payment.payment_date,
                updated_at=payment.updated_at,
            )
        )
        return payment

    @Logger.io
    async def get_by_ticket_id(self, *, ticket_id: UUID) -> Optional[Payment]:
        stmt = select(payment_table).where(payment_table.c.ticket_id == ticket_id)
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def update_status(self, *, payment: Payment) -> Payment:
        result = await self.session.execute(
            update(payment_table)
            .where(payment_table.c.id == payment.id)
            .values(status=payment.status.value, updated_at=payment.updated_at)
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise NotFoundError('Payment not found')
        return payment
