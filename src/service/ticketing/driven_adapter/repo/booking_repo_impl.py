from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_booking_repo import IBookingRepo
from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.enum.booking_status import BookingPaymentStatus, BookingStatus
from src.service.ticketing.driven_adapter.model.booking_model import BookingModel
from src.service.ticketing.driven_adapter.repo.repo_helper import as_utc


booking_table = BookingModel.__table__


class BookingRepoImpl(IBookingRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> Booking:
        return Booking(
            id=row['id'],
            customer_id=row['customer_id'],
            showtime_id=row['showtime_id'],
            ticket_id=row['ticket_id'],
            payment_id=row['payment_id'],
            seats=list(row['seats'] or []),
            total_amount=row['total_amount'],
            status=BookingStatus(row['status']),
            payment_status=BookingPaymentStatus(row['payment_status']),
            created_at=as_utc(row['created_at']),
            updated_at=as_utc(row['updated_at']),
        )

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        await self.session.execute(
            insert(booking_table).values(
                id=booking.id,
                customer_id=booking.customer_id,
                showtime_id=booking.showtime_id,
                ticket_id=booking.ticket_id,
                payment_id=booking.payment_id,
                seats=booking.seats,
                total_amount=booking.total_amount,
                status=booking.status.value,
                payment_status=booking.payment_status.value,
                created_at=booking.created_at,
                updated_at=booking.updated_at,
            )
        )
        return booking

    @Logger.io
    async def get_by_ticket_id(self, *, ticket_id: UUID) -> Optional[Booking]:
        stmt = select(booking_table).where(booking_table.c.ticket_id == ticket_id)
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def update_status(self, *, booking: Booking) -> Booking:
        result = await self.session.execute(
            update(booking_table)
            .where(booking_table.c.id == booking.id)
            .values(
                status=booking.status.value,
                payment_status=booking.payment_status.value,
                updated_at=booking.updated_at,
            )
        )
        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise NotFoundError('Booking not found')
        return booking

    @Logger.io
    async def list_by_customer(self, *, customer_id: int) -> List[Booking]:
        stmt = (
            select(booking_table)
            .where(booking_table.c.customer_id == customer_id)
            .order_by(booking_table.c.created_at.desc(), booking_table.c.id.desc())
        )
        rows = (await self.session.execute(stmt)).mappings().all()
        return [self._row_to_entity(row) for row in rows]
