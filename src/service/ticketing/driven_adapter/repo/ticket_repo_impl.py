from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel
from src.service.ticketing.driven_adapter.repo.repo_helper import as_utc


ticket_table = TicketModel.__table__


class TicketRepoImpl(ITicketRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> Ticket:
        return Ticket(
            id=row['id'],
            showtime_id=row['showtime_id'],
            customer_id=row['customer_id'],
            seat_claim_id=row['seat_claim_id'],
            row=row['seat_row'],
            seat_number=row['seat_number'],
            price=row['price'],
            status=TicketStatus(row['status']),
            purchase_date=as_utc(row['purchase_date']),
            created_at=as_utc(row['created_at']),
            updated_at=as_utc(row['updated_at']),
        )

    @Logger.io
    async def create(self, *, ticket: Ticket) -> Ticket:
        await self.session.execute(
            insert(ticket_table).values(
                id=ticket.id,
                showtime_id=ticket.showtime_id,
                customer_id=ticket.customer_id,
                seat_claim_id=ticket.seat_claim_id,
                seat_row=ticket.row,
                seat_number=ticket.seat_number,
                price=ticket.price,
                status=ticket.status.value,
                purchase_date=ticket.purchase_date,
                created_at=ticket.created_at,
                updated_at=ticket.updated_at,
            )
        )
        return ticket

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        stmt = select(ticket_table).where(ticket_table.c.id == ticket_id)
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def find_active_by_seat(self, *, showtime_id: int, seat: SeatRef) -> Optional[Ticket]:
        stmt = select(ticket_table).where(
            ticket_table.c.showtime_id == showtime_id,
            ticket_table.c.seat_row == seat.row,
            ticket_table.c.seat_number == seat.seat_number,
            ticket_table.c.status != TicketStatus.CANCELLED.value,
        )
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def update_status(self, *, ticket: Ticket, expected_status: TicketStatus) -> bool:
        stmt = (
            update(ticket_table)
            .where(
                ticket_table.c.id == ticket.id,
                ticket_table.c.status == expected_status.value,
            )
            .values(
                status=ticket.status.value,
                updated_at=ticket.updated_at or datetime.now(timezone.utc),
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def list_by_customer(self, *, customer_id: int) -> List[Ticket]:
        stmt = (
            select(ticket_table)
            .where(ticket_table.c.customer_id == customer_id)
            .order_by(ticket_table.c.purchase_date.desc(), ticket_table.c.id.desc())
        )
        rows = (await self.session.execute(stmt)).mappings().all()
        return [self._row_to_entity(row) for row in rows]

    @Logger.io
    async def count_active_by_showtime(self, *, showtime_id: int) -> int:
        stmt = select(func.count()).select_from(ticket_table).where(
            ticket_table.c.showtime_id == showtime_id,
            ticket_table.c.status != TicketStatus.CANCELLED.value,
        )
        return (await self.session.execute(stmt)).scalar_one()
