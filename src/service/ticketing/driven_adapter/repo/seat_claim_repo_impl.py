"""
Seat Claim Repository Implementation (SQLAlchemy)

- insert_if_absent: INSERT ... ON CONFLICT DO NOTHING on the seat unique key
- update_with_version / acquire_lock / release_lock: one conditional UPDATE each,
  the affected row count decides the outcome
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import StaleWriteError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_seat_claim_repo import ISeatClaimRepo
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim, SeatClaimPatch
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef
from src.service.ticketing.driven_adapter.model.seat_claim_model import SeatClaimModel
from src.service.ticketing.driven_adapter.repo.repo_helper import as_utc


seat_claim_table = SeatClaimModel.__table__

_INSERT_BY_DIALECT = {
    'postgresql': postgresql.insert,
    'sqlite': sqlite.insert,
}


class SeatClaimRepoImpl(ISeatClaimRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> SeatClaim:
        return SeatClaim(
            id=row['id'],
            showtime_id=row['showtime_id'],
            row=row['seat_row'],
            seat_number=row['seat_number'],
            status=SeatClaimStatus(row['status']),
            owner_id=row['owner_id'],
            version=row['version'],
            locked_by=row['locked_by'],
            lock_expires_at=as_utc(row['lock_expires_at']),
            created_at=as_utc(row['created_at']),
            updated_at=as_utc(row['updated_at']),
        )

    @staticmethod
    def _seat_filter(showtime_id: int, seat: SeatRef) -> Any:
        return and_(
            seat_claim_table.c.showtime_id == showtime_id,
            seat_claim_table.c.seat_row == seat.row,
            seat_claim_table.c.seat_number == seat.seat_number,
        )

    def _dialect_insert(self) -> Any:
        dialect = self.session.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise NotImplementedError(f'Seat claims need ON CONFLICT support, got {dialect}')

    @Logger.io
    async def insert_if_absent(self, *, claim: SeatClaim) -> Optional[SeatClaim]:
        insert = self._dialect_insert()
        stmt = (
            insert(seat_claim_table)
            .values(
                id=claim.id,
                showtime_id=claim.showtime_id,
                seat_row=claim.row,
                seat_number=claim.seat_number,
                status=claim.status.value,
                owner_id=claim.owner_id,
                version=claim.version,
                locked_by=claim.locked_by,
                lock_expires_at=claim.lock_expires_at,
                created_at=claim.created_at,
                updated_at=claim.updated_at,
            )
            .on_conflict_do_nothing(index_elements=['showtime_id', 'seat_row', 'seat_number'])
            .returning(seat_claim_table.c.id)
        )
        inserted_id = (await self.session.execute(stmt)).scalar_one_or_none()
        return claim if inserted_id is not None else None

    @Logger.io
    async def get_by_seat(self, *, showtime_id: int, seat: SeatRef) -> Optional[SeatClaim]:
        stmt = select(seat_claim_table).where(self._seat_filter(showtime_id, seat))
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def get_by_id(self, *, claim_id: UUID) -> Optional[SeatClaim]:
        stmt = select(seat_claim_table).where(seat_claim_table.c.id == claim_id)
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    @Logger.io
    async def list_by_showtime(self, *, showtime_id: int) -> List[SeatClaim]:
        stmt = (
            select(seat_claim_table)
            .where(seat_claim_table.c.showtime_id == showtime_id)
            .order_by(seat_claim_table.c.seat_row, seat_claim_table.c.seat_number)
        )
        rows = (await self.session.execute(stmt)).mappings().all()
        return [self._row_to_entity(row) for row in rows]

    @Logger.io
    async def update_with_version(
        self, *, claim_id: UUID, patch: SeatClaimPatch, expected_version: int
    ) -> SeatClaim:
        stmt = (
            update(seat_claim_table)
            .where(
                seat_claim_table.c.id == claim_id,
                seat_claim_table.c.version == expected_version,
            )
            .values(
                status=patch.status.value,
                owner_id=patch.owner_id,
                locked_by=patch.locked_by,
                lock_expires_at=patch.lock_expires_at,
                version=seat_claim_table.c.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise StaleWriteError(f'Seat claim {claim_id} is no longer at version {expected_version}')

        updated = await self.get_by_id(claim_id=claim_id)
        assert updated is not None, 'Updated seat claim must be readable in the same transaction'
        return updated

    @Logger.io
    async def acquire_lock(
        self,
        *,
        showtime_id: int,
        seat: SeatRef,
        customer_id: int,
        expires_at: datetime,
        now: datetime,
    ) -> Optional[SeatClaim]:
        stmt = (
            update(seat_claim_table)
            .where(
                self._seat_filter(showtime_id, seat),
                seat_claim_table.c.status != SeatClaimStatus.BOOKED.value,
                or_(
                    seat_claim_table.c.locked_by.is_(None),
                    seat_claim_table.c.lock_expires_at.is_(None),
                    seat_claim_table.c.lock_expires_at <= now,
                    seat_claim_table.c.locked_by == customer_id,
                ),
            )
            .values(
                status=SeatClaimStatus.RESERVED.value,
                locked_by=customer_id,
                lock_expires_at=expires_at,
                version=seat_claim_table.c.version + 1,
                updated_at=now,
            )
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self.get_by_seat(showtime_id=showtime_id, seat=seat)

    @Logger.io
    async def release_lock(self, *, showtime_id: int, seat: SeatRef, customer_id: int) -> bool:
        stmt = (
            update(seat_claim_table)
            .where(
                self._seat_filter(showtime_id, seat),
                seat_claim_table.c.status == SeatClaimStatus.RESERVED.value,
                seat_claim_table.c.locked_by == customer_id,
            )
            .values(
                status=SeatClaimStatus.AVAILABLE.value,
                locked_by=None,
                lock_expires_at=None,
                version=seat_claim_table.c.version + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1  # type: ignore[attr-defined]
