"""
Showtime Repository Implementation (SQLAlchemy)

The counter is only ever moved by single guarded UPDATEs, so concurrent
bookings cannot push it below zero or above the theater capacity.
"""

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import InvalidOperationError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_showtime_repo import IShowtimeRepo
from src.service.ticketing.domain.entity.showtime_entity import Showtime
from src.service.ticketing.driven_adapter.model.showtime_model import ShowtimeModel
from src.service.ticketing.driven_adapter.model.theater_model import TheaterModel
from src.service.ticketing.driven_adapter.repo.repo_helper import as_utc


showtime_table = ShowtimeModel.__table__
theater_table = TheaterModel.__table__


class ShowtimeRepoImpl(IShowtimeRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _row_to_entity(row: Mapping[str, Any]) -> Showtime:
        return Showtime(
            id=row['id'],
            movie_id=row['movie_id'],
            theater_id=row['theater_id'],
            start_time=as_utc(row['start_time']),  # type: ignore[arg-type]
            end_time=as_utc(row['end_time']),
            price=row['price'],
            available_seats=row['available_seats'],
            theater_capacity=row['capacity'],
            created_at=as_utc(row['created_at']),
            updated_at=as_utc(row['updated_at']),
        )

    @Logger.io
    async def get_by_id(self, *, showtime_id: int) -> Optional[Showtime]:
        stmt = (
            select(showtime_table, theater_table.c.capacity)
            .join(theater_table, theater_table.c.id == showtime_table.c.theater_id)
            .where(showtime_table.c.id == showtime_id)
        )
        row = (await self.session.execute(stmt)).mappings().first()
        return self._row_to_entity(row) if row else None

    async def _available_seats(self, showtime_id: int) -> Optional[int]:
        stmt = select(showtime_table.c.available_seats).where(showtime_table.c.id == showtime_id)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    @Logger.io
    async def decrement_available_seats(self, *, showtime_id: int) -> int:
        stmt = (
            update(showtime_table)
            .where(showtime_table.c.id == showtime_id, showtime_table.c.available_seats > 0)
            .values(
                available_seats=showtime_table.c.available_seats - 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = await self.session.execute(stmt)
        remaining = await self._available_seats(showtime_id)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            if remaining is None:
                raise NotFoundError('Showtime not found')
            raise InvalidOperationError('Showtime is sold out')
        return remaining  # type: ignore[return-value]

    @Logger.io
    async def increment_available_seats(self, *, showtime_id: int) -> Optional[int]:
        capacity = (
            select(theater_table.c.capacity)
            .where(theater_table.c.id == showtime_table.c.theater_id)
            .correlate(showtime_table)
            .scalar_subquery()
        )
        stmt = (
            update(showtime_table)
            .where(showtime_table.c.id == showtime_id, showtime_table.c.available_seats < capacity)
            .values(
                available_seats=showtime_table.c.available_seats + 1,
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            return None
        return await self._available_seats(showtime_id)
