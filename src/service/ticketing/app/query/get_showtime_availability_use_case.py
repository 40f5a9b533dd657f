from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ticketing.app.dto.showtime_availability import (
    SeatAvailability,
    ShowtimeAvailability,
)


class GetShowtimeAvailabilityUseCase:
    """
    Report the available-seats counter next to the ground truth.

    The counter must equal capacity minus active tickets; a mismatch is
    reported (and logged) rather than repaired here.
    """

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
    ) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, showtime_id: int) -> ShowtimeAvailability:
        async with self.uow:
            showtime = await self.uow.showtimes.get_by_id(showtime_id=showtime_id)
            if not showtime:
                raise NotFoundError('Showtime not found')
            booked = await self.uow.tickets.count_active_by_showtime(showtime_id=showtime_id)
            claims = await self.uow.seat_claims.list_by_showtime(showtime_id=showtime_id)

        now = datetime.now(timezone.utc)
        is_consistent = showtime.available_seats == showtime.theater_capacity - booked
        if not is_consistent:
            Logger.base.warning(
                f'⚠️ [AVAILABILITY] showtime={showtime_id} counter={showtime.available_seats} '
                f'expected={showtime.theater_capacity - booked}'
            )
            metrics.record_counter_drift(source='availability')

        return ShowtimeAvailability(
            showtime_id=showtime.id,
            capacity=showtime.theater_capacity,
            available_seats=showtime.available_seats,
            booked_seats=booked,
            is_consistent=is_consistent,
            seats=[
                SeatAvailability(
                    row=claim.row,
                    seat_number=claim.seat_number,
                    status=claim.effective_status(now),
                    version=claim.version,
                )
                for claim in claims
            ],
        )
