from datetime import timedelta
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    AuthenticationError,
    DomainError,
    NotFoundError,
    SeatAlreadyBookedError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ticketing.app.service.seat_ledger import SeatLedger
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


class HoldSeatUseCase:
    """Put a time-limited hold on a seat; the holder may refresh it"""

    def __init__(
        self, *, uow: AbstractUnitOfWork, default_ttl: timedelta, max_retries: int = 3
    ) -> None:
        self.uow = uow
        self.default_ttl = default_ttl
        self.max_retries = max_retries

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(
            uow=uow,
            default_ttl=timedelta(minutes=config.SEAT_LOCK_TTL_MINUTES),
            max_retries=config.BOOKING_MAX_RETRIES,
        )

    @Logger.io
    @metrics.track('hold')
    async def execute(
        self,
        *,
        customer_id: Optional[int],
        showtime_id: int,
        seat_number: str,
        row: str,
        ttl: Optional[timedelta] = None,
    ) -> SeatClaim:
        if not customer_id:
            raise AuthenticationError()
        seat = SeatRef.create(row=row, seat_number=seat_number)
        ttl = ttl if ttl is not None else self.default_ttl
        if ttl <= timedelta(0):
            raise DomainError('Hold duration must be positive')

        async with self.uow:
            if not await self.uow.showtimes.get_by_id(showtime_id=showtime_id):
                raise NotFoundError('Showtime not found')
            if await self.uow.tickets.find_active_by_seat(showtime_id=showtime_id, seat=seat):
                raise SeatAlreadyBookedError()

            ledger = SeatLedger(seat_claim_repo=self.uow.seat_claims, max_retries=self.max_retries)
            claim = await ledger.acquire_lock(
                showtime_id=showtime_id, seat=seat, customer_id=customer_id, ttl=ttl
            )
            await self.uow.commit()

        Logger.base.info(
            f'🔒 [HOLD] customer={customer_id} showtime={showtime_id} seat={seat.label} '
            f'until {claim.lock_expires_at}'
        )
        return claim


class ReleaseSeatHoldUseCase:
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
    @metrics.track('release_hold')
    async def execute(
        self, *, customer_id: Optional[int], showtime_id: int, seat_number: str, row: str
    ) -> bool:
        """Returns False when the caller held no lock on the seat"""
        if not customer_id:
            raise AuthenticationError()
        seat = SeatRef.create(row=row, seat_number=seat_number)

        async with self.uow:
            released = await SeatLedger(seat_claim_repo=self.uow.seat_claims).release_lock(
                showtime_id=showtime_id, seat=seat, customer_id=customer_id
            )
            await self.uow.commit()

        if released:
            Logger.base.info(
                f'🔓 [HOLD] customer={customer_id} released showtime={showtime_id} seat={seat.label}'
            )
        return released
