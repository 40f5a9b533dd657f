"""
Seat Ledger

Claim acquisition policy on top of ISeatClaimRepo. Every decision is made
from the result of an atomic store operation, never from a prior read
alone, so two transactions can never both walk away holding the seat.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from src.platform.exception.exceptions import (
    NotFoundError,
    SeatAlreadyBookedError,
    SeatLockedError,
    StaleWriteError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ticketing.app.interface.i_seat_claim_repo import ISeatClaimRepo
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim, SeatClaimPatch
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


class SeatLedger:
    def __init__(self, *, seat_claim_repo: ISeatClaimRepo, max_retries: int = 3) -> None:
        self.seat_claim_repo = seat_claim_repo
        self.max_retries = max(max_retries, 1)

    @Logger.io
    async def claim_for_booking(
        self, *, showtime_id: int, seat: SeatRef, customer_id: int
    ) -> SeatClaim:
        """
        Take the seat as BOOKED for customer_id.

        Raises:
            SeatAlreadyBookedError: seat is BOOKED, or retries ran out
            SeatLockedError: another customer holds an unexpired lock
        """
        for attempt in range(1, self.max_retries + 1):
            created = await self.seat_claim_repo.insert_if_absent(
                claim=SeatClaim.create_booked(
                    showtime_id=showtime_id, seat=seat, customer_id=customer_id
                )
            )
            if created:
                return created

            current = await self.seat_claim_repo.get_by_seat(showtime_id=showtime_id, seat=seat)
            if current is None:
                # The holder rolled back between our insert and our read
                continue

            current.ensure_claimable_by(customer_id=customer_id, now=datetime.now(timezone.utc))

            try:
                return await self.seat_claim_repo.update_with_version(
                    claim_id=current.id,
                    patch=SeatClaimPatch.booked(customer_id=customer_id),
                    expected_version=current.version,
                )
            except StaleWriteError:
                Logger.base.warning(
                    f'🔁 [SeatLedger] Stale claim {seat.label} showtime={showtime_id}, '
                    f'attempt {attempt}/{self.max_retries}'
                )
                metrics.record_seat_claim_retry(operation='claim')

        raise SeatAlreadyBookedError()

    @Logger.io
    async def release_claim(self, *, claim_id: UUID) -> SeatClaim:
        """Put a BOOKED seat back to AVAILABLE, retrying on concurrent writes"""
        for attempt in range(1, self.max_retries + 1):
            current = await self.seat_claim_repo.get_by_id(claim_id=claim_id)
            if current is None:
                raise NotFoundError('Seat claim not found')
            if current.status == SeatClaimStatus.AVAILABLE:
                return current

            try:
                return await self.seat_claim_repo.update_with_version(
                    claim_id=current.id,
                    patch=SeatClaimPatch.released(),
                    expected_version=current.version,
                )
            except StaleWriteError:
                Logger.base.warning(
                    f'🔁 [SeatLedger] Stale release of claim {claim_id}, '
                    f'attempt {attempt}/{self.max_retries}'
                )
                metrics.record_seat_claim_retry(operation='release')

        raise StaleWriteError('Seat claim kept changing while releasing it')

    @Logger.io
    async def acquire_lock(
        self,
        *,
        showtime_id: int,
        seat: SeatRef,
        customer_id: int,
        ttl: timedelta,
        now: Optional[datetime] = None,
    ) -> SeatClaim:
        """
        Hold the seat for customer_id until now + ttl.

        A failed conditional update is retried only while the seat looks
        free on re-read, i.e. a concurrent writer got in between; a live hold
        by someone else cannot clear within a retry.

        Raises:
            SeatAlreadyBookedError: seat is BOOKED
            SeatLockedError: another customer holds an unexpired lock, or retries ran out
        """
        now = now or datetime.now(timezone.utc)

        for attempt in range(1, self.max_retries + 1):
            # Make sure a row exists for the conditional update to match
            await self.seat_claim_repo.insert_if_absent(
                claim=SeatClaim.create_available(showtime_id=showtime_id, seat=seat)
            )

            locked = await self.seat_claim_repo.acquire_lock(
                showtime_id=showtime_id,
                seat=seat,
                customer_id=customer_id,
                expires_at=now + ttl,
                now=now,
            )
            if locked:
                return locked

            current = await self.seat_claim_repo.get_by_seat(showtime_id=showtime_id, seat=seat)
            if current and current.status == SeatClaimStatus.BOOKED:
                raise SeatAlreadyBookedError()
            if current and current.is_locked_by_other(customer_id=customer_id, now=now):
                raise SeatLockedError()

            Logger.base.warning(
                f'🔁 [SeatLedger] Lost hold race on {seat.label} showtime={showtime_id}, '
                f'attempt {attempt}/{self.max_retries}'
            )
            metrics.record_seat_claim_retry(operation='hold')

        raise SeatLockedError()

    @Logger.io
    async def release_lock(self, *, showtime_id: int, seat: SeatRef, customer_id: int) -> bool:
        return await self.seat_claim_repo.release_lock(
            showtime_id=showtime_id, seat=seat, customer_id=customer_id
        )
