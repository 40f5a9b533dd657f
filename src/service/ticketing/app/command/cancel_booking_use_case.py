from datetime import datetime, timezone
from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    AuthenticationError,
    InvalidOperationError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ticketing.app.service.seat_ledger import SeatLedger
from src.service.ticketing.domain.cancellation_policy import CancellationPolicy
from src.service.ticketing.domain.entity.ticket_entity import Ticket


class CancelBookingUseCase:
    """
    Cancel a ticket while the showtime is more than the cutoff away.

    Flow (one unit of work):
    1. Load the ticket owned by the customer (NotFound otherwise)
    2. Check the cancellation cutoff against the showtime start
    3. Ticket -> CANCELLED (conditional, so a concurrent cancel loses)
    4. Payment -> REFUNDED, Booking record -> cancelled/refunded
    5. Increment the available-seats counter
    6. Seat claim -> AVAILABLE (versioned, retried)
    7. Commit

    The seat is freed last, so a failure before commit rolls back onto a
    seat nobody else could have taken.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        policy: Optional[CancellationPolicy] = None,
        max_retries: int = 3,
    ) -> None:
        self.uow = uow
        self.policy = policy or CancellationPolicy()
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
            policy=CancellationPolicy(cutoff_hours=config.CANCELLATION_CUTOFF_HOURS),
            max_retries=config.BOOKING_MAX_RETRIES,
        )

    @Logger.io
    @metrics.track('cancel')
    async def execute(
        self, *, customer_id: Optional[int], ticket_id: UUID, now: Optional[datetime] = None
    ) -> Ticket:
        """
        Raises:
            AuthenticationError: no customer
            NotFoundError: ticket missing or owned by someone else
            CancellationCutoffError: inside the cutoff
            InvalidOperationError: already cancelled
        """
        if not customer_id:
            raise AuthenticationError()

        async with self.uow:
            ticket = await self.uow.tickets.get_by_id(ticket_id=ticket_id)
            # Someone else's ticket looks exactly like a missing one
            if not ticket or not ticket.is_owned_by(customer_id):
                raise NotFoundError('Ticket not found')

            showtime = await self.uow.showtimes.get_by_id(showtime_id=ticket.showtime_id)
            if not showtime:
                raise NotFoundError('Showtime not found')

            self.policy.ensure_cancellable(
                start_time=showtime.start_time, now=now or datetime.now(timezone.utc)
            )

            cancelled = ticket.cancel()
            if not await self.uow.tickets.update_status(
                ticket=cancelled, expected_status=ticket.status
            ):
                raise InvalidOperationError('Ticket is already cancelled')

            payment = await self.uow.payments.get_by_ticket_id(ticket_id=ticket.id)
            if payment:
                await self.uow.payments.update_status(payment=payment.refund())

            booking = await self.uow.bookings.get_by_ticket_id(ticket_id=ticket.id)
            if booking:
                await self.uow.bookings.update_status(booking=booking.cancel())

            remaining = await self.uow.showtimes.increment_available_seats(
                showtime_id=ticket.showtime_id
            )
            if remaining is None:
                Logger.base.critical(
                    f'💥 [CANCEL] showtime={ticket.showtime_id} counter already at capacity, '
                    'needs reconciliation'
                )
                metrics.record_counter_drift(source='cancel')

            ledger = SeatLedger(seat_claim_repo=self.uow.seat_claims, max_retries=self.max_retries)
            await ledger.release_claim(claim_id=ticket.seat_claim_id)

            await self.uow.commit()

        Logger.base.info(
            f'🗑️ [CANCEL] customer={customer_id} ticket={ticket.id} seat={ticket.seat.label} '
            f'remaining={remaining}'
        )
        return cancelled
