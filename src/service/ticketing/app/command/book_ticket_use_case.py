from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    AuthenticationError,
    NotFoundError,
    SeatAlreadyBookedError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.ticketing.app.dto.booking_result import BookingResult
from src.service.ticketing.app.service.seat_ledger import SeatLedger
from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


class BookTicketUseCase:
    """
    Book one seat for a showtime.

    Flow (one unit of work, all or nothing):
    1. Validate customer and seat
    2. Load showtime (NotFound / sold out)
    3. Reject early if the seat already has an active ticket
    4. Claim the seat through the SeatLedger (atomic, the real guard)
    5. Create Ticket, Payment and Booking record
    6. Decrement the available-seats counter
    7. Commit

    Any failure before commit leaves the store as it was.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, max_retries: int = 3) -> None:
        self.uow = uow
        self.max_retries = max_retries

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        config: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, max_retries=config.BOOKING_MAX_RETRIES)

    @Logger.io
    @metrics.track('book')
    async def execute(
        self,
        *,
        customer_id: Optional[int],
        showtime_id: int,
        seat_number: str,
        row: str,
    ) -> BookingResult:
        """
        Raises:
            AuthenticationError: no customer
            DomainError: malformed seat
            NotFoundError: showtime does not exist
            SeatAlreadyBookedError: seat taken (SeatLockedError when held by someone else)
            InvalidOperationError: showtime sold out
        """
        if not customer_id:
            raise AuthenticationError()
        seat = SeatRef.create(row=row, seat_number=seat_number)

        async with self.uow:
            showtime = await self.uow.showtimes.get_by_id(showtime_id=showtime_id)
            if not showtime:
                raise NotFoundError('Showtime not found')
            showtime.ensure_bookable()

            if await self.uow.tickets.find_active_by_seat(showtime_id=showtime_id, seat=seat):
                raise SeatAlreadyBookedError()

            ledger = SeatLedger(seat_claim_repo=self.uow.seat_claims, max_retries=self.max_retries)
            claim = await ledger.claim_for_booking(
                showtime_id=showtime_id, seat=seat, customer_id=customer_id
            )

            ticket = await self.uow.tickets.create(
                ticket=Ticket.create(
                    showtime_id=showtime_id,
                    customer_id=customer_id,
                    seat_claim_id=claim.id,
                    seat=seat,
                    price=showtime.price,
                )
            )
            payment = await self.uow.payments.create(
                payment=Payment.create_completed(ticket_id=ticket.id, amount=ticket.price)
            )
            booking = await self.uow.bookings.create(
                booking=Booking.create(
                    customer_id=customer_id,
                    showtime_id=showtime_id,
                    ticket_id=ticket.id,
                    payment_id=payment.id,
                    seats=[seat],
                    total_amount=ticket.price,
                )
            )
            remaining = await self.uow.showtimes.decrement_available_seats(showtime_id=showtime_id)

            await self.uow.commit()

        Logger.base.info(
            f'🎟️ [BOOK] customer={customer_id} showtime={showtime_id} seat={seat.label} '
            f'ticket={ticket.id} remaining={remaining}'
        )
        return BookingResult(ticket=ticket, payment=payment, booking=booking)
