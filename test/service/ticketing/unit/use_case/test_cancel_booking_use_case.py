"""
Unit tests for CancelBookingUseCase

Focus:
1. Cancellation cutoff is strict: exactly 2 hours before start is already too late
2. Ownership: another customer's ticket is reported as not found
3. A lost race on the ticket status update aborts without commit
4. The seat claim is released only after every other write succeeded
"""

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import (
    AuthenticationError,
    CancellationCutoffError,
    InvalidOperationError,
    NotFoundError,
)
from src.service.ticketing.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.ticketing.domain.cancellation_policy import CancellationPolicy
from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim, SeatClaimPatch
from src.service.ticketing.domain.entity.showtime_entity import Showtime
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.booking_status import BookingPaymentStatus, BookingStatus
from src.service.ticketing.domain.enum.payment_enums import PaymentStatus
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


START = datetime(2030, 6, 1, 20, 0, tzinfo=timezone.utc)
CUSTOMER_ID = 7


@pytest.fixture
def claim() -> SeatClaim:
    return SeatClaim.create_booked(
        showtime_id=1, seat=SeatRef(row='B', seat_number='4'), customer_id=CUSTOMER_ID
    )


@pytest.fixture
def ticket(claim: SeatClaim) -> Ticket:
    return Ticket.create(
        showtime_id=1,
        customer_id=CUSTOMER_ID,
        seat_claim_id=claim.id,
        seat=claim.seat,
        price=1200,
    )


@pytest.fixture
def wired_uow(
    mock_uow: Any, upcoming_showtime: Showtime, claim: SeatClaim, ticket: Ticket
) -> Any:
    payment = Payment.create_completed(ticket_id=ticket.id, amount=ticket.price)
    booking = Booking.create(
        customer_id=CUSTOMER_ID,
        showtime_id=1,
        ticket_id=ticket.id,
        payment_id=payment.id,
        seats=[ticket.seat],
        total_amount=ticket.price,
    )

    def released(*, claim_id: Any, patch: SeatClaimPatch, expected_version: int) -> SeatClaim:
        return claim.apply(patch, now=datetime.now(timezone.utc))

    mock_uow.tickets.get_by_id = AsyncMock(return_value=ticket)
    mock_uow.tickets.update_status = AsyncMock(return_value=True)
    mock_uow.showtimes.get_by_id = AsyncMock(
        return_value=attrs.evolve(upcoming_showtime, start_time=START, available_seats=99)
    )
    mock_uow.showtimes.increment_available_seats = AsyncMock(return_value=100)
    mock_uow.seat_claims.get_by_id = AsyncMock(return_value=claim)
    mock_uow.seat_claims.update_with_version = AsyncMock(side_effect=released)
    mock_uow.payments.get_by_ticket_id = AsyncMock(return_value=payment)
    mock_uow.bookings.get_by_ticket_id = AsyncMock(return_value=booking)
    return mock_uow


@pytest.mark.unit
class TestCancelBookingUseCase:
    @pytest.mark.asyncio
    async def test_cancels_and_refunds(self, wired_uow: Any, ticket: Ticket) -> None:
        # Arrange
        use_case = CancelBookingUseCase(uow=wired_uow)

        # Act
        cancelled = await use_case.execute(
            customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
        )

        # Assert
        assert cancelled.status == TicketStatus.CANCELLED
        update_kwargs = wired_uow.tickets.update_status.await_args.kwargs
        assert update_kwargs['expected_status'] == TicketStatus.CONFIRMED
        assert update_kwargs['ticket'].status == TicketStatus.CANCELLED

        patch = wired_uow.seat_claims.update_with_version.await_args.kwargs['patch']
        assert patch.status == SeatClaimStatus.AVAILABLE
        assert patch.owner_id is None

        refunded = wired_uow.payments.update_status.await_args.kwargs['payment']
        assert refunded.status == PaymentStatus.REFUNDED
        record = wired_uow.bookings.update_status.await_args.kwargs['booking']
        assert record.status == BookingStatus.CANCELLED
        assert record.payment_status == BookingPaymentStatus.REFUNDED

        wired_uow.showtimes.increment_available_seats.assert_awaited_once_with(showtime_id=1)
        assert wired_uow.calls == ['commit', 'rollback']

    @pytest.mark.asyncio
    async def test_one_minute_before_cutoff_is_allowed(self, wired_uow: Any, ticket: Ticket) -> None:
        cancelled = await CancelBookingUseCase(uow=wired_uow).execute(
            customer_id=CUSTOMER_ID,
            ticket_id=ticket.id,
            now=START - timedelta(hours=2, minutes=1),
        )

        assert cancelled.status == TicketStatus.CANCELLED
        assert wired_uow.committed

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'before_start',
        [timedelta(hours=2), timedelta(hours=1, minutes=59), timedelta(0), -timedelta(hours=1)],
    )
    async def test_at_or_inside_cutoff_is_rejected(
        self, wired_uow: Any, ticket: Ticket, before_start: timedelta
    ) -> None:
        with pytest.raises(CancellationCutoffError, match='less than 2 hours before showtime'):
            await CancelBookingUseCase(uow=wired_uow).execute(
                customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - before_start
            )

        wired_uow.tickets.update_status.assert_not_awaited()
        wired_uow.showtimes.increment_available_seats.assert_not_awaited()
        assert not wired_uow.committed

    @pytest.mark.asyncio
    async def test_custom_cutoff(self, wired_uow: Any, ticket: Ticket) -> None:
        use_case = CancelBookingUseCase(uow=wired_uow, policy=CancellationPolicy(cutoff_hours=6))

        with pytest.raises(InvalidOperationError, match='less than 6 hours'):
            await use_case.execute(
                customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
            )

    @pytest.mark.asyncio
    async def test_requires_customer(self, wired_uow: Any, ticket: Ticket) -> None:
        with pytest.raises(AuthenticationError):
            await CancelBookingUseCase(uow=wired_uow).execute(customer_id=None, ticket_id=ticket.id)

        wired_uow.tickets.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_ticket(self, wired_uow: Any, ticket: Ticket) -> None:
        wired_uow.tickets.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError, match='Ticket not found'):
            await CancelBookingUseCase(uow=wired_uow).execute(
                customer_id=CUSTOMER_ID, ticket_id=ticket.id
            )

    @pytest.mark.asyncio
    async def test_other_customers_ticket_looks_missing(self, wired_uow: Any, ticket: Ticket) -> None:
        with pytest.raises(NotFoundError, match='Ticket not found'):
            await CancelBookingUseCase(uow=wired_uow).execute(customer_id=8, ticket_id=ticket.id)

        wired_uow.tickets.update_status.assert_not_awaited()
        assert not wired_uow.committed

    @pytest.mark.asyncio
    async def test_already_cancelled_ticket(self, wired_uow: Any, ticket: Ticket) -> None:
        wired_uow.tickets.get_by_id = AsyncMock(
            return_value=attrs.evolve(ticket, status=TicketStatus.CANCELLED)
        )

        with pytest.raises(InvalidOperationError, match='already cancelled'):
            await CancelBookingUseCase(uow=wired_uow).execute(
                customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
            )

        wired_uow.seat_claims.update_with_version.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_race_on_status_update(self, wired_uow: Any, ticket: Ticket) -> None:
        wired_uow.tickets.update_status = AsyncMock(return_value=False)

        with pytest.raises(InvalidOperationError, match='already cancelled'):
            await CancelBookingUseCase(uow=wired_uow).execute(
                customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
            )

        wired_uow.seat_claims.update_with_version.assert_not_awaited()
        wired_uow.showtimes.increment_available_seats.assert_not_awaited()
        assert wired_uow.calls == ['rollback']

    @pytest.mark.asyncio
    async def test_counter_at_capacity_still_commits(self, wired_uow: Any, ticket: Ticket) -> None:
        wired_uow.showtimes.increment_available_seats = AsyncMock(return_value=None)

        await CancelBookingUseCase(uow=wired_uow).execute(
            customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
        )

        assert wired_uow.committed

    @pytest.mark.asyncio
    async def test_missing_payment_and_booking_record(self, wired_uow: Any, ticket: Ticket) -> None:
        wired_uow.payments.get_by_ticket_id = AsyncMock(return_value=None)
        wired_uow.bookings.get_by_ticket_id = AsyncMock(return_value=None)

        await CancelBookingUseCase(uow=wired_uow).execute(
            customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
        )

        wired_uow.payments.update_status.assert_not_awaited()
        wired_uow.bookings.update_status.assert_not_awaited()
        assert wired_uow.committed

    @pytest.mark.asyncio
    async def test_seat_is_released_after_every_other_write(
        self, wired_uow: Any, ticket: Ticket
    ) -> None:
        # Arrange
        order: list[str] = []
        for repo, method, name in [
            (wired_uow.payments, 'update_status', 'refund'),
            (wired_uow.bookings, 'update_status', 'booking'),
            (wired_uow.showtimes, 'increment_available_seats', 'counter'),
        ]:
            getattr(repo, method).side_effect = lambda *_, _name=name, **__: order.append(_name)
        release = wired_uow.seat_claims.update_with_version.side_effect

        def release_and_record(**kwargs: Any) -> SeatClaim:
            order.append('release')
            return release(**kwargs)

        wired_uow.seat_claims.update_with_version.side_effect = release_and_record

        # Act
        await CancelBookingUseCase(uow=wired_uow).execute(
            customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
        )

        # Assert
        assert order == ['refund', 'booking', 'counter', 'release']

    @pytest.mark.asyncio
    async def test_failed_refund_keeps_the_seat(self, wired_uow: Any, ticket: Ticket) -> None:
        wired_uow.payments.update_status = AsyncMock(side_effect=RuntimeError('payment store down'))

        with pytest.raises(RuntimeError):
            await CancelBookingUseCase(uow=wired_uow).execute(
                customer_id=CUSTOMER_ID, ticket_id=ticket.id, now=START - timedelta(hours=5)
            )

        wired_uow.seat_claims.update_with_version.assert_not_awaited()
        wired_uow.showtimes.increment_available_seats.assert_not_awaited()
        assert wired_uow.calls == ['rollback']
