"""
Unit tests for BookTicketUseCase

Focus:
1. Happy path creates claim, ticket, payment, booking and moves the counter, then commits
2. Fail fast: unauthenticated, unknown showtime, sold out, seat taken
3. Any failure after the claim leaves the unit of work uncommitted
"""

from typing import Any
from unittest.mock import AsyncMock

import attrs
import pytest

from src.platform.exception.exceptions import (
    AuthenticationError,
    DomainError,
    InvalidOperationError,
    NotFoundError,
    SeatAlreadyBookedError,
)
from src.service.ticketing.app.command.book_ticket_use_case import BookTicketUseCase
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim
from src.service.ticketing.domain.entity.showtime_entity import Showtime
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.booking_status import BookingPaymentStatus, BookingStatus
from src.service.ticketing.domain.enum.payment_enums import PaymentMethod, PaymentStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


def _wire_happy_path(mock_uow: Any, showtime: Showtime) -> None:
    mock_uow.showtimes.get_by_id = AsyncMock(return_value=showtime)
    mock_uow.showtimes.decrement_available_seats = AsyncMock(return_value=99)
    mock_uow.tickets.find_active_by_seat = AsyncMock(return_value=None)
    mock_uow.seat_claims.insert_if_absent = AsyncMock(side_effect=lambda *, claim: claim)
    mock_uow.tickets.create = AsyncMock(side_effect=lambda *, ticket: ticket)
    mock_uow.payments.create = AsyncMock(side_effect=lambda *, payment: payment)
    mock_uow.bookings.create = AsyncMock(side_effect=lambda *, booking: booking)


@pytest.mark.unit
class TestBookTicketUseCase:
    @pytest.mark.asyncio
    async def test_books_seat_and_commits(
        self, mock_uow: Any, upcoming_showtime: Showtime
    ) -> None:
        # Arrange
        _wire_happy_path(mock_uow, upcoming_showtime)
        use_case = BookTicketUseCase(uow=mock_uow)

        # Act
        result = await use_case.execute(
            customer_id=7, showtime_id=1, seat_number='12', row='A'
        )

        # Assert
        assert result.ticket.status == TicketStatus.CONFIRMED
        assert result.ticket.price == upcoming_showtime.price
        assert result.ticket.seat == SeatRef(row='A', seat_number='12')
        assert result.payment.ticket_id == result.ticket.id
        assert result.payment.amount == upcoming_showtime.price
        assert result.payment.method == PaymentMethod.ONLINE
        assert result.payment.status == PaymentStatus.COMPLETED
        assert result.booking.seats == ['A12']
        assert result.booking.status == BookingStatus.CONFIRMED
        assert result.booking.payment_status == BookingPaymentStatus.PAID
        mock_uow.showtimes.decrement_available_seats.assert_awaited_once_with(showtime_id=1)
        assert mock_uow.calls == ['commit', 'rollback']

    @pytest.mark.asyncio
    async def test_ticket_points_at_claim(self, mock_uow: Any, upcoming_showtime: Showtime) -> None:
        _wire_happy_path(mock_uow, upcoming_showtime)

        result = await BookTicketUseCase(uow=mock_uow).execute(
            customer_id=7, showtime_id=1, seat_number='12', row='A'
        )

        claim: SeatClaim = mock_uow.seat_claims.insert_if_absent.await_args.kwargs['claim']
        assert result.ticket.seat_claim_id == claim.id
        assert claim.owner_id == 7

    @pytest.mark.asyncio
    @pytest.mark.parametrize('customer_id', [None, 0])
    async def test_requires_customer(self, mock_uow: Any, customer_id: Any) -> None:
        with pytest.raises(AuthenticationError, match='Please sign in'):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=customer_id, showtime_id=1, seat_number='1', row='A'
            )

        assert mock_uow.calls == []
        mock_uow.showtimes.get_by_id.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_blank_seat(self, mock_uow: Any) -> None:
        with pytest.raises(DomainError):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=7, showtime_id=1, seat_number=' ', row='A'
            )

    @pytest.mark.asyncio
    async def test_unknown_showtime(self, mock_uow: Any) -> None:
        mock_uow.showtimes.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError, match='Showtime not found'):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=7, showtime_id=404, seat_number='1', row='A'
            )

        assert not mock_uow.committed

    @pytest.mark.asyncio
    async def test_sold_out_showtime(self, mock_uow: Any, upcoming_showtime: Showtime) -> None:
        mock_uow.showtimes.get_by_id = AsyncMock(
            return_value=attrs.evolve(upcoming_showtime, available_seats=0)
        )

        with pytest.raises(InvalidOperationError, match='sold out'):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=7, showtime_id=1, seat_number='1', row='A'
            )

        mock_uow.seat_claims.insert_if_absent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_active_ticket_on_seat_fails_fast(
        self, mock_uow: Any, upcoming_showtime: Showtime
    ) -> None:
        _wire_happy_path(mock_uow, upcoming_showtime)
        mock_uow.tickets.find_active_by_seat = AsyncMock(return_value=AsyncMock(spec=Ticket))

        with pytest.raises(SeatAlreadyBookedError, match='Seat is already booked'):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=7, showtime_id=1, seat_number='1', row='A'
            )

        mock_uow.seat_claims.insert_if_absent.assert_not_awaited()
        assert not mock_uow.committed

    @pytest.mark.asyncio
    async def test_existing_booked_claim_is_collision(
        self, mock_uow: Any, upcoming_showtime: Showtime
    ) -> None:
        _wire_happy_path(mock_uow, upcoming_showtime)
        mock_uow.seat_claims.insert_if_absent = AsyncMock(return_value=None)
        mock_uow.seat_claims.get_by_seat = AsyncMock(
            return_value=SeatClaim.create_booked(
                showtime_id=1, seat=SeatRef(row='A', seat_number='1'), customer_id=8
            )
        )

        with pytest.raises(SeatAlreadyBookedError):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=7, showtime_id=1, seat_number='1', row='A'
            )

        mock_uow.tickets.create.assert_not_awaited()
        mock_uow.showtimes.decrement_available_seats.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_payment_failure_is_not_committed(
        self, mock_uow: Any, upcoming_showtime: Showtime
    ) -> None:
        _wire_happy_path(mock_uow, upcoming_showtime)
        mock_uow.payments.create = AsyncMock(side_effect=RuntimeError('payment store down'))

        with pytest.raises(RuntimeError, match='payment store down'):
            await BookTicketUseCase(uow=mock_uow).execute(
                customer_id=7, showtime_id=1, seat_number='1', row='A'
            )

        assert mock_uow.calls == ['rollback']
        mock_uow.showtimes.decrement_available_seats.assert_not_awaited()
