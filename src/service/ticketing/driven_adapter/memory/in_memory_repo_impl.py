"""
In-memory repository implementations

Each write runs under the store lock for its key, checks and mutates without
awaiting in between, and pushes the compensating action onto the unit of
work's undo log. Compensations never overwrite a seat that another
transaction has taken since.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Tuple
from uuid import UUID

import anyio
import attrs

from src.platform.exception.exceptions import (
    InvalidOperationError,
    NotFoundError,
    StaleWriteError,
)
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_booking_repo import IBookingRepo
from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
from src.service.ticketing.app.interface.i_seat_claim_repo import ISeatClaimRepo
from src.service.ticketing.app.interface.i_showtime_repo import IShowtimeRepo
from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo
from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim, SeatClaimPatch
from src.service.ticketing.domain.entity.showtime_entity import Showtime
from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef
from src.service.ticketing.driven_adapter.memory.in_memory_store import InMemoryStore, SeatKey


UndoAction = Callable[[], None]


class UndoLog:
    """
    Compensations for one unit of work.

    A seat-dependent action is skipped once a seat claim could not be
    restored during the same replay: the seat now belongs to another
    transaction, so the writes that hinged on it stay as they are.
    """

    def __init__(self) -> None:
        self._actions: List[Tuple[UndoAction, bool]] = []
        self.seat_lost = False

    def record(self, action: UndoAction, *, seat_dependent: bool = False) -> None:
        self._actions.append((action, seat_dependent))

    def replay(self) -> None:
        """Run compensations newest first, then forget them"""
        actions, self._actions = self._actions, []
        for action, seat_dependent in reversed(actions):
            if seat_dependent and self.seat_lost:
                continue
            action()
        self.seat_lost = False

    def clear(self) -> None:
        self._actions = []
        self.seat_lost = False

    def __len__(self) -> int:
        return len(self._actions)


class InMemoryShowtimeRepo(IShowtimeRepo):
    def __init__(self, *, store: InMemoryStore, undo_log: UndoLog) -> None:
        self.store = store
        self.undo_log = undo_log

    def _apply_delta(self, showtime_id: int, delta: int) -> None:
        showtime = self.store.showtimes[showtime_id]
        self.store.showtimes[showtime_id] = attrs.evolve(
            showtime,
            available_seats=showtime.available_seats + delta,
            updated_at=datetime.now(timezone.utc),
        )

    @Logger.io
    async def get_by_id(self, *, showtime_id: int) -> Optional[Showtime]:
        showtime = self.store.showtimes.get(showtime_id)
        if showtime is None:
            return None
        theater = self.store.theaters.get(showtime.theater_id)
        capacity = theater.capacity if theater else showtime.theater_capacity
        return attrs.evolve(showtime, theater_capacity=capacity)

    @Logger.io
    async def decrement_available_seats(self, *, showtime_id: int) -> int:
        async with self.store.lock_for(('showtime', showtime_id)):
            showtime = self.store.showtimes.get(showtime_id)
            if showtime is None:
                raise NotFoundError('Showtime not found')
            if showtime.available_seats <= 0:
                raise InvalidOperationError('Showtime is sold out')
            self._apply_delta(showtime_id, -1)
            self.undo_log.record(lambda: self._apply_delta(showtime_id, +1))
            return self.store.showtimes[showtime_id].available_seats

    @Logger.io
    async def increment_available_seats(self, *, showtime_id: int) -> Optional[int]:
        async with self.store.lock_for(('showtime', showtime_id)):
            showtime = self.store.showtimes.get(showtime_id)
            if showtime is None:
                raise NotFoundError('Showtime not found')
            theater = self.store.theaters.get(showtime.theater_id)
            capacity = theater.capacity if theater else showtime.theater_capacity
            if showtime.available_seats >= capacity:
                return None
            self._apply_delta(showtime_id, +1)
            self.undo_log.record(lambda: self._apply_delta(showtime_id, -1), seat_dependent=True)
            return self.store.showtimes[showtime_id].available_seats


class InMemorySeatClaimRepo(ISeatClaimRepo):
    def __init__(self, *, store: InMemoryStore, undo_log: UndoLog) -> None:
        self.store = store
        self.undo_log = undo_log

    @staticmethod
    def _key(showtime_id: int, seat: SeatRef) -> SeatKey:
        return (showtime_id, seat.row, seat.seat_number)

    def _lock(self, showtime_id: int, seat: SeatRef) -> anyio.Lock:
        return self.store.lock_for(('seat', *self._key(showtime_id, seat)))

    def _current(self, showtime_id: int, seat: SeatRef) -> Optional[SeatClaim]:
        claim_id = self.store.seat_claim_index.get(self._key(showtime_id, seat))
        return self.store.seat_claims.get(claim_id) if claim_id else None

    def _write(self, previous: SeatClaim, updated: SeatClaim) -> None:
        self.store.seat_claims[updated.id] = updated

        def undo() -> None:
            current = self.store.seat_claims.get(updated.id)
            if current is None or current.version != updated.version:
                Logger.base.critical(
                    f'💥 [InMemory] Cannot restore seat claim {updated.id}, '
                    'it changed after this transaction wrote it'
                )
                self.undo_log.seat_lost = True
                return
            # Restored content gets a fresh version so stale readers still lose
            self.store.seat_claims[updated.id] = attrs.evolve(
                previous, version=current.version + 1, updated_at=datetime.now(timezone.utc)
            )

        self.undo_log.record(undo)

    @Logger.io
    async def insert_if_absent(self, *, claim: SeatClaim) -> Optional[SeatClaim]:
        key = (claim.showtime_id, claim.row, claim.seat_number)
        async with self._lock(claim.showtime_id, claim.seat):
            if key in self.store.seat_claim_index:
                return None
            self.store.seat_claims[claim.id] = claim
            self.store.seat_claim_index[key] = claim.id

        def undo() -> None:
            self.store.seat_claims.pop(claim.id, None)
            if self.store.seat_claim_index.get(key) == claim.id:
                del self.store.seat_claim_index[key]

        self.undo_log.record(undo)
        return attrs.evolve(claim)

    @Logger.io
    async def get_by_seat(self, *, showtime_id: int, seat: SeatRef) -> Optional[SeatClaim]:
        claim = self._current(showtime_id, seat)
        return attrs.evolve(claim) if claim else None

    @Logger.io
    async def get_by_id(self, *, claim_id: UUID) -> Optional[SeatClaim]:
        claim = self.store.seat_claims.get(claim_id)
        return attrs.evolve(claim) if claim else None

    @Logger.io
    async def list_by_showtime(self, *, showtime_id: int) -> List[SeatClaim]:
        claims = [c for c in self.store.seat_claims.values() if c.showtime_id == showtime_id]
        return [attrs.evolve(c) for c in sorted(claims, key=lambda c: (c.row, c.seat_number))]

    @Logger.io
    async def update_with_version(
        self, *, claim_id: UUID, patch: SeatClaimPatch, expected_version: int
    ) -> SeatClaim:
        current = self.store.seat_claims.get(claim_id)
        if current is None:
            raise StaleWriteError(f'Seat claim {claim_id} no longer exists')
        async with self._lock(current.showtime_id, current.seat):
            current = self.store.seat_claims.get(claim_id)
            if current is None or current.version != expected_version:
                raise StaleWriteError(
                    f'Seat claim {claim_id} is no longer at version {expected_version}'
                )
            updated = current.apply(patch, now=datetime.now(timezone.utc))
            self._write(current, updated)
        return attrs.evolve(updated)

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
        async with self._lock(showtime_id, seat):
            current = self._current(showtime_id, seat)
            if current is None or current.status == SeatClaimStatus.BOOKED:
                return None
            if current.is_locked_by_other(customer_id=customer_id, now=now):
                return None
            updated = current.apply(
                SeatClaimPatch(
                    status=SeatClaimStatus.RESERVED,
                    owner_id=current.owner_id,
                    locked_by=customer_id,
                    lock_expires_at=expires_at,
                ),
                now=now,
            )
            self._write(current, updated)
        return attrs.evolve(updated)

    @Logger.io
    async def release_lock(self, *, showtime_id: int, seat: SeatRef, customer_id: int) -> bool:
        async with self._lock(showtime_id, seat):
            current = self._current(showtime_id, seat)
            if (
                current is None
                or current.status != SeatClaimStatus.RESERVED
                or current.locked_by != customer_id
            ):
                return False
            self._write(
                current,
                current.apply(
                    SeatClaimPatch(status=SeatClaimStatus.AVAILABLE, owner_id=current.owner_id),
                    now=datetime.now(timezone.utc),
                ),
            )
        return True


class InMemoryTicketRepo(ITicketRepo):
    def __init__(self, *, store: InMemoryStore, undo_log: UndoLog) -> None:
        self.store = store
        self.undo_log = undo_log

    def _forget(self, ticket_id: UUID) -> None:
        self.store.tickets.pop(ticket_id, None)

    @Logger.io
    async def create(self, *, ticket: Ticket) -> Ticket:
        self.store.tickets[ticket.id] = attrs.evolve(ticket)
        self.undo_log.record(lambda: self._forget(ticket.id))
        return ticket

    @Logger.io
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        ticket = self.store.tickets.get(ticket_id)
        return attrs.evolve(ticket) if ticket else None

    @Logger.io
    async def find_active_by_seat(self, *, showtime_id: int, seat: SeatRef) -> Optional[Ticket]:
        for ticket in self.store.tickets.values():
            if (
                ticket.showtime_id == showtime_id
                and ticket.seat == seat
                and ticket.status != TicketStatus.CANCELLED
            ):
                return attrs.evolve(ticket)
        return None

    def _seat_taken_by_other(self, ticket: Ticket) -> bool:
        return any(
            other.id != ticket.id
            and other.showtime_id == ticket.showtime_id
            and other.seat == ticket.seat
            and other.is_active
            for other in self.store.tickets.values()
        )

    @Logger.io
    async def update_status(self, *, ticket: Ticket, expected_status: TicketStatus) -> bool:
        async with self.store.lock_for(('ticket', ticket.id)):
            current = self.store.tickets.get(ticket.id)
            if current is None or current.status != expected_status:
                return False
            self.store.tickets[ticket.id] = attrs.evolve(
                current, status=ticket.status, updated_at=ticket.updated_at
            )

        def undo() -> None:
            written = self.store.tickets.get(ticket.id)
            if written is None or written.status != ticket.status:
                return
            if self._seat_taken_by_other(current):
                Logger.base.critical(
                    f'💥 [InMemory] Cannot restore ticket {ticket.id}, '
                    f'seat {current.seat.label} was booked again'
                )
                return
            self.store.tickets[ticket.id] = current

        self.undo_log.record(undo, seat_dependent=True)
        return True

    @Logger.io
    async def list_by_customer(self, *, customer_id: int) -> List[Ticket]:
        tickets = [t for t in self.store.tickets.values() if t.customer_id == customer_id]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(tickets, key=lambda t: (t.purchase_date or epoch, t.id), reverse=True)

    @Logger.io
    async def count_active_by_showtime(self, *, showtime_id: int) -> int:
        return sum(
            1
            for t in self.store.tickets.values()
            if t.showtime_id == showtime_id and t.status != TicketStatus.CANCELLED
        )


class InMemoryPaymentRepo(IPaymentRepo):
    def __init__(self, *, store: InMemoryStore, undo_log: UndoLog) -> None:
        self.store = store
        self.undo_log = undo_log

    def _forget(self, payment_id: UUID) -> None:
        self.store.payments.pop(payment_id, None)

    @Logger.io
    async def create(self, *, payment: Payment) -> Payment:
        if any(p.ticket_id == payment.ticket_id for p in self.store.payments.values()):
            raise InvalidOperationError('Ticket already has a payment')
        self.store.payments[payment.id] = attrs.evolve(payment)
        self.undo_log.record(lambda: self._forget(payment.id))
        return payment

    @Logger.io
    async def get_by_ticket_id(self, *, ticket_id: UUID) -> Optional[Payment]:
        for payment in self.store.payments.values():
            if payment.ticket_id == ticket_id:
                return attrs.evolve(payment)
        return None

    @Logger.io
    async def update_status(self, *, payment: Payment) -> Payment:
        previous = self.store.payments.get(payment.id)
        if previous is None:
            raise NotFoundError('Payment not found')
        self.store.payments[payment.id] = attrs.evolve(payment)
        self.undo_log.record(
            lambda: self.store.payments.__setitem__(payment.id, previous), seat_dependent=True
        )
        return payment


class InMemoryBookingRepo(IBookingRepo):
    def __init__(self, *, store: InMemoryStore, undo_log: UndoLog) -> None:
        self.store = store
        self.undo_log = undo_log

    def _forget(self, booking_id: UUID) -> None:
        self.store.bookings.pop(booking_id, None)

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        self.store.bookings[booking.id] = attrs.evolve(booking, seats=list(booking.seats))
        self.undo_log.record(lambda: self._forget(booking.id))
        return booking

    @Logger.io
    async def get_by_ticket_id(self, *, ticket_id: UUID) -> Optional[Booking]:
        for booking in self.store.bookings.values():
            if booking.ticket_id == ticket_id:
                return attrs.evolve(booking, seats=list(booking.seats))
        return None

    @Logger.io
    async def update_status(self, *, booking: Booking) -> Booking:
        previous = self.store.bookings.get(booking.id)
        if previous is None:
            raise NotFoundError('Booking not found')
        self.store.bookings[booking.id] = attrs.evolve(booking, seats=list(booking.seats))
        self.undo_log.record(
            lambda: self.store.bookings.__setitem__(booking.id, previous), seat_dependent=True
        )
        return booking

    @Logger.io
    async def list_by_customer(self, *, customer_id: int) -> List[Booking]:
        bookings = [b for b in self.store.bookings.values() if b.customer_id == customer_id]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(bookings, key=lambda b: (b.created_at or epoch, b.id), reverse=True)
