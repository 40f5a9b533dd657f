"""
In-memory store

Process-local tables for single-process deployments and tests. Every
mutation goes through the in-memory repos, which take the per-key lock and
record an undo action with the unit of work.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Hashable, Optional, Tuple
from uuid import UUID

import anyio
import attrs

from src.service.ticketing.domain.entity.booking_entity import Booking
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim
from src.service.ticketing.domain.entity.showtime_entity import Showtime, Theater
from src.service.ticketing.domain.entity.ticket_entity import Ticket


SeatKey = Tuple[int, str, str]


@attrs.define
class InMemoryStore:
    theaters: Dict[int, Theater] = attrs.field(factory=dict)
    showtimes: Dict[int, Showtime] = attrs.field(factory=dict)
    seat_claims: Dict[UUID, SeatClaim] = attrs.field(factory=dict)
    # unique index on (showtime_id, row, seat_number)
    seat_claim_index: Dict[SeatKey, UUID] = attrs.field(factory=dict)
    tickets: Dict[UUID, Ticket] = attrs.field(factory=dict)
    payments: Dict[UUID, Payment] = attrs.field(factory=dict)
    bookings: Dict[UUID, Booking] = attrs.field(factory=dict)
    _locks: Dict[Hashable, anyio.Lock] = attrs.field(factory=dict)

    def lock_for(self, key: Hashable) -> anyio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = anyio.Lock()
        return lock

    def add_theater(self, *, name: str, capacity: int, theater_id: Optional[int] = None) -> Theater:
        theater_id = theater_id or max(self.theaters, default=0) + 1
        theater = Theater(id=theater_id, name=name, capacity=capacity)
        self.theaters[theater_id] = theater
        return theater

    def add_showtime(
        self,
        *,
        theater_id: int,
        start_time: datetime,
        price: Decimal,
        movie_id: int = 1,
        available_seats: Optional[int] = None,
        showtime_id: Optional[int] = None,
    ) -> Showtime:
        """Seed a showtime; the counter starts at the theater capacity unless given"""
        theater = self.theaters[theater_id]
        showtime_id = showtime_id or max(self.showtimes, default=0) + 1
        now = datetime.now(timezone.utc)
        showtime = Showtime(
            id=showtime_id,
            movie_id=movie_id,
            theater_id=theater_id,
            start_time=start_time,
            end_time=start_time + timedelta(hours=2),
            price=price,
            available_seats=theater.capacity if available_seats is None else available_seats,
            theater_capacity=theater.capacity,
            created_at=now,
            updated_at=now,
        )
        self.showtimes[showtime_id] = showtime
        return showtime
