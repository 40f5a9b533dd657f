from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import SeatAlreadyBookedError, SeatLockedError
from src.service.ticketing.domain.enum.seat_claim_status import SeatClaimStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


@attrs.frozen
class SeatClaimPatch:
    """The mutable part of a SeatClaim, written in one versioned update"""

    status: SeatClaimStatus
    owner_id: Optional[int] = None
    locked_by: Optional[int] = None
    lock_expires_at: Optional[datetime] = None

    @classmethod
    def booked(cls, *, customer_id: int) -> 'SeatClaimPatch':
        return cls(status=SeatClaimStatus.BOOKED, owner_id=customer_id)

    @classmethod
    def released(cls) -> 'SeatClaimPatch':
        return cls(status=SeatClaimStatus.AVAILABLE)


@attrs.define
class SeatClaim:
    """
    The single authoritative record of who holds a seat for a showtime.

    At most one claim exists per (showtime_id, row, seat_number); it is
    reused across bookings and cancellations, `version` grows on every write.
    """

    id: UUID
    showtime_id: int
    row: str
    seat_number: str
    status: SeatClaimStatus
    owner_id: Optional[int] = None
    version: int = 0
    locked_by: Optional[int] = None
    lock_expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def _new(
        cls, *, showtime_id: int, seat: SeatRef, status: SeatClaimStatus, owner_id: Optional[int]
    ) -> 'SeatClaim':
        now = datetime.now(timezone.utc)
        return cls(
            id=UUID(str(uuid7())),
            showtime_id=showtime_id,
            row=seat.row,
            seat_number=seat.seat_number,
            status=status,
            owner_id=owner_id,
            version=0,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def create_booked(cls, *, showtime_id: int, seat: SeatRef, customer_id: int) -> 'SeatClaim':
        return cls._new(
            showtime_id=showtime_id,
            seat=seat,
            status=SeatClaimStatus.BOOKED,
            owner_id=customer_id,
        )

    @classmethod
    def create_available(cls, *, showtime_id: int, seat: SeatRef) -> 'SeatClaim':
        return cls._new(
            showtime_id=showtime_id, seat=seat, status=SeatClaimStatus.AVAILABLE, owner_id=None
        )

    @property
    def seat(self) -> SeatRef:
        return SeatRef(row=self.row, seat_number=self.seat_number)

    def is_lock_active(self, now: datetime) -> bool:
        return (
            self.status == SeatClaimStatus.RESERVED
            and self.locked_by is not None
            and self.lock_expires_at is not None
            and self.lock_expires_at > now
        )

    def is_locked_by_other(self, *, customer_id: int, now: datetime) -> bool:
        return self.is_lock_active(now) and self.locked_by != customer_id

    def effective_status(self, now: datetime) -> SeatClaimStatus:
        # An expired hold no longer blocks anyone
        if self.status == SeatClaimStatus.RESERVED and not self.is_lock_active(now):
            return SeatClaimStatus.AVAILABLE
        return self.status

    def ensure_claimable_by(self, *, customer_id: int, now: datetime) -> None:
        """
        Raises:
            SeatAlreadyBookedError: seat is BOOKED, by anyone including the caller
            SeatLockedError: another customer holds an unexpired lock
        """
        if self.status == SeatClaimStatus.BOOKED:
            raise SeatAlreadyBookedError()
        if self.is_locked_by_other(customer_id=customer_id, now=now):
            raise SeatLockedError()

    def apply(self, patch: SeatClaimPatch, *, now: datetime) -> 'SeatClaim':
        return attrs.evolve(
            self,
            status=patch.status,
            owner_id=patch.owner_id,
            locked_by=patch.locked_by,
            lock_expires_at=patch.lock_expires_at,
            version=self.version + 1,
            updated_at=now,
        )
