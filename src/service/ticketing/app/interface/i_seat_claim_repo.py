"""
Seat Claim Repository Interface

Every write here is conditional: it either applies atomically or reports
that another transaction got there first. Callers never read-then-write.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.service.ticketing.domain.entity.seat_claim_entity import SeatClaim, SeatClaimPatch
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


class ISeatClaimRepo(ABC):
    @abstractmethod
    async def insert_if_absent(self, *, claim: SeatClaim) -> Optional[SeatClaim]:
        """
        Insert the claim unless one already exists for the same seat

        Returns:
            The inserted claim, or None when the seat already has a claim
        """
        pass

    @abstractmethod
    async def get_by_seat(self, *, showtime_id: int, seat: SeatRef) -> Optional[SeatClaim]:
        pass

    @abstractmethod
    async def get_by_id(self, *, claim_id: UUID) -> Optional[SeatClaim]:
        pass

    @abstractmethod
    async def list_by_showtime(self, *, showtime_id: int) -> List[SeatClaim]:
        pass

    @abstractmethod
    async def update_with_version(
        self, *, claim_id: UUID, patch: SeatClaimPatch, expected_version: int
    ) -> SeatClaim:
        """
        Apply patch only if the stored version still equals expected_version

        Returns:
            The updated claim, with version incremented by one

        Raises:
            StaleWriteError: the claim changed (or vanished) since it was read
        """
        pass

    @abstractmethod
    async def acquire_lock(
        self,
        *,
        showtime_id: int,
        seat: SeatRef,
        customer_id: int,
        expires_at: datetime,
        now: datetime,
    ) -> Optional[SeatClaim]:
        """
        Mark the seat RESERVED for customer_id until expires_at

        Succeeds when the seat is not BOOKED and has no lock, an expired lock,
        or a lock already held by customer_id.

        Returns:
            The locked claim, or None when the lock could not be taken
        """
        pass

    @abstractmethod
    async def release_lock(self, *, showtime_id: int, seat: SeatRef, customer_id: int) -> bool:
        """
        Drop a lock held by customer_id; the seat goes back to AVAILABLE

        Returns:
            True if a lock owned by customer_id was released
        """
        pass
