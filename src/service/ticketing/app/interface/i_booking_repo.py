from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.ticketing.domain.entity.booking_entity import Booking


class IBookingRepo(ABC):
    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def get_by_ticket_id(self, *, ticket_id: UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def update_status(self, *, booking: Booking) -> Booking:
        pass

    @abstractmethod
    async def list_by_customer(self, *, customer_id: int) -> List[Booking]:
        """Booking history, newest first"""
        pass
