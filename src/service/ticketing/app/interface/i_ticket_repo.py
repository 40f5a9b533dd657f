from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.ticketing.domain.entity.ticket_entity import Ticket
from src.service.ticketing.domain.enum.ticket_status import TicketStatus
from src.service.ticketing.domain.value_object.seat_ref import SeatRef


class ITicketRepo(ABC):
    @abstractmethod
    async def create(self, *, ticket: Ticket) -> Ticket:
        pass

    @abstractmethod
    async def get_by_id(self, *, ticket_id: UUID) -> Optional[Ticket]:
        pass

    @abstractmethod
    async def find_active_by_seat(self, *, showtime_id: int, seat: SeatRef) -> Optional[Ticket]:
        """Non-cancelled ticket for the seat, if any"""
        pass

    @abstractmethod
    async def update_status(self, *, ticket: Ticket, expected_status: TicketStatus) -> bool:
        """
        Persist ticket.status only if the stored status still equals expected_status

        Returns:
            False when another transaction changed the ticket first
        """
        pass

    @abstractmethod
    async def list_by_customer(self, *, customer_id: int) -> List[Ticket]:
        """All tickets of the customer, newest purchase first"""
        pass

    @abstractmethod
    async def count_active_by_showtime(self, *, showtime_id: int) -> int:
        pass
