from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.service.ticketing.domain.entity.payment_entity import Payment


class IPaymentRepo(ABC):
    @abstractmethod
    async def create(self, *, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def get_by_ticket_id(self, *, ticket_id: UUID) -> Optional[Payment]:
        pass

    @abstractmethod
    async def update_status(self, *, payment: Payment) -> Payment:
        pass
