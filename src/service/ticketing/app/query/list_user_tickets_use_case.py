from typing import Dict, List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import AuthenticationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.booking_result import TicketView
from src.service.ticketing.domain.entity.showtime_entity import Showtime


class ListUserTicketsUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
    ) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, customer_id: Optional[int]) -> List[TicketView]:
        if not customer_id:
            raise AuthenticationError()

        views: List[TicketView] = []
        async with self.uow:
            tickets = await self.uow.tickets.list_by_customer(customer_id=customer_id)
            showtimes: Dict[int, Optional[Showtime]] = {}
            for ticket in tickets:
                if ticket.showtime_id not in showtimes:
                    showtimes[ticket.showtime_id] = await self.uow.showtimes.get_by_id(
                        showtime_id=ticket.showtime_id
                    )
                showtime = showtimes[ticket.showtime_id]
                payment = await self.uow.payments.get_by_ticket_id(ticket_id=ticket.id)
                views.append(
                    TicketView(
                        ticket=ticket,
                        showtime_start=showtime.start_time if showtime else None,
                        showtime_end=showtime.end_time if showtime else None,
                        movie_id=showtime.movie_id if showtime else None,
                        theater_id=showtime.theater_id if showtime else None,
                        payment_status=payment.status if payment else None,
                    )
                )
        return views
