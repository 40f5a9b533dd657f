"""
Unit of Work Pattern - one transaction per booking operation

Architecture:
- UoW owns the storage session lifecycle
- UoW owns commit/rollback
- Repositories share the UoW session
- Use cases coordinate several repositories through the UoW
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Any, Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_booking_repo import IBookingRepo
    from src.service.ticketing.app.interface.i_payment_repo import IPaymentRepo
    from src.service.ticketing.app.interface.i_seat_claim_repo import ISeatClaimRepo
    from src.service.ticketing.app.interface.i_showtime_repo import IShowtimeRepo
    from src.service.ticketing.app.interface.i_ticket_repo import ITicketRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the booking service

    Leaving the block without `commit()` rolls every write back.

    Usage:
        async with uow:
            ticket = await uow.tickets.create(ticket=...)
            await uow.commit()
    """

    showtimes: IShowtimeRepo
    seat_claims: ISeatClaimRepo
    tickets: ITicketRepo
    payments: IPaymentRepo
    bookings: IBookingRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        try:
            await self.rollback()
        except Exception:
            Logger.base.critical(
                f'💥 [UoW] Rollback failed after {exc_type.__name__ if exc_type else "exit"}, '
                'storage needs reconciliation'
            )
            raise
        if exc_type is not None:
            Logger.base.warning(f'↩️ [UoW] Rolled back on {exc_type.__name__}')

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        """Undo everything since the last commit; a no-op right after commit"""
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    A fresh session is opened per `async with` block and closed on exit.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self.session_factory = session_factory

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.ticketing.driven_adapter.repo.booking_repo_impl import BookingRepoImpl
        from src.service.ticketing.driven_adapter.repo.payment_repo_impl import PaymentRepoImpl
        from src.service.ticketing.driven_adapter.repo.seat_claim_repo_impl import (
            SeatClaimRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.showtime_repo_impl import (
            ShowtimeRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.ticket_repo_impl import TicketRepoImpl

        self.session = self.session_factory()

        # Repos share the session so they share the transaction
        self.showtimes = ShowtimeRepoImpl(session=self.session)
        self.seat_claims = SeatClaimRepoImpl(session=self.session)
        self.tickets = TicketRepoImpl(session=self.session)
        self.payments = PaymentRepoImpl(session=self.session)
        self.bookings = BookingRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        finally:
            await self.session.close()

    async def _commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
