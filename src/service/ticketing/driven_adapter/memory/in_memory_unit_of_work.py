from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.ticketing.driven_adapter.memory.in_memory_repo_impl import (
    InMemoryBookingRepo,
    InMemoryPaymentRepo,
    InMemorySeatClaimRepo,
    InMemoryShowtimeRepo,
    InMemoryTicketRepo,
    UndoLog,
)
from src.service.ticketing.driven_adapter.memory.in_memory_store import InMemoryStore


class InMemoryUnitOfWork(AbstractUnitOfWork):
    """
    Unit of Work over InMemoryStore

    Writes land in the store immediately; rollback replays the undo log in
    reverse, commit simply forgets it.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.undo_log = UndoLog()

    async def __aenter__(self) -> AbstractUnitOfWork:
        self.undo_log = UndoLog()
        self.showtimes = InMemoryShowtimeRepo(store=self.store, undo_log=self.undo_log)
        self.seat_claims = InMemorySeatClaimRepo(store=self.store, undo_log=self.undo_log)
        self.tickets = InMemoryTicketRepo(store=self.store, undo_log=self.undo_log)
        self.payments = InMemoryPaymentRepo(store=self.store, undo_log=self.undo_log)
        self.bookings = InMemoryBookingRepo(store=self.store, undo_log=self.undo_log)
        return await super().__aenter__()

    async def _commit(self) -> None:
        self.undo_log.clear()

    async def rollback(self) -> None:
        self.undo_log.replay()
