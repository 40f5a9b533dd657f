"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- An isolated InMemoryStore per test, seeded with one theater and showtime
- Unit-of-work and use-case factories over that store

Architecture:
- Unit tests (test/**/unit/): AsyncMock repositories, no store at all
- Behaviour tests: real use cases over the in-memory store
- Repository tests: SQLAlchemy repositories over aiosqlite
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read once at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    os.environ['STORAGE_BACKEND'] = 'memory'
    os.environ.setdefault('SECRET_KEY', 'test_secret_key')
    os.environ.setdefault('DEBUG', 'false')

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import Callable  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402

import pytest  # noqa: E402

from src.service.ticketing.app.command.book_ticket_use_case import BookTicketUseCase  # noqa: E402
from src.service.ticketing.app.command.cancel_booking_use_case import (  # noqa: E402
    CancelBookingUseCase,
)
from src.service.ticketing.domain.entity.showtime_entity import Showtime, Theater  # noqa: E402
from src.service.ticketing.driven_adapter.memory.in_memory_store import (  # noqa: E402
    InMemoryStore,
)
from src.service.ticketing.driven_adapter.memory.in_memory_unit_of_work import (  # noqa: E402
    InMemoryUnitOfWork,
)


DEFAULT_CAPACITY = 100
DEFAULT_PRICE = Decimal('12.50')


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def theater(store: InMemoryStore) -> Theater:
    return store.add_theater(name='Hall 1', capacity=DEFAULT_CAPACITY)


@pytest.fixture
def showtime(store: InMemoryStore, theater: Theater) -> Showtime:
    """A showtime one day away, comfortably outside the cancellation cutoff"""
    return store.add_showtime(
        theater_id=theater.id,
        start_time=datetime.now(timezone.utc) + timedelta(days=1),
        price=DEFAULT_PRICE,
    )


@pytest.fixture
def make_uow(store: InMemoryStore) -> Callable[[], InMemoryUnitOfWork]:
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture
def make_book_use_case(
    make_uow: Callable[[], InMemoryUnitOfWork],
) -> Callable[[], BookTicketUseCase]:
    """One use case (and unit of work) per call, as the DI container hands them out"""
    return lambda: BookTicketUseCase(uow=make_uow())


@pytest.fixture
def make_cancel_use_case(
    make_uow: Callable[[], InMemoryUnitOfWork],
) -> Callable[[], CancelBookingUseCase]:
    return lambda: CancelBookingUseCase(uow=make_uow())
