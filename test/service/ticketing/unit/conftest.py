"""
Unit test configuration for the booking service.

Use cases run against MockUnitOfWork: every repository is an AsyncMock and
commit/rollback calls are recorded in order.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List
from unittest.mock import AsyncMock

import pytest

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.ticketing.domain.entity.showtime_entity import Showtime


class MockUnitOfWork(AbstractUnitOfWork):
    def __init__(self) -> None:
        self.showtimes = AsyncMock()
        self.seat_claims = AsyncMock()
        self.tickets = AsyncMock()
        self.payments = AsyncMock()
        self.bookings = AsyncMock()
        self.calls: List[str] = []

    async def _commit(self) -> None:
        self.calls.append('commit')

    async def rollback(self) -> None:
        self.calls.append('rollback')

    @property
    def committed(self) -> bool:
        return 'commit' in self.calls


@pytest.fixture
def mock_uow() -> MockUnitOfWork:
    return MockUnitOfWork()


@pytest.fixture
def upcoming_showtime() -> Showtime:
    return Showtime(
        id=1,
        movie_id=10,
        theater_id=3,
        start_time=datetime.now(timezone.utc) + timedelta(days=1),
        price=Decimal('12.37'),
        available_seats=100,
        theater_capacity=100,
    )
