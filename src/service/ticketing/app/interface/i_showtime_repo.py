"""
Showtime Repository Interface

Reads showtimes and maintains the available-seats counter.
Creating or editing showtimes belongs to the catalogue, not to booking.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.domain.entity.showtime_entity import Showtime


class IShowtimeRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, showtime_id: int) -> Optional[Showtime]:
        """
        Get showtime with its theater capacity

        Returns:
            Showtime or None if not found
        """
        pass

    @abstractmethod
    async def decrement_available_seats(self, *, showtime_id: int) -> int:
        """
        Take one seat off the counter, never going below zero

        Returns:
            The new counter value

        Raises:
            InvalidOperationError: counter is already zero
            NotFoundError: showtime does not exist
        """
        pass

    @abstractmethod
    async def increment_available_seats(self, *, showtime_id: int) -> Optional[int]:
        """
        Put one seat back on the counter, never going above capacity

        Returns:
            The new counter value, or None when already at capacity
        """
        pass
