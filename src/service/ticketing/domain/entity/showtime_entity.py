from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.exceptions import InvalidOperationError
from src.service.ticketing.domain.value_object.money import to_money


@attrs.define
class Theater:
    id: int
    name: str
    capacity: int


@attrs.define
class Showtime:
    """
    A scheduled screening as seen by the booking service.

    `available_seats` is the denormalized counter kept in step with the
    number of active tickets; `theater_capacity` is read from the theater.
    """

    id: int
    movie_id: int
    theater_id: int
    start_time: datetime
    price: Decimal = attrs.field(converter=to_money)
    available_seats: int
    theater_capacity: int
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_sold_out(self) -> bool:
        return self.available_seats <= 0

    def ensure_bookable(self) -> None:
        if self.is_sold_out:
            raise InvalidOperationError('Showtime is sold out')
