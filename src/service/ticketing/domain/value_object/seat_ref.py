import attrs

from src.platform.exception.exceptions import DomainError


MAX_SEAT_PART_LENGTH = 10


def _clean(value: object, field_name: str) -> str:
    if not isinstance(value, str):
        raise DomainError(f'{field_name} must be a string')
    cleaned = value.strip()
    if not cleaned:
        raise DomainError(f'{field_name} is required')
    if len(cleaned) > MAX_SEAT_PART_LENGTH:
        raise DomainError(f'{field_name} must be at most {MAX_SEAT_PART_LENGTH} characters')
    return cleaned


@attrs.frozen
class SeatRef:
    """A seat inside one showtime, e.g. row 'A' seat '12'"""

    row: str
    seat_number: str

    @classmethod
    def create(cls, *, row: object, seat_number: object) -> 'SeatRef':
        return cls(row=_clean(row, 'row'), seat_number=_clean(seat_number, 'seat_number'))

    @property
    def label(self) -> str:
        return f'{self.row}{self.seat_number}'
