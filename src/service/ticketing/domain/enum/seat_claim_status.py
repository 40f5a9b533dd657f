from enum import StrEnum


class SeatClaimStatus(StrEnum):
    AVAILABLE = 'available'
    RESERVED = 'reserved'
    BOOKED = 'booked'
