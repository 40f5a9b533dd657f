class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str = 'Please sign in') -> None:
        super().__init__(message, 401)


class InvalidOperationError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class SeatAlreadyBookedError(CustomBaseError):
    """Expected outcome of a seat collision; the caller should pick another seat."""

    def __init__(self, message: str = 'Seat is already booked', status_code: int = 400) -> None:
        super().__init__(message, status_code)


class SeatLockedError(SeatAlreadyBookedError):
    def __init__(self, message: str = 'Seat is currently being booked by another customer') -> None:
        super().__init__(message, 409)


class StaleWriteError(ConflictError):
    """Optimistic version mismatch - reread and retry."""

    def __init__(self, message: str = 'Record was modified concurrently') -> None:
        super().__init__(message)


class CancellationCutoffError(InvalidOperationError):
    """Cancellation asked for too close to the showtime start"""
