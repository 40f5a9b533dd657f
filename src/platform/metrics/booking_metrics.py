import functools
import time
from typing import Any, Awaitable, Callable, TypeVar

from prometheus_client import Counter, Histogram

from src.platform.exception.exceptions import (
    AuthenticationError,
    CancellationCutoffError,
    DomainError,
    NotFoundError,
    SeatAlreadyBookedError,
    SeatLockedError,
)


T = TypeVar('T')


def outcome_of(exc: BaseException) -> str:
    """Map an exception raised by a seat operation to its `result` label"""
    # Subclasses first: SeatLocked is a SeatAlreadyBooked, CancellationCutoff a DomainError
    if isinstance(exc, SeatLockedError):
        return 'locked'
    if isinstance(exc, SeatAlreadyBookedError):
        return 'collision'
    if isinstance(exc, CancellationCutoffError):
        return 'cutoff'
    if isinstance(exc, AuthenticationError):
        return 'unauthenticated'
    if isinstance(exc, NotFoundError):
        return 'not_found'
    if isinstance(exc, DomainError):
        return 'rejected'
    return 'error'


class BookingMetrics:
    """
    Booking Service Core Metrics Collector

    Tracks seat operation outcomes (book/cancel/hold/release_hold), their
    latency, optimistic-write retries and counter drift.
    """

    def __init__(self):
        # ========== Seat Operation Business Metrics ==========
        self.seat_operation_requests = Counter(
            'seat_operation_requests_total',
            'Total seat operation requests',
            ['operation', 'result'],  # result: success/collision/locked/cutoff/...
        )

        self.seat_operation_duration = Histogram(
            'seat_operation_duration_seconds',
            'Seat operation processing time',
            ['operation'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0],
        )

        # ========== Storage Contention Metrics ==========
        self.seat_claim_retries = Counter(
            'seat_claim_retries_total',
            'Seat claim writes retried after a stale version',
            ['operation'],  # operation: claim/release
        )

        self.seat_counter_drift = Counter(
            'seat_counter_drift_total',
            'Available-seats counter found out of step with active tickets',
            ['source'],  # source: cancel/availability
        )

    # ========== Helper Methods ==========

    def record_seat_operation(self, *, operation: str, result: str, duration: float):
        self.seat_operation_requests.labels(operation=operation, result=result).inc()
        self.seat_operation_duration.labels(operation=operation).observe(duration)

    def record_seat_claim_retry(self, *, operation: str):
        self.seat_claim_retries.labels(operation=operation).inc()

    def record_counter_drift(self, *, source: str):
        self.seat_counter_drift.labels(source=source).inc()

    def track(
        self, operation: str
    ) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
        """Decorate an async use case `execute` to count and time each call"""

        def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
            @functools.wraps(func)
            async def wrapper(*args: Any, **kwargs: Any) -> T:
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    self.record_seat_operation(
                        operation=operation,
                        result=outcome_of(e),
                        duration=time.time() - start_time,
                    )
                    raise
                self.record_seat_operation(
                    operation=operation, result='success', duration=time.time() - start_time
                )
                return result

            return wrapper

        return decorator


# Global metrics instance
metrics = BookingMetrics()
