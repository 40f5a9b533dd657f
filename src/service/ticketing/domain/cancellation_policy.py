from datetime import datetime, timezone
from typing import Optional

import attrs

from src.platform.exception.exceptions import CancellationCutoffError


@attrs.frozen
class CancellationPolicy:
    """
    A booking can be cancelled only while the showtime is more than
    `cutoff_hours` away; exactly at the cutoff it is already too late.
    """

    cutoff_hours: float = 2

    def hours_until(self, *, start_time: datetime, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (start_time - now).total_seconds() / 3600

    def can_cancel(self, *, start_time: datetime, now: Optional[datetime] = None) -> bool:
        return self.hours_until(start_time=start_time, now=now) > self.cutoff_hours

    def ensure_cancellable(self, *, start_time: datetime, now: Optional[datetime] = None) -> None:
        if not self.can_cancel(start_time=start_time, now=now):
            raise CancellationCutoffError(
                f'Cannot cancel booking less than {self.cutoff_hours:g} hours before showtime'
            )
