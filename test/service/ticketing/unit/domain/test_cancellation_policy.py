from datetime import datetime, timedelta, timezone

import pytest

from src.platform.exception.exceptions import CancellationCutoffError, InvalidOperationError
from src.service.ticketing.domain.cancellation_policy import CancellationPolicy


NOW = datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestCancellationPolicy:
    def test_allows_cancel_two_hours_and_one_minute_before(self) -> None:
        policy = CancellationPolicy(cutoff_hours=2)
        start = NOW + timedelta(hours=2, minutes=1)

        assert policy.can_cancel(start_time=start, now=NOW) is True
        policy.ensure_cancellable(start_time=start, now=NOW)

    def test_rejects_exactly_at_cutoff(self) -> None:
        policy = CancellationPolicy(cutoff_hours=2)

        with pytest.raises(CancellationCutoffError) as exc_info:
            policy.ensure_cancellable(start_time=NOW + timedelta(hours=2), now=NOW)

        assert str(exc_info.value) == 'Cannot cancel booking less than 2 hours before showtime'
        assert isinstance(exc_info.value, InvalidOperationError)
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize(
        'until_start',
        [timedelta(hours=1, minutes=59), timedelta(minutes=1), timedelta(0), timedelta(hours=-3)],
    )
    def test_rejects_inside_cutoff_and_after_start(self, until_start: timedelta) -> None:
        policy = CancellationPolicy(cutoff_hours=2)

        assert policy.can_cancel(start_time=NOW + until_start, now=NOW) is False

    def test_hours_until(self) -> None:
        policy = CancellationPolicy()

        assert policy.hours_until(start_time=NOW + timedelta(minutes=90), now=NOW) == 1.5
