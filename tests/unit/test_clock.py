"""Tests for the injectable clocks (cafe_kernel/domain/clock.py)."""

from datetime import UTC, datetime, timedelta, timezone

from cafe_kernel.domain.clock import DeterministicClock, SystemClock

EASTERN = timezone(timedelta(hours=-5))


class TestSystemClock:

    def test_defaults_to_utc(self):
        assert SystemClock().now().utcoffset() == timedelta(0)

    def test_uses_store_zone(self):
        now = SystemClock(EASTERN).now()
        assert now.utcoffset() == timedelta(hours=-5)
        assert abs(now - datetime.now(UTC)) < timedelta(minutes=1)


class TestDeterministicClock:

    def test_fixed_until_advanced(self):
        clock = DeterministicClock(datetime(2026, 1, 28, 9, 30, tzinfo=UTC))
        assert clock.now() == clock.now()
        assert clock.tick() == datetime(2026, 1, 28, 9, 30, 1, tzinfo=UTC)

    def test_set_time_resets_advance(self):
        clock = DeterministicClock()
        clock.advance(60)
        clock.set_time(datetime(2026, 1, 28, tzinfo=UTC))
        assert clock.now() == datetime(2026, 1, 28, tzinfo=UTC)
