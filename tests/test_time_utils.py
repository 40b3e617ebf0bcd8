from datetime import UTC, date, datetime

import pytest

from backend.app.core.errors import ValidationError
from backend.app.core.time import Clock, FixedClock, OverridableClock, SystemClock, utc_now


def test_utc_now_is_timezone_aware_utc():
    value = utc_now()
    assert value.tzinfo is UTC


def test_system_clock_reads_utc():
    assert SystemClock().now().tzinfo is UTC


def test_fixed_clock_from_date_is_midnight():
    clock = FixedClock(date(2026, 3, 10))
    assert clock.now() == datetime(2026, 3, 10, tzinfo=UTC)
    assert clock.today() == date(2026, 3, 10)


def test_override_replaces_base_clock_until_cleared():
    clock = OverridableClock(FixedClock(date(2026, 3, 10)))
    assert clock.override is None

    clock.set_override("2025-12-20")
    assert clock.today() == date(2025, 12, 20)
    assert clock.now() == datetime(2025, 12, 20, tzinfo=UTC)

    clock.clear_override()
    assert clock.today() == date(2026, 3, 10)


@pytest.mark.parametrize("value", ["2026-13-01", "20260101", "", "not-a-date"])
def test_override_rejects_malformed_dates(value):
    clock = OverridableClock(FixedClock(date(2026, 3, 10)))
    with pytest.raises(ValidationError):
        clock.set_override(value)
    assert clock.override is None


def test_clock_without_now_cannot_be_instantiated():
    class Incomplete(Clock):
        pass

    with pytest.raises(TypeError):
        Incomplete()
