import pytest

from backend.app.core.errors import ValidationError
from backend.app.services.pricing import (
    duration_hours,
    duration_minutes,
    format_currency,
    lesson_fee,
    lesson_total,
    transport_fee,
)


def test_lesson_fee_basic():
    assert lesson_fee(2, 3500) == 7000
    assert lesson_fee(1.5, 3500) == 5250
    assert lesson_fee(0, 3500) == 0


def test_lesson_fee_rounds_half_up():
    assert lesson_fee(0.5, 3333) == 1667
    assert lesson_fee(0.5, 3331) == 1666


def test_lesson_fee_uses_configured_rate_by_default():
    assert lesson_fee(1) == 3500


def test_lesson_fee_rejects_negative_hours():
    with pytest.raises(ValidationError):
        lesson_fee(-1, 3500)


def test_transport_fee_lookup():
    assert transport_fee("日暮里") == 900
    assert transport_fee("蓮沼") == 1500
    assert transport_fee("オンライン") == 0


def test_transport_fee_unknown_or_missing_location_is_free():
    assert transport_fee(None) == 0
    assert transport_fee("") == 0
    assert transport_fee("Somewhere else") == 0


def test_transport_fee_custom_table():
    assert transport_fee("Library", {"Library": 400}) == 400
    assert transport_fee("日暮里", {"Library": 400}) == 0


def test_duration_hours():
    assert duration_hours("10:00", "12:00") == 2
    assert duration_hours("10:00", "11:30") == 1.5
    assert duration_hours("10:00:00", "11:45:00") == 1.75
    assert duration_minutes("09:15", "10:00") == 45


def test_duration_hours_returns_negative_without_correction():
    assert duration_hours("12:00", "11:00") == -1


@pytest.mark.parametrize("value", ["1000", "10-00", "25:00", "10:60", "ab:cd", None])
def test_duration_hours_rejects_malformed_times(value):
    with pytest.raises(ValidationError):
        duration_hours(value, "12:00")


def test_lesson_total_and_currency():
    assert lesson_total(2, 900, 3500) == 7900
    assert format_currency(3500) == "¥3,500"
    assert format_currency(0) == "¥0"
    assert format_currency(-900) == "-¥900"
