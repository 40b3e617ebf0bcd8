"""Time utilities: timezone-aware UTC datetimes and the injectable clock."""

import re
from abc import ABC, abstractmethod
from datetime import UTC, date, datetime

from backend.app.core.errors import ValidationError


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string, raising ValidationError when malformed."""
    try:
        if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
            raise ValueError(value)
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD", details={"value": value})


class Clock(ABC):
    """Source of the reference date for every time-sensitive rule."""

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return utc_now()


class FixedClock(Clock):
    def __init__(self, value: date | datetime):
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day, tzinfo=UTC)
        self.value = value

    def now(self) -> datetime:
        return self.value


class OverridableClock(Clock):
    """Wraps another clock and honours a debug override date until cleared."""

    def __init__(self, base: Clock | None = None):
        self.base = base or SystemClock()
        self._override: date | None = None

    @property
    def override(self) -> date | None:
        return self._override

    def set_override(self, value: str) -> date:
        self._override = parse_iso_date(value)
        return self._override

    def clear_override(self) -> None:
        self._override = None

    def now(self) -> datetime:
        if self._override is not None:
            return datetime(self._override.year, self._override.month, self._override.day, tzinfo=UTC)
        return self.base.now()


_clock_instance = None


def get_clock() -> OverridableClock:
    """Return the process-wide clock; routes receive it via ``Depends(get_clock)``."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = OverridableClock()
    return _clock_instance
