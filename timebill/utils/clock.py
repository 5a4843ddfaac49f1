"""Clock helpers."""
from datetime import datetime, timedelta, timezone
from typing import Callable


Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class FrozenClock:
    """
    Manually advanced clock.

    Used by scripts and tests that need deterministic timestamps.

    Example:
        >>> clock = FrozenClock(datetime(2025, 1, 1, tzinfo=timezone.utc))
        >>> clock.advance(minutes=90)
        >>> clock().hour
        1
    """

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        """Move the clock forward by a ``timedelta(**kwargs)``."""
        self.current = self.current + timedelta(**kwargs)
