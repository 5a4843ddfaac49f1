"""Date range helpers for report queries."""
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from timebill.models.stats import DateRange


class DateRangePreset(str, Enum):
    """Named report windows."""

    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    LAST_30_DAYS = "last_30_days"


def resolve_preset(preset: DateRangePreset, now: datetime) -> DateRange:
    """
    Turn a named preset into an explicit range ending at ``now``.

    Weeks start on Sunday.

    Args:
        preset: Named window
        now: Reference time

    Returns:
        Inclusive date range
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if preset == DateRangePreset.TODAY:
        return DateRange(start=midnight, end=midnight + timedelta(days=1, microseconds=-1))
    if preset == DateRangePreset.THIS_WEEK:
        days_since_sunday = (now.weekday() + 1) % 7
        return DateRange(start=midnight - timedelta(days=days_since_sunday), end=now)
    if preset == DateRangePreset.THIS_MONTH:
        return DateRange(start=midnight.replace(day=1), end=now)
    return DateRange(start=now - timedelta(days=30), end=now)


def build_date_range(
    start: Optional[datetime],
    end: Optional[datetime],
    preset: Optional[DateRangePreset],
    now: datetime,
) -> Optional[DateRange]:
    """
    Build a range from query parameters.

    An explicit start/end pair wins over a preset. A lone start or end is
    ignored, matching the behaviour of the stats endpoint.
    """
    if start is not None and end is not None:
        return DateRange(start=start, end=end)
    if preset is not None:
        return resolve_preset(preset, now)
    return None
