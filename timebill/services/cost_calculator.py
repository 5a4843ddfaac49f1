"""Cost calculator - pure functions turning time into money.

Everything here is stateless. Aggregations skip running entries because their
cost is not final until the timer stops.
"""
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping, Optional

from timebill.models.stats import (
    DateRange,
    ProjectTimeStats,
    TaskBreakdown,
    TimesheetSummary,
    TimeTrackingStats,
)
from timebill.models.time_entry import TimeEntry


CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
MINUTES_PER_HOUR = Decimal(60)


def round_money(value: Decimal) -> Decimal:
    """
    Round to cents, half away from zero.

    Example:
        >>> round_money(Decimal("10.005"))
        Decimal('10.01')
    """
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def minutes_to_hours(minutes: int) -> Decimal:
    """Convert minutes to hours rounded to two places."""
    return round_money(Decimal(minutes) / MINUTES_PER_HOUR)


def calculate_duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """
    Whole minutes between two timestamps, rounding any partial minute up.

    Args:
        start_time: Start time
        end_time: End time

    Returns:
        Duration in minutes, never negative

    Example:
        >>> start = datetime(2025, 1, 1, 9, 0)
        >>> calculate_duration_minutes(start, start + timedelta(minutes=90))
        90
        >>> calculate_duration_minutes(start, start + timedelta(seconds=61))
        2
    """
    delta = end_time - start_time
    if delta <= timedelta(0):
        return 0
    whole, remainder = divmod(delta, timedelta(minutes=1))
    return whole + (1 if remainder else 0)


def calculate_cost(duration_minutes: int, hourly_rate: Decimal) -> Decimal:
    """
    Cost of a duration at an hourly rate, rounded to cents.

    Example:
        >>> calculate_cost(90, Decimal("85"))
        Decimal('127.50')
    """
    return round_money(Decimal(duration_minutes) * Decimal(hourly_rate) / MINUTES_PER_HOUR)


def calculate_tax(amount: Decimal, tax_rate: Decimal) -> Decimal:
    """Flat tax on an amount, rounded to cents."""
    return round_money(Decimal(amount) * Decimal(tax_rate))


def sum_costs(entries: Iterable[TimeEntry]) -> Decimal:
    """Sum of entry costs. Invoice amounts are always derived through here."""
    return round_money(sum((entry.total_cost for entry in entries), ZERO))


def completed(entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    """Drop running entries."""
    return [entry for entry in entries if not entry.is_active]


def within_range(
    entries: Iterable[TimeEntry],
    date_range: Optional[DateRange],
) -> list[TimeEntry]:
    """Keep entries whose start time falls inside the range (inclusive)."""
    if date_range is None:
        return list(entries)
    return [entry for entry in entries if date_range.contains(entry.start_time)]


def _percentage(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    ratio = Decimal(part) * 100 / Decimal(whole)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def summarize(
    entries: Iterable[TimeEntry],
    project_names: Mapping[int, str],
) -> TimeTrackingStats:
    """
    Global statistics over stopped entries.

    The average rate is effective revenue per hour, not the mean of the
    entries' configured rates. Efficiency is the share of entries that
    reference a task.

    Args:
        entries: Entries to aggregate (running ones are ignored)
        project_names: Display names keyed by project id

    Returns:
        Aggregated statistics
    """
    stopped = sorted(completed(entries), key=lambda entry: entry.id)

    total_minutes = sum(entry.duration_minutes for entry in stopped)
    revenue = sum((entry.total_cost for entry in stopped), ZERO)

    if total_minutes > 0:
        average_rate = round_money(revenue * MINUTES_PER_HOUR / Decimal(total_minutes))
    else:
        average_rate = ZERO

    minutes_by_project: dict[int, int] = {}
    for entry in stopped:
        minutes_by_project[entry.project_id] = (
            minutes_by_project.get(entry.project_id, 0) + entry.duration_minutes
        )

    top_project = "None"
    top_minutes = 0
    for project_id, minutes in minutes_by_project.items():
        if minutes > top_minutes:
            top_minutes = minutes
            top_project = project_names.get(project_id, f"Project {project_id}")

    with_task = sum(1 for entry in stopped if entry.task_id is not None)

    return TimeTrackingStats(
        total_hours=minutes_to_hours(total_minutes),
        total_revenue=round_money(revenue),
        average_hourly_rate=average_rate,
        top_project=top_project,
        efficiency=_percentage(with_task, len(stopped)),
    )


def project_breakdown(
    entries: Iterable[TimeEntry],
    project_names: Mapping[int, str],
    task_names: Mapping[int, str],
) -> list[ProjectTimeStats]:
    """
    Per-project totals with a per-task breakdown.

    Entries without a task count toward the project total only.

    Returns:
        Project stats sorted by total hours, largest first
    """
    minutes: dict[int, int] = {}
    costs: dict[int, Decimal] = {}
    task_minutes: dict[int, dict[int, int]] = {}
    task_costs: dict[int, dict[int, Decimal]] = {}

    for entry in sorted(completed(entries), key=lambda e: e.id):
        pid = entry.project_id
        minutes[pid] = minutes.get(pid, 0) + entry.duration_minutes
        costs[pid] = costs.get(pid, ZERO) + entry.total_cost

        if entry.task_id is None:
            continue
        per_task_minutes = task_minutes.setdefault(pid, {})
        per_task_costs = task_costs.setdefault(pid, {})
        per_task_minutes[entry.task_id] = (
            per_task_minutes.get(entry.task_id, 0) + entry.duration_minutes
        )
        per_task_costs[entry.task_id] = (
            per_task_costs.get(entry.task_id, ZERO) + entry.total_cost
        )

    stats = []
    for pid in minutes:
        breakdown = [
            TaskBreakdown(
                task_id=task_id,
                task_name=task_names.get(task_id),
                hours=minutes_to_hours(task_total),
                cost=round_money(task_costs[pid][task_id]),
            )
            for task_id, task_total in task_minutes.get(pid, {}).items()
        ]
        stats.append(
            ProjectTimeStats(
                project_id=pid,
                project_name=project_names.get(pid),
                total_hours=minutes_to_hours(minutes[pid]),
                total_cost=round_money(costs[pid]),
                task_breakdown=breakdown,
            )
        )

    stats.sort(key=lambda s: s.total_hours, reverse=True)
    return stats


def summarize_timesheet(entries: Iterable[TimeEntry]) -> TimesheetSummary:
    """Totals for a list of stopped entries."""
    entries = list(entries)
    return TimesheetSummary(
        total_hours=minutes_to_hours(sum(e.duration_minutes for e in entries)),
        total_cost=sum_costs(entries),
        entries_count=len(entries),
    )
