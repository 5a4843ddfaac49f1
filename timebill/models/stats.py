"""Time tracking report models."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator

from timebill.models.time_entry import TimeEntry


class DateRange(BaseModel):
    """Inclusive range applied to entry start times."""

    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


class TimeTrackingStats(BaseModel):
    """Global time tracking statistics."""

    total_hours: Decimal
    total_revenue: Decimal
    average_hourly_rate: Decimal
    top_project: str
    efficiency: int


class TaskBreakdown(BaseModel):
    """Hours and cost logged against one task."""

    task_id: int
    task_name: Optional[str] = None
    hours: Decimal
    cost: Decimal


class ProjectTimeStats(BaseModel):
    """Hours and cost logged against one project."""

    project_id: int
    project_name: Optional[str] = None
    total_hours: Decimal
    total_cost: Decimal
    task_breakdown: list[TaskBreakdown]


class TimesheetSummary(BaseModel):
    """Totals for a timesheet."""

    total_hours: Decimal
    total_cost: Decimal
    entries_count: int


class Timesheet(BaseModel):
    """Stopped entries plus their totals."""

    entries: list[TimeEntry]
    summary: TimesheetSummary
