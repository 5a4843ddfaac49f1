"""Time tracking report endpoints."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query

from timebill.database import get_database
from timebill.models.stats import ProjectTimeStats, Timesheet, TimeTrackingStats
from timebill.services.timer_service import TimerService
from timebill.utils.date_range import DateRangePreset, build_date_range


router = APIRouter(prefix="/time-tracking", tags=["time-tracking"])


@router.get("/stats", response_model=TimeTrackingStats)
async def get_stats(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    preset: Optional[DateRangePreset] = Query(None),
    db=Depends(get_database),
):
    """
    Aggregate statistics over stopped entries.

    - Optional window: start and end, or a preset
    - Running timers are not counted
    """
    service = TimerService(db)
    date_range = build_date_range(start, end, preset, now=db.clock())
    return await service.get_stats(date_range)


@router.get("/project-stats", response_model=list[ProjectTimeStats])
async def get_project_stats(db=Depends(get_database)):
    """Per-project hours and cost, largest first."""
    service = TimerService(db)
    return await service.get_project_stats()


@router.get("/timesheet", response_model=Timesheet)
async def get_timesheet(
    project_id: Optional[int] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    preset: Optional[DateRangePreset] = Query(None),
    db=Depends(get_database),
):
    """Stopped entries with totals, optionally by project and window."""
    service = TimerService(db)
    date_range = build_date_range(start, end, preset, now=db.clock())
    return await service.generate_timesheet(project_id=project_id, date_range=date_range)
