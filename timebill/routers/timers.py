"""Timer endpoints - time tracking operations."""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from timebill.database import get_database
from timebill.exceptions import BillingEngineError
from timebill.models.time_entry import TimeEntry, TimerStart, TimeEntryUpdate
from timebill.routers.errors import to_http_exception
from timebill.services.timer_service import TimerService


router = APIRouter(prefix="/timers", tags=["timers"])


@router.post("/start", response_model=TimeEntry)
async def start_timer(
    timer_start: TimerStart,
    db=Depends(get_database),
):
    """
    Start a new timer.

    - Any running timer is stopped first
    - Hourly rate is the current default rate
    """
    service = TimerService(db)
    return await service.start_timer(
        project_id=timer_start.project_id,
        task_id=timer_start.task_id,
        description=timer_start.description,
    )


@router.get("/active", response_model=Optional[TimeEntry])
async def get_active_timer(db=Depends(get_database)):
    """
    Get the currently running timer, if any.

    - Returns null if no timer is running
    """
    service = TimerService(db)
    return await service.get_active_timer()


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    project_id: Optional[int] = Query(None),
    db=Depends(get_database),
):
    """
    List time entries.

    - Optional filter: project_id
    - Results sorted by start_time descending (most recent first)
    """
    service = TimerService(db)
    return await service.list_entries(project_id=project_id)


@router.post("/{entry_id}/stop", response_model=TimeEntry)
async def stop_timer(
    entry_id: int,
    db=Depends(get_database),
):
    """
    Stop a running timer.

    - 404 if the entry does not exist
    - 409 if the entry is already stopped
    """
    service = TimerService(db)
    try:
        return await service.stop_timer(entry_id)
    except BillingEngineError as e:
        raise to_http_exception(e)


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: int,
    db=Depends(get_database),
):
    """Get a specific time entry by ID."""
    service = TimerService(db)
    try:
        return await service.get_entry(entry_id)
    except BillingEngineError as e:
        raise to_http_exception(e)


@router.patch("/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: int,
    entry_update: TimeEntryUpdate,
    db=Depends(get_database),
):
    """
    Update a time entry.

    - Billed entries cannot be changed (409)
    - Cost is recalculated when duration or rate changes
    """
    service = TimerService(db)
    try:
        return await service.update_entry(entry_id, entry_update)
    except BillingEngineError as e:
        raise to_http_exception(e)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: int,
    db=Depends(get_database),
):
    """
    Delete a time entry.

    - Billed and running entries cannot be deleted (409)
    - Hard delete (permanent)
    """
    service = TimerService(db)
    try:
        return {"deleted": await service.delete_entry(entry_id)}
    except BillingEngineError as e:
        raise to_http_exception(e)
