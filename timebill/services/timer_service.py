"""Timer service - business logic for time tracking."""
import logging
from typing import Optional

from timebill.exceptions import ConflictError, InvalidStateError, NotFoundError
from timebill.models.stats import DateRange, ProjectTimeStats, Timesheet, TimeTrackingStats
from timebill.models.time_entry import TimeEntry, TimeEntryUpdate
from timebill.services import cost_calculator
from timebill.services.directory_service import DirectoryService


logger = logging.getLogger(__name__)


class TimerService:
    """Service for handling time tracking operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.directory = DirectoryService(db)

    def _newest_first(self, entries: list[TimeEntry]) -> list[TimeEntry]:
        return sorted(entries, key=lambda e: (e.start_time, e.id), reverse=True)

    def _get_or_raise(self, entry_id: int) -> TimeEntry:
        entry = self.time_entries.get(entry_id)
        if entry is None:
            raise NotFoundError("Time entry", entry_id)
        return entry

    def _stop(self, entry: TimeEntry) -> TimeEntry:
        """
        Close a running entry and price it. Caller must hold the arena lock.
        """
        end_time = self.db.clock()
        duration = cost_calculator.calculate_duration_minutes(entry.start_time, end_time)

        stopped = entry.model_copy(update={
            "end_time": end_time,
            "duration_minutes": duration,
            "total_cost": cost_calculator.calculate_cost(duration, entry.hourly_rate),
            "is_active": False,
            "updated_at": end_time,
        })
        self.time_entries.put(stopped.id, stopped)

        logger.info(
            "Stopped timer %s on project %s: %s min, cost %s",
            stopped.id, stopped.project_id, duration, stopped.total_cost,
        )
        return stopped

    async def start_timer(
        self,
        project_id: int,
        task_id: Optional[int] = None,
        description: str = "",
    ) -> TimeEntry:
        """
        Start a new timer.

        Any timer that is already running is stopped first, so at most one
        entry is ever active.

        Args:
            project_id: Project the work is for
            task_id: Optional task within the project
            description: Optional description

        Returns:
            Created time entry
        """
        with self.db.transaction():
            for running in self.time_entries.values():
                if running.is_active:
                    self._stop(running)

            now = self.db.clock()
            entry = TimeEntry(
                id=self.time_entries.allocate_id(),
                project_id=project_id,
                task_id=task_id,
                description=description,
                start_time=now,
                hourly_rate=self.db.billing_settings.default_hourly_rate,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            self.time_entries.put(entry.id, entry)

        logger.info("Started timer %s on project %s", entry.id, project_id)
        return entry

    async def stop_timer(self, entry_id: int) -> TimeEntry:
        """
        Stop a running timer.

        Args:
            entry_id: Time entry ID

        Returns:
            Updated time entry with end_time, duration and cost

        Raises:
            NotFoundError: If the entry does not exist
            InvalidStateError: If the entry is not running
        """
        with self.db.transaction():
            entry = self._get_or_raise(entry_id)
            if not entry.is_active:
                raise InvalidStateError(f"Time entry {entry_id} is not running")
            return self._stop(entry)

    async def get_active_timer(self) -> Optional[TimeEntry]:
        """
        Get the currently running timer, if any.

        Returns:
            Current running time entry, or None
        """
        with self.db.lock:
            for entry in self.time_entries.values():
                if entry.is_active:
                    return entry
        return None

    async def get_entry(self, entry_id: int) -> TimeEntry:
        """
        Get a time entry by ID.

        Raises:
            NotFoundError: If the entry does not exist
        """
        with self.db.lock:
            return self._get_or_raise(entry_id)

    async def list_entries(self, project_id: Optional[int] = None) -> list[TimeEntry]:
        """
        List time entries, most recent first.

        Args:
            project_id: Optional project filter

        Returns:
            List of time entries
        """
        with self.db.lock:
            entries = self.time_entries.values()

        if project_id is not None:
            entries = [e for e in entries if e.project_id == project_id]
        return self._newest_first(entries)

    async def update_entry(
        self,
        entry_id: int,
        entry_update: TimeEntryUpdate,
    ) -> TimeEntry:
        """
        Update a time entry.

        Cost is never set directly: it is recomputed whenever duration or
        rate changes.

        Args:
            entry_id: Time entry ID
            entry_update: Update data

        Returns:
            Updated time entry

        Raises:
            NotFoundError: If the entry does not exist
            ConflictError: If the entry is already billed
            InvalidStateError: If the duration of a running entry is changed
        """
        # task_id is the only field that may be cleared with null
        changes = {
            field: value
            for field, value in entry_update.model_dump(exclude_unset=True).items()
            if value is not None or field == "task_id"
        }

        with self.db.transaction():
            entry = self._get_or_raise(entry_id)

            if entry.is_billed:
                raise ConflictError(
                    f"Time entry {entry_id} is billed on invoice {entry.billing_invoice_id}"
                )
            if entry.is_active and "duration_minutes" in changes:
                raise InvalidStateError(
                    f"Cannot set duration of running time entry {entry_id}"
                )

            changes["updated_at"] = self.db.clock()
            updated = entry.model_copy(update=changes)

            if "duration_minutes" in changes or "hourly_rate" in changes:
                updated = updated.model_copy(update={
                    "total_cost": cost_calculator.calculate_cost(
                        updated.duration_minutes, updated.hourly_rate
                    ),
                })

            self.time_entries.put(entry_id, updated)

        return updated

    async def delete_entry(self, entry_id: int) -> bool:
        """
        Delete a time entry.

        Billed entries are permanent history and running entries must be
        stopped first.

        Args:
            entry_id: Time entry ID

        Returns:
            True once removed

        Raises:
            NotFoundError: If the entry does not exist
            ConflictError: If the entry is billed
            InvalidStateError: If the entry is running
        """
        with self.db.transaction():
            entry = self._get_or_raise(entry_id)
            if entry.is_billed:
                raise ConflictError(
                    f"Time entry {entry_id} is billed on invoice {entry.billing_invoice_id}"
                )
            if entry.is_active:
                raise InvalidStateError(f"Time entry {entry_id} is still running")
            self.time_entries.remove(entry_id)

        logger.info("Deleted time entry %s", entry_id)
        return True

    async def get_stats(self, date_range: Optional[DateRange] = None) -> TimeTrackingStats:
        """Aggregate statistics over stopped entries, optionally by start date."""
        with self.db.lock:
            entries = self.time_entries.values()
            names = self.directory.project_names()

        return cost_calculator.summarize(
            cost_calculator.within_range(entries, date_range), names
        )

    async def get_project_stats(self) -> list[ProjectTimeStats]:
        """Per-project totals, largest first."""
        with self.db.lock:
            entries = self.time_entries.values()
            project_names = self.directory.project_names()
            task_names = self.directory.task_names()

        return cost_calculator.project_breakdown(entries, project_names, task_names)

    async def generate_timesheet(
        self,
        project_id: Optional[int] = None,
        date_range: Optional[DateRange] = None,
    ) -> Timesheet:
        """
        Stopped entries for a project and/or period, with totals.

        Args:
            project_id: Optional project filter
            date_range: Optional start-time window

        Returns:
            Timesheet with entries newest first
        """
        entries = await self.list_entries(project_id=project_id)
        entries = cost_calculator.within_range(cost_calculator.completed(entries), date_range)

        return Timesheet(
            entries=entries,
            summary=cost_calculator.summarize_timesheet(entries),
        )
