"""Time entry model definitions."""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TimerStart(BaseModel):
    """Request model for starting a timer."""

    project_id: int
    task_id: Optional[int] = None
    description: str = ""


class TimeEntryUpdate(BaseModel):
    """Time entry update model - all fields optional."""

    project_id: Optional[int] = None
    task_id: Optional[int] = None
    description: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)


class TimeEntry(BaseModel):
    """Full time entry model."""

    model_config = ConfigDict(frozen=True)

    id: int
    project_id: int
    task_id: Optional[int] = None
    description: str = ""
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: int = 0
    hourly_rate: Decimal
    total_cost: Decimal = Decimal("0.00")
    is_active: bool = False
    billing_invoice_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_billed(self) -> bool:
        """Whether the entry has been consumed by an invoice."""
        return self.billing_invoice_id is not None

    @property
    def is_billable(self) -> bool:
        """Stopped and not yet attached to an invoice."""
        return not self.is_active and self.billing_invoice_id is None
