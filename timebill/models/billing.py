"""Billing settings, stats and sweep report models."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BillingSettings(BaseModel):
    """Runtime billing configuration."""

    model_config = ConfigDict(frozen=True)

    default_hourly_rate: Decimal = Field(ge=0)
    tax_rate: Decimal = Field(ge=0, le=1)
    auto_billing_threshold: Decimal = Field(ge=0)
    invoice_terms_days: int = Field(ge=0)


class BillingSettingsUpdate(BaseModel):
    """Billing settings update model - all fields optional."""

    default_hourly_rate: Optional[Decimal] = Field(default=None, ge=0)
    tax_rate: Optional[Decimal] = Field(default=None, ge=0, le=1)
    auto_billing_threshold: Optional[Decimal] = Field(default=None, ge=0)
    invoice_terms_days: Optional[int] = Field(default=None, ge=0)


class BillingStats(BaseModel):
    """Outstanding and recent billing totals."""

    total_unbilled_amount: Decimal
    total_unbilled_hours: Decimal
    projects_over_threshold: int
    total_billed_this_month: Decimal
    average_hourly_rate: Decimal


class SweepFailure(BaseModel):
    """A project the sweep could not bill."""

    project_id: int
    reason: str


class SweepReport(BaseModel):
    """Result of one automatic billing pass."""

    projects_billed: int = 0
    invoices_created: int = 0
    total_amount_billed: Decimal = Decimal("0.00")
    invoice_ids: list[int] = Field(default_factory=list)
    failures: list[SweepFailure] = Field(default_factory=list)
