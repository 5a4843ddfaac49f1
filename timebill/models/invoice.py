"""Invoice model definitions."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict


class InvoiceStatus(str, Enum):
    """Invoice status values."""

    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"


class GenerateInvoiceRequest(BaseModel):
    """Request model for generating an invoice from time entries."""

    project_id: int
    time_entry_ids: list[int]


class Invoice(BaseModel):
    """Invoice created from a batch of time entries."""

    model_config = ConfigDict(frozen=True)

    id: int
    invoice_number: str
    project_id: int
    client_id: int
    time_entry_ids: list[int]
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus = InvoiceStatus.DRAFT
    due_date: date
    description: str = ""
    created_at: datetime


class InvoiceVerification(BaseModel):
    """Result of re-deriving an invoice amount from its entries."""

    invoice_id: int
    valid: bool
