"""Billing endpoints - settings, invoicing and automatic billing."""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from timebill.database import get_database
from timebill.exceptions import BillingEngineError
from timebill.models.billing import BillingSettings, BillingSettingsUpdate, BillingStats, SweepReport
from timebill.models.invoice import GenerateInvoiceRequest, Invoice, InvoiceVerification
from timebill.models.time_entry import TimeEntry
from timebill.routers.errors import to_http_exception
from timebill.services.billing_service import BillingService
from timebill.services.settings_service import SettingsService
from timebill.services.sweep_service import SweepService


router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/settings", response_model=BillingSettings)
async def get_settings(db=Depends(get_database)):
    """Get the current billing settings."""
    service = SettingsService(db)
    return await service.get_settings()


@router.put("/settings", response_model=BillingSettings)
async def update_settings(
    settings_update: BillingSettingsUpdate,
    db=Depends(get_database),
):
    """
    Update billing settings.

    - Partial update; omitted fields keep their value
    - A new default rate applies to timers started afterwards only
    """
    service = SettingsService(db)
    return await service.update_settings(settings_update)


@router.get("/unbilled-entries", response_model=list[TimeEntry])
async def get_unbilled_entries(
    project_id: Optional[int] = Query(None),
    db=Depends(get_database),
):
    """Stopped time entries not yet on an invoice."""
    service = BillingService(db)
    return await service.get_unbilled_entries(project_id=project_id)


@router.post("/generate-invoice", response_model=Invoice)
async def generate_invoice(
    request: GenerateInvoiceRequest,
    db=Depends(get_database),
):
    """
    Create a draft invoice from unbilled time entries of one project.

    - 400 if any entry is unknown, running, billed or from another project
    - No invoice is created when the request fails
    """
    service = BillingService(db)
    try:
        return await service.generate_invoice_from_time_entries(
            project_id=request.project_id,
            time_entry_ids=request.time_entry_ids,
        )
    except BillingEngineError as e:
        raise to_http_exception(e)


@router.get("/stats", response_model=BillingStats)
async def get_billing_stats(db=Depends(get_database)):
    """Unbilled totals and this month's billed amount."""
    service = BillingService(db)
    return await service.get_billing_stats()


@router.post("/run-automatic", response_model=SweepReport)
async def run_automatic_billing(db=Depends(get_database)):
    """
    Invoice every project whose unbilled total exceeds the threshold.

    - Per-project failures are listed in the report, never raised
    - Running it twice in a row creates nothing the second time
    """
    service = SweepService(db)
    return await service.run_automatic_billing()


@router.get("/invoices", response_model=list[Invoice])
async def list_invoices(
    project_id: Optional[int] = Query(None),
    db=Depends(get_database),
):
    """List invoices created by the engine, newest first."""
    service = BillingService(db)
    return await service.list_invoices(project_id=project_id)


@router.get("/invoices/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: int,
    db=Depends(get_database),
):
    """Get an invoice by ID."""
    service = BillingService(db)
    try:
        return await service.get_invoice(invoice_id)
    except BillingEngineError as e:
        raise to_http_exception(e)


@router.get("/invoices/{invoice_id}/verify", response_model=InvoiceVerification)
async def verify_invoice(
    invoice_id: int,
    db=Depends(get_database),
):
    """Check that the invoice amount still matches its time entries."""
    service = BillingService(db)
    try:
        valid = await service.verify_invoice(invoice_id)
        return InvoiceVerification(invoice_id=invoice_id, valid=valid)
    except BillingEngineError as e:
        raise to_http_exception(e)
