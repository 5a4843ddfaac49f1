"""Billing service - turns unbilled time entries into invoices.

Each time entry can be consumed by exactly one invoice. Validation, invoice
creation and marking the entries happen inside a single arena transaction:
either all of it is applied or none of it is.
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Optional

from timebill.exceptions import ConflictError, InvalidInputError, InvalidStateError, NotFoundError
from timebill.models.billing import BillingStats
from timebill.models.invoice import Invoice, InvoiceStatus
from timebill.models.time_entry import TimeEntry
from timebill.services import cost_calculator
from timebill.services.directory_service import DirectoryService


logger = logging.getLogger(__name__)


class BillingService:
    """Service for reconciling time entries into invoices."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.time_entries = db["time_entries"]
        self.invoices = db["invoices"]
        self.directory = DirectoryService(db)

    async def get_unbilled_entries(self, project_id: Optional[int] = None) -> list[TimeEntry]:
        """
        List stopped entries that are not on any invoice, most recent first.

        Args:
            project_id: Optional project filter

        Returns:
            Unbilled time entries
        """
        with self.db.lock:
            entries = [e for e in self.time_entries.values() if e.is_billable]

        if project_id is not None:
            entries = [e for e in entries if e.project_id == project_id]
        return sorted(entries, key=lambda e: (e.start_time, e.id), reverse=True)

    async def unbilled_by_project(self) -> dict[int, list[TimeEntry]]:
        """Group unbilled entries by project, oldest entry first within each group."""
        grouped: dict[int, list[TimeEntry]] = {}
        for entry in reversed(await self.get_unbilled_entries()):
            grouped.setdefault(entry.project_id, []).append(entry)
        return grouped

    def _find_unbillable(self, project_id: int, entry_ids: Iterable[int]) -> list[int]:
        invalid = []
        for entry_id in entry_ids:
            entry = self.time_entries.get(entry_id)
            if entry is None or entry.project_id != project_id or not entry.is_billable:
                invalid.append(entry_id)
        return invalid

    def _get_invoice_or_raise(self, invoice_id: int) -> Invoice:
        invoice = self.invoices.get(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    def _mark_billed(self, entry_id: int, invoice_id: int) -> None:
        """Attach an entry to an invoice. Caller must hold a transaction."""
        entry = self.time_entries.get(entry_id)
        if entry is None:
            raise NotFoundError("Time entry", entry_id)
        if entry.is_billed:
            raise ConflictError(
                f"Time entry {entry_id} is already billed on invoice {entry.billing_invoice_id}"
            )
        if entry.is_active:
            raise InvalidStateError(f"Time entry {entry_id} is still running")

        self.time_entries.put(entry_id, entry.model_copy(update={
            "billing_invoice_id": invoice_id,
            "updated_at": self.db.clock(),
        }))

    async def generate_invoice_from_time_entries(
        self,
        project_id: int,
        time_entry_ids: list[int],
    ) -> Invoice:
        """
        Create a draft invoice for a set of unbilled entries of one project.

        Duplicate ids are collapsed, keeping the first occurrence. A repeat
        call with ids that were already billed fails, so retries must
        re-fetch the unbilled entries rather than reuse an old list.

        Args:
            project_id: Project being invoiced
            time_entry_ids: Entries to include

        Returns:
            Created invoice

        Raises:
            InvalidInputError: If the list is empty, any id is unknown, belongs
                to another project, is running or is already billed, or the
                project is not in the directory
        """
        entry_ids = list(dict.fromkeys(time_entry_ids))
        if not entry_ids:
            raise InvalidInputError("No time entries given for invoice")

        with self.db.transaction():
            invalid = self._find_unbillable(project_id, entry_ids)
            if invalid:
                raise InvalidInputError(
                    f"Time entries cannot be billed to project {project_id}: "
                    + ", ".join(str(i) for i in invalid),
                    invalid_ids=invalid,
                )

            project = self.directory.find_project(project_id)
            if project is None:
                raise InvalidInputError(f"Project {project_id} not found in directory")

            billing_settings = self.db.billing_settings
            entries = [self.time_entries.get(entry_id) for entry_id in entry_ids]
            amount = cost_calculator.sum_costs(entries)
            tax_amount = cost_calculator.calculate_tax(amount, billing_settings.tax_rate)

            now = self.db.clock()
            invoice_id = self.invoices.allocate_id()
            invoice = Invoice(
                id=invoice_id,
                invoice_number=f"INV-{now.year}-{invoice_id:04d}",
                project_id=project_id,
                client_id=project.client_id,
                time_entry_ids=entry_ids,
                amount=amount,
                tax_amount=tax_amount,
                total_amount=amount + tax_amount,
                status=InvoiceStatus.DRAFT,
                due_date=now.date() + timedelta(days=billing_settings.invoice_terms_days),
                description=f"{len(entry_ids)} time entries for {project.name}",
                created_at=now,
            )
            self.invoices.put(invoice.id, invoice)

            for entry_id in entry_ids:
                self._mark_billed(entry_id, invoice.id)

        logger.info(
            "Created invoice %s for project %s: %s entries, total %s",
            invoice.invoice_number, project_id, len(entry_ids), invoice.total_amount,
        )
        return invoice

    async def get_invoice(self, invoice_id: int) -> Invoice:
        """
        Get an invoice by ID.

        Raises:
            NotFoundError: If the invoice does not exist
        """
        with self.db.lock:
            return self._get_invoice_or_raise(invoice_id)

    async def list_invoices(self, project_id: Optional[int] = None) -> list[Invoice]:
        """List invoices, newest first."""
        with self.db.lock:
            invoices = self.invoices.values()

        if project_id is not None:
            invoices = [i for i in invoices if i.project_id == project_id]
        return sorted(invoices, key=lambda i: i.id, reverse=True)

    async def verify_invoice(self, invoice_id: int) -> bool:
        """
        Re-derive an invoice amount from its entries and compare.

        Returns:
            True if every entry still exists, points back at the invoice and
            their costs add up to the stored amount
        """
        with self.db.lock:
            invoice = self._get_invoice_or_raise(invoice_id)
            entries = [self.time_entries.get(entry_id) for entry_id in invoice.time_entry_ids]

        if any(e is None or e.billing_invoice_id != invoice_id for e in entries):
            return False
        return cost_calculator.sum_costs(entries) == invoice.amount

    async def get_billing_stats(self) -> BillingStats:
        """
        Outstanding unbilled work and this month's billed total.

        Returns:
            Billing statistics
        """
        # One lock so an invoice created meanwhile is not counted on both sides
        with self.db.lock:
            threshold = self.db.billing_settings.auto_billing_threshold
            unbilled = [e for e in self.time_entries.values() if e.is_billable]
            invoices = self.invoices.values()
            now = self.db.clock()

        grouped: dict[int, list[TimeEntry]] = {}
        for entry in unbilled:
            grouped.setdefault(entry.project_id, []).append(entry)

        amount = cost_calculator.sum_costs(unbilled)
        minutes = sum(e.duration_minutes for e in unbilled)
        over_threshold = sum(
            1 for entries in grouped.values()
            if cost_calculator.sum_costs(entries) > threshold
        )

        billed_this_month = sum(
            (
                invoice.total_amount
                for invoice in invoices
                if (invoice.created_at.year, invoice.created_at.month) == (now.year, now.month)
            ),
            Decimal("0.00"),
        )

        if minutes > 0:
            average_rate = cost_calculator.round_money(amount * 60 / Decimal(minutes))
        else:
            average_rate = Decimal("0.00")

        return BillingStats(
            total_unbilled_amount=amount,
            total_unbilled_hours=cost_calculator.minutes_to_hours(minutes),
            projects_over_threshold=over_threshold,
            total_billed_this_month=cost_calculator.round_money(billed_this_month),
            average_hourly_rate=average_rate,
        )
