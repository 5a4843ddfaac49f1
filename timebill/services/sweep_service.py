"""Sweep service - automatic billing across all projects."""
import logging

from timebill.models.billing import SweepFailure, SweepReport
from timebill.services import cost_calculator
from timebill.services.billing_service import BillingService


logger = logging.getLogger(__name__)


class SweepService:
    """Service for the automatic billing pass."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.billing = BillingService(db)

    async def run_automatic_billing(self) -> SweepReport:
        """
        Invoice every project whose unbilled total exceeds the threshold.

        Each project is reconciled in its own transaction with all of its
        entries that are unbilled at that moment. A project that fails is
        reported in ``failures`` and the sweep moves on. Running the sweep
        again straight away creates nothing, because the first pass already
        marked the entries billed.

        Returns:
            Report of invoices created and projects that failed
        """
        threshold = self.db.billing_settings.auto_billing_threshold
        report = SweepReport()

        grouped = await self.billing.unbilled_by_project()
        candidates = [
            project_id
            for project_id, entries in sorted(grouped.items())
            if cost_calculator.sum_costs(entries) > threshold
        ]

        for project_id in candidates:
            # Re-read so a concurrent manual invoice is not billed twice
            entries = await self.billing.get_unbilled_entries(project_id=project_id)
            if cost_calculator.sum_costs(entries) <= threshold:
                continue

            entry_ids = [entry.id for entry in reversed(entries)]
            try:
                invoice = await self.billing.generate_invoice_from_time_entries(
                    project_id, entry_ids
                )
            except Exception as e:
                logger.warning("Automatic billing failed for project %s: %s", project_id, e)
                report.failures.append(SweepFailure(project_id=project_id, reason=str(e)))
                continue

            report.projects_billed += 1
            report.invoices_created += 1
            report.total_amount_billed += invoice.total_amount
            report.invoice_ids.append(invoice.id)

        logger.info(
            "Automatic billing: %s invoices, total %s, %s failures",
            report.invoices_created, report.total_amount_billed, len(report.failures),
        )
        return report
