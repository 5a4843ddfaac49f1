"""Settings service - runtime billing configuration."""
import logging

from timebill.models.billing import BillingSettings, BillingSettingsUpdate


logger = logging.getLogger(__name__)


class SettingsService:
    """Service for reading and changing billing settings."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db

    async def get_settings(self) -> BillingSettings:
        """Return the current billing settings."""
        return self.db.billing_settings

    async def update_settings(self, settings_update: BillingSettingsUpdate) -> BillingSettings:
        """
        Apply a partial update to the billing settings.

        A new default hourly rate only applies to timers started afterwards;
        running and stopped entries keep the rate they were started with.

        Args:
            settings_update: Fields to change

        Returns:
            Updated settings
        """
        changes = settings_update.model_dump(exclude_none=True)

        with self.db.lock:
            current = self.db.billing_settings.model_dump()
            self.db.billing_settings = BillingSettings(**{**current, **changes})

        if changes:
            logger.info("Billing settings updated: %s", ", ".join(sorted(changes)))
        return self.db.billing_settings
