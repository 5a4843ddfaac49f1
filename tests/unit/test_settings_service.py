"""Tests for SettingsService and DirectoryService."""
import pytest
from decimal import Decimal
from pydantic import ValidationError


@pytest.mark.asyncio
class TestSettingsService:
    """Tests for billing settings."""

    async def test_defaults(self, db):
        """Test settings start from configuration."""
        from timebill.services.settings_service import SettingsService

        current = await SettingsService(db).get_settings()

        assert current.default_hourly_rate == Decimal("85.00")
        assert current.tax_rate == Decimal("0")
        assert current.auto_billing_threshold == Decimal("0.00")
        assert current.invoice_terms_days == 30

    async def test_partial_update(self, db):
        """Test omitted fields keep their value."""
        from timebill.models.billing import BillingSettingsUpdate
        from timebill.services.settings_service import SettingsService

        service = SettingsService(db)
        updated = await service.update_settings(BillingSettingsUpdate(tax_rate=Decimal("0.15")))

        assert updated.tax_rate == Decimal("0.15")
        assert updated.default_hourly_rate == Decimal("85.00")
        assert (await service.get_settings()).tax_rate == Decimal("0.15")

    async def test_invalid_values_rejected(self):
        """Test negative rates and tax above 100% are rejected."""
        from timebill.models.billing import BillingSettingsUpdate

        with pytest.raises(ValidationError):
            BillingSettingsUpdate(default_hourly_rate=Decimal("-1"))
        with pytest.raises(ValidationError):
            BillingSettingsUpdate(tax_rate=Decimal("1.5"))


@pytest.mark.asyncio
class TestDirectoryService:
    """Tests for the project directory."""

    async def test_register_and_get(self, db):
        """Test registering and reading projects."""
        from timebill.models.project import ProjectCreate
        from timebill.services.directory_service import DirectoryService

        service = DirectoryService(db)
        await service.register_project(ProjectCreate(id=2, name="App", client_id=5))
        await service.register_project(ProjectCreate(id=1, name="Site", client_id=4))

        project = await service.get_project(2)

        assert project.client_id == 5
        assert [p.id for p in await service.list_projects()] == [1, 2]
        assert service.project_names() == {1: "Site", 2: "App"}

    async def test_get_unknown_project(self, db):
        """Test unknown project ids."""
        from timebill.exceptions import NotFoundError
        from timebill.services.directory_service import DirectoryService

        with pytest.raises(NotFoundError):
            await DirectoryService(db).get_project(1)

    async def test_register_task(self, db):
        """Test tasks need a known project."""
        from timebill.exceptions import NotFoundError
        from timebill.models.project import ProjectCreate, TaskCreate
        from timebill.services.directory_service import DirectoryService

        service = DirectoryService(db)
        await service.register_project(ProjectCreate(id=1, name="Site", client_id=4))

        task = await service.register_task(1, TaskCreate(id=10, title="Login page"))

        assert task.project_id == 1
        assert service.task_names() == {10: "Login page"}
        with pytest.raises(NotFoundError):
            await service.register_task(2, TaskCreate(id=11, title="Orphan"))
