"""In-memory arena holding the engine's collections."""
import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from timebill.config import settings
from timebill.models.billing import BillingSettings
from timebill.utils.clock import Clock, utcnow


logger = logging.getLogger(__name__)

COLLECTIONS = ("time_entries", "invoices", "projects", "tasks")


class Collection:
    """
    Dictionary of records keyed by stable integer ids.

    Ids handed out by ``allocate_id`` increase monotonically and are never
    reused, even when a transaction that allocated them is rolled back.
    """

    def __init__(self, name: str):
        self.name = name
        self._items: dict[int, Any] = {}
        self._next_id = 1

    def allocate_id(self) -> int:
        item_id = self._next_id
        self._next_id += 1
        return item_id

    def put(self, item_id: int, item: Any) -> None:
        """Insert or replace a record, keeping the id counter ahead of it."""
        self._items[item_id] = item
        if item_id >= self._next_id:
            self._next_id = item_id + 1

    def get(self, item_id: int) -> Optional[Any]:
        return self._items.get(item_id)

    def remove(self, item_id: int) -> bool:
        return self._items.pop(item_id, None) is not None

    def values(self) -> list[Any]:
        return list(self._items.values())

    def snapshot(self) -> dict[int, Any]:
        return dict(self._items)

    def restore(self, items: dict[int, Any]) -> None:
        self._items = dict(items)

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)


class Database:
    """
    Arena connection manager.

    Records are immutable pydantic models; writers replace them with updated
    copies, so a shallow snapshot of each collection is enough to roll back.
    """

    def __init__(self, clock: Clock = utcnow):
        self.lock = threading.RLock()
        self.clock = clock
        self.connected = False
        self.billing_settings: BillingSettings = self._initial_settings()
        self._collections = {name: Collection(name) for name in COLLECTIONS}

    @staticmethod
    def _initial_settings() -> BillingSettings:
        return BillingSettings(
            default_hourly_rate=settings.default_hourly_rate,
            tax_rate=settings.tax_rate,
            auto_billing_threshold=settings.auto_billing_threshold,
            invoice_terms_days=settings.invoice_terms_days,
        )

    async def connect(self) -> None:
        """Start with empty collections and configured billing settings."""
        with self.lock:
            self._collections = {name: Collection(name) for name in COLLECTIONS}
            self.billing_settings = self._initial_settings()
            self.connected = True
        logger.info("Arena ready with collections: %s", ", ".join(COLLECTIONS))

    async def disconnect(self) -> None:
        """Drop all state."""
        with self.lock:
            self.connected = False
        logger.info("Arena closed")

    def __getitem__(self, name: str) -> Collection:
        """Get a collection."""
        return self._collections[name]

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """
        Hold the arena lock for a block, undoing its writes if it raises.

        Nested transactions on the same thread share the outer lock; each
        level restores its own snapshot.
        """
        with self.lock:
            snapshots = {
                name: collection.snapshot()
                for name, collection in self._collections.items()
            }
            billing_settings = self.billing_settings
            try:
                yield self
            except Exception:
                for name, items in snapshots.items():
                    self._collections[name].restore(items)
                self.billing_settings = billing_settings
                logger.warning("Transaction rolled back")
                raise


# Global database instance
database = Database()


async def get_database() -> Database:
    """Dependency to get database instance."""
    if not database.connected:
        raise RuntimeError("Database not connected")
    return database
