"""Tests for the in-memory arena."""
import pytest


class TestCollection:
    """Tests for Collection."""

    def test_ids_are_monotonic(self):
        """Test allocated ids increase and are not reused."""
        from timebill.database import Collection

        collection = Collection("things")
        first = collection.allocate_id()
        collection.put(first, "a")
        collection.remove(first)

        assert collection.allocate_id() == first + 1

    def test_put_with_explicit_id_advances_counter(self):
        """Test externally chosen ids do not collide with allocated ones."""
        from timebill.database import Collection

        collection = Collection("projects")
        collection.put(10, "p")

        assert collection.allocate_id() == 11

    def test_remove_missing(self):
        """Test removing an unknown id returns False."""
        from timebill.database import Collection

        assert Collection("things").remove(1) is False


@pytest.mark.asyncio
class TestTransaction:
    """Tests for Database.transaction."""

    async def test_commit(self, db):
        """Test writes survive a clean block."""
        with db.transaction():
            db["invoices"].put(1, "invoice")

        assert db["invoices"].get(1) == "invoice"

    async def test_rollback(self, db):
        """Test writes are undone when the block raises."""
        db["time_entries"].put(1, "before")

        with pytest.raises(ValueError):
            with db.transaction():
                db["time_entries"].put(1, "after")
                db["invoices"].put(db["invoices"].allocate_id(), "invoice")
                raise ValueError("fail")

        assert db["time_entries"].get(1) == "before"
        assert len(db["invoices"]) == 0
        assert db["invoices"].allocate_id() == 2

    async def test_nested_rollback_keeps_outer_writes(self, db):
        """Test an inner failure only undoes the inner block."""
        with db.transaction():
            db["invoices"].put(1, "outer")
            with pytest.raises(ValueError):
                with db.transaction():
                    db["invoices"].put(2, "inner")
                    raise ValueError("fail")

        assert db["invoices"].get(1) == "outer"
        assert db["invoices"].get(2) is None

    async def test_connect_resets_state(self, db):
        """Test reconnecting starts empty."""
        db["invoices"].put(1, "invoice")

        await db.connect()

        assert len(db["invoices"]) == 0


@pytest.mark.asyncio
class TestGetDatabase:
    """Tests for the database dependency."""

    async def test_not_connected(self):
        """Test the dependency refuses a disconnected arena."""
        from timebill.database import database, get_database

        await database.disconnect()

        with pytest.raises(RuntimeError, match="not connected"):
            await get_database()
