"""Integration tests for database operations."""

import pytest

from procache.database.connection import Database
from procache.exceptions import PersistenceError


class TestDatabaseConnection:
    """Tests for Database class connection and schema."""

    @pytest.mark.asyncio
    async def test_connect_creates_tables(self, temp_db_path):
        """Test connect() creates schema tables."""
        db = Database(temp_db_path)
        await db.connect()

        rows = await db.execute_read(
            "SELECT name FROM sqlite_master WHERE type='table'"
        )
        table_names = [row[0] for row in rows]

        assert "cache_meta" in table_names
        assert "workorders" in table_names
        assert "routing_rows" in table_names
        assert "tracking_rows" in table_names
        assert "update_history" in table_names

        await db.close()

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, temp_db_path):
        db = Database(temp_db_path)
        await db.connect()
        await db.close()
        await db.connect()

        rows = await db.execute_read("SELECT 1")
        assert rows[0][0] == 1

        await db.close()

    @pytest.mark.asyncio
    async def test_read_before_connect(self, temp_db_path):
        with pytest.raises(PersistenceError):
            await Database(temp_db_path).execute_read("SELECT 1")


class TestDatabaseTransactions:
    """Tests for transaction support."""

    @pytest.mark.asyncio
    async def test_transaction_commits(self, test_database):
        async with test_database.transaction():
            await test_database.execute_write_no_commit(
                "INSERT INTO workorders (position, wo_index, status) VALUES (?, ?, ?)",
                [0, "24-0001", "ACTIVE"],
            )

        rows = await test_database.execute_read("SELECT wo_index FROM workorders")
        assert rows == [("24-0001",)]

    @pytest.mark.asyncio
    async def test_transaction_rolls_back(self, test_database):
        with pytest.raises(RuntimeError):
            async with test_database.transaction():
                await test_database.execute_write_no_commit(
                    "INSERT INTO workorders (position, wo_index, status) VALUES (?, ?, ?)",
                    [0, "24-0001", "ACTIVE"],
                )
                raise RuntimeError("abort")

        rows = await test_database.execute_read("SELECT COUNT(*) FROM workorders")
        assert rows[0][0] == 0

    @pytest.mark.asyncio
    async def test_write_no_commit_returns_row_id(self, test_database):
        async with test_database.transaction():
            first = await test_database.execute_write_no_commit(
                "INSERT INTO workorders (position, wo_index, status) VALUES (?, ?, ?)",
                [0, "24-0001", "ACTIVE"],
            )
            second = await test_database.execute_write_no_commit(
                "INSERT INTO workorders (position, wo_index, status) VALUES (?, ?, ?)",
                [1, "24-0002", "ACTIVE"],
            )
        assert second == first + 1
