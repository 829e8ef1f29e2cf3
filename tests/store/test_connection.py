"""
Persistence adapter tests: pool lifecycle and users table bootstrap
"""

import pytest

from database import connection


class TestInitDatabase:

    @pytest.mark.asyncio
    async def test_creates_pool_and_users_table(self, monkeypatch, detached_pool):
        pool = detached_pool
        captured = {}

        async def fake_create_pool(dsn, **kwargs):
            captured["dsn"] = dsn
            captured.update(kwargs)
            return pool

        monkeypatch.setattr(connection, "db_pool", None)
        monkeypatch.setattr(connection.asyncpg, "create_pool", fake_create_pool)

        await connection.init_database()

        assert connection.get_db_pool() is pool
        assert captured["dsn"] == connection.DATABASE_URL
        assert captured["min_size"] == connection.DB_POOL_MIN_SIZE
        assert captured["max_size"] == connection.DB_POOL_MAX_SIZE
        [(method, query, params)] = pool.conn.calls
        assert method == "execute"
        assert query == "CREATE TABLE IF NOT EXISTS users ( id SERIAL PRIMARY KEY, name TEXT, email TEXT )"

    @pytest.mark.asyncio
    async def test_connection_failure_aborts_startup(self, monkeypatch):
        async def refuse(dsn, **kwargs):
            raise ConnectionRefusedError("no database")

        monkeypatch.setattr(connection, "db_pool", None)
        monkeypatch.setattr(connection.asyncpg, "create_pool", refuse)

        with pytest.raises(ConnectionRefusedError):
            await connection.init_database()

        assert connection.get_db_pool() is None

    @pytest.mark.asyncio
    async def test_table_bootstrap_failure_aborts_startup(self, monkeypatch, detached_pool):
        pool = detached_pool
        pool.conn.error = ConnectionRefusedError("dropped")

        async def fake_create_pool(dsn, **kwargs):
            return pool

        monkeypatch.setattr(connection, "db_pool", None)
        monkeypatch.setattr(connection.asyncpg, "create_pool", fake_create_pool)

        with pytest.raises(ConnectionRefusedError):
            await connection.init_database()


class TestCloseDatabase:

    @pytest.mark.asyncio
    async def test_closes_pool(self, fake_pool):
        await connection.close_database()

        assert fake_pool.closed
        assert connection.get_db_pool() is None

    @pytest.mark.asyncio
    async def test_noop_without_pool(self, monkeypatch):
        monkeypatch.setattr(connection, "db_pool", None)

        await connection.close_database()

        assert connection.get_db_pool() is None
