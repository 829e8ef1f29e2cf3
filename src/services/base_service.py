"""
Base service layer for database operations on a single table
"""

import logging
from typing import Dict, Any, List, Optional, Callable, Awaitable
from dataclasses import dataclass

import asyncpg

from database.connection import get_db_pool

logger = logging.getLogger(__name__)

# Failures of the store that must become per-request errors instead of crashing the worker.
# asyncio.TimeoutError from command_timeout is an OSError subclass.
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None


class BaseService:
    """Base service wrapping pool access and error translation for one table"""

    def __init__(self, table_name: str, fields: List[str], pk_field: str = "id"):
        self.table_name = table_name
        self.fields = fields
        self.pk_field = pk_field
        logger.info(f"BaseService initialized for table: {table_name}")

    @property
    def select_list(self) -> str:
        return ", ".join([self.pk_field] + self.fields)

    def not_found(self, record_id: Any) -> ServiceResult:
        return ServiceResult(
            success=False,
            error=f"Record not found in {self.table_name} with ID: {record_id}",
            error_type="RESOURCE_NOT_FOUND"
        )

    async def run(self, operation: str, executor: Callable[[Any], Awaitable[ServiceResult]]) -> ServiceResult:
        """
        Run a store call on a pooled connection

        Args:
            operation: Name used in log lines (READ, INSERT, ...)
            executor: Coroutine function taking a connection and returning a ServiceResult

        Returns:
            The executor's ServiceResult, or a DATABASE_ERROR result when the
            pool is missing or the store call fails
        """
        db_pool = get_db_pool()
        if not db_pool:
            logger.error(f"{operation} on {self.table_name} failed: database pool not initialized")
            return ServiceResult(
                success=False,
                error="Database pool not initialized",
                error_type="DATABASE_ERROR"
            )

        try:
            async with db_pool.acquire() as conn:
                return await executor(conn)
        except STORE_ERRORS as e:
            logger.error(f"Database error during {operation} on {self.table_name}: {e}")
            return ServiceResult(
                success=False,
                error=f"Database {operation} failed: {str(e)}",
                error_type="DATABASE_ERROR"
            )

    async def fetch_all(self, query: str, *params) -> ServiceResult:
        """Execute a row-returning statement and collect every row"""
        async def executor(conn) -> ServiceResult:
            logger.info(f"Executing READ query: {query}")
            rows = await conn.fetch(query, *params)
            data = [dict(row) for row in rows]
            return ServiceResult(success=True, data=data, count=len(data))

        return await self.run("READ", executor)

    async def fetch_one(self, operation: str, query: str, *params) -> ServiceResult:
        """Execute a statement returning at most one row; no row is reported as count=0"""
        async def executor(conn) -> ServiceResult:
            logger.info(f"Executing {operation}: {query}")
            logger.info(f"Parameters: {list(params)}")
            row = await conn.fetchrow(query, *params)
            data = [dict(row)] if row else []
            return ServiceResult(success=True, data=data, count=len(data))

        return await self.run(operation, executor)

    async def execute(self, operation: str, query: str, *params) -> ServiceResult:
        """
        Execute a statement without returned rows

        asyncpg returns the command tag ("DELETE N"); the affected-row count
        is reported through ServiceResult.count.
        """
        async def executor(conn) -> ServiceResult:
            logger.info(f"Executing {operation}: {query}")
            logger.info(f"Parameters: {list(params)}")
            status = await conn.execute(query, *params)
            return ServiceResult(success=True, data=[], count=parse_affected_rows(status))

        return await self.run(operation, executor)


def parse_affected_rows(status: Optional[str]) -> int:
    """Parse the row count out of a command tag such as 'DELETE 1' or 'UPDATE 0'"""
    if not status:
        return 0
    try:
        return int(status.split()[-1])
    except ValueError:
        return 0
