"""
Store Gateway

Narrow execute/query interface over the payment database.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Mapping, Optional

from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.expression import Executable


class StoreGateway:
    """
    Scoped access to the database for the ledger and the recorder.

    Each call without an explicit session checks a connection out of the
    pool, runs in its own transaction and returns the connection, even when
    the statement fails. Callers that need several statements to commit
    together open ``transaction()`` and pass the yielded session along.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize with the session factory that owns the pool."""
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on normal exit, roll back on any exception."""
        async with self._session_factory() as session:
            async with session.begin():
                yield session

    async def execute(
        self,
        statement: Executable,
        params: Optional[Mapping[str, Any]] = None,
        *,
        session: Optional[AsyncSession] = None,
    ) -> None:
        """
        Execute a parameterized statement.

        Args:
            statement: Statement to run
            params: Bound parameters
            session: Session of an enclosing ``transaction()``, if any
        """
        if session is not None:
            await session.execute(statement, params)
            return

        async with self.transaction() as own_session:
            await own_session.execute(statement, params)

    async def query(
        self,
        statement: Executable,
        params: Optional[Mapping[str, Any]] = None,
        *,
        session: Optional[AsyncSession] = None,
    ) -> List[Row]:
        """
        Execute a parameterized query and return all rows.

        Args:
            statement: Query to run
            params: Bound parameters
            session: Session of an enclosing ``transaction()``, if any

        Returns:
            List of result rows (empty when nothing matched)
        """
        if session is not None:
            result = await session.execute(statement, params)
            return list(result.all())

        async with self.transaction() as own_session:
            result = await own_session.execute(statement, params)
            return list(result.all())
