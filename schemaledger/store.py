"""SQLite store — one connection shared by the ledger and the executor."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

from schemaledger.executor import SqliteExecutor
from schemaledger.ledger.sqlite import DEFAULT_TABLE, SqliteLedger

_logger = logging.getLogger(__name__)


class SqliteStore:
    """Opens the database and wires a ledger and an executor onto it.

    Usage:
        async with SqliteStore("app.db") as store:
            runner = MigrationRunner(store.ledger, store.executor)
            await runner.apply_all(migrations)
    """

    def __init__(
        self,
        db_path: str | Path,
        table: str = DEFAULT_TABLE,
        busy_timeout: float = 5.0,
    ) -> None:
        self._db_path = str(db_path)
        self._table = table
        self._busy_timeout = busy_timeout
        self._db: aiosqlite.Connection | None = None
        self.ledger: SqliteLedger | None = None
        self.executor: SqliteExecutor | None = None

    async def open(self) -> None:
        """Connect and bootstrap the ledger table."""
        if self._db is not None:
            return
        self._db = await aiosqlite.connect(
            self._db_path,
            isolation_level=None,
            timeout=self._busy_timeout,
        )
        self.ledger = SqliteLedger(self._db, table=self._table)
        self.executor = SqliteExecutor(self._db)
        await self.ledger.ensure()
        _logger.info("Opened %s (ledger table %s)", self._db_path, self._table)

    async def close(self) -> None:
        if self._db is not None:
            await self._db.close()
            self._db = None
            self.ledger = None
            self.executor = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._db is None:
            raise RuntimeError("SqliteStore is not open")
        return self._db

    async def __aenter__(self) -> SqliteStore:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"SqliteStore(db_path={self._db_path!r}, table={self._table!r})"
