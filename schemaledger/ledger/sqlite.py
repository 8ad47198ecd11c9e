"""SQLite-backed migration ledger.

The ledger shares its connection with the executor so that looking up,
running and recording a migration all happen inside one transaction.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

import aiosqlite

from schemaledger.exceptions import AlreadyExistsError, ExecutionError
from schemaledger.ledger.base import MigrationLedger
from schemaledger.types import Digest, MigrationId, MigrationRecord, utc_now

_logger = logging.getLogger(__name__)

DEFAULT_TABLE = "_migrations"


class SqliteLedger(MigrationLedger):
    """Append-only ledger table in a SQLite database.

    The connection must be opened with ``isolation_level=None`` so that
    transactions are controlled explicitly by :meth:`transaction`.
    """

    def __init__(self, db: aiosqlite.Connection, table: str = DEFAULT_TABLE) -> None:
        self._db = db
        self._table = table
        self._transaction_open = False

    @property
    def table(self) -> str:
        return self._table

    async def ensure(self) -> None:
        """Create the ledger table if needed."""
        await self._db.execute(f"""
            CREATE TABLE IF NOT EXISTS {self._table} (
                id TEXT PRIMARY KEY,
                digest TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
        """)
        _logger.debug("Ledger table %s ready", self._table)

    async def lookup(self, migration_id: MigrationId) -> Digest | None:
        cursor = await self._db.execute(
            f"SELECT digest FROM {self._table} WHERE id = ?",
            (migration_id,),
        )
        row = await cursor.fetchone()
        await cursor.close()
        return row[0] if row is not None else None

    async def record(self, migration_id: MigrationId, digest: Digest) -> None:
        """Insert a record (immutable append).

        Inside :meth:`transaction`, refuses to write once the transaction
        was ended early (a body running COMMIT, END or ROLLBACK): the insert
        would no longer be atomic with the body.
        """
        if self._transaction_open and not self._db.in_transaction:
            raise ExecutionError(
                migration_id,
                RuntimeError("migration body ended the ledger transaction"),
            )
        try:
            await self._db.execute(
                f"INSERT INTO {self._table} (id, digest, applied_at) VALUES (?, ?, ?)",
                (migration_id, digest, utc_now().isoformat()),
            )
        except aiosqlite.IntegrityError as exc:
            raise AlreadyExistsError(migration_id) from exc

    async def records(self) -> list[MigrationRecord]:
        cursor = await self._db.execute(
            f"SELECT id, digest, applied_at FROM {self._table} ORDER BY rowid"
        )
        rows = await cursor.fetchall()
        await cursor.close()
        return [
            MigrationRecord(
                id=row[0],
                digest=row[1],
                applied_at=datetime.fromisoformat(row[2]),
            )
            for row in rows
        ]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        # IMMEDIATE takes the write lock up front, so a competing runner
        # blocks here and then sees whatever the winner recorded.
        await self._db.execute("BEGIN IMMEDIATE")
        self._transaction_open = True
        try:
            yield
        except BaseException:
            # Some errors make SQLite roll back on its own.
            if self._db.in_transaction:
                await self._db.execute("ROLLBACK")
            _logger.debug("Rolled back migration transaction")
            raise
        else:
            await self._db.execute("COMMIT")
        finally:
            self._transaction_open = False

    def __repr__(self) -> str:
        return f"SqliteLedger(table={self._table!r})"
