"""In-memory ledger — same contract as the SQLite ledger, no persistence."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from schemaledger.exceptions import AlreadyExistsError
from schemaledger.ledger.base import MigrationLedger
from schemaledger.types import Digest, MigrationId, MigrationRecord, utc_now


class InMemoryLedger(MigrationLedger):
    """Dict-backed ledger.

    Transactions are serialized by a lock, like SQLite's write lock, so a
    rollback only ever discards the failing transaction's own inserts.
    """

    def __init__(self) -> None:
        self._records: dict[MigrationId, MigrationRecord] = {}
        self._lock = asyncio.Lock()
        self.commits = 0
        self.rollbacks = 0

    async def ensure(self) -> None:
        pass

    async def lookup(self, migration_id: MigrationId) -> Digest | None:
        record = self._records.get(migration_id)
        return record.digest if record else None

    async def record(self, migration_id: MigrationId, digest: Digest) -> None:
        if migration_id in self._records:
            raise AlreadyExistsError(migration_id)
        self._records[migration_id] = MigrationRecord(
            id=migration_id, digest=digest, applied_at=utc_now()
        )

    async def records(self) -> list[MigrationRecord]:
        # dicts keep insertion order
        return list(self._records.values())

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            before = set(self._records)
            try:
                yield
            except BaseException:
                for migration_id in set(self._records) - before:
                    del self._records[migration_id]
                self.rollbacks += 1
                raise
            self.commits += 1

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"InMemoryLedger(records={len(self._records)})"
