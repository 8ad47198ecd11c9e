"""Abstract base for migration ledgers.

A ledger is insert-only: a record is written once, when its migration
first succeeds, and is never updated or deleted afterwards.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncContextManager

from schemaledger.types import Digest, MigrationId, MigrationRecord


class MigrationLedger(ABC):
    """Durable store of (id, digest) pairs."""

    @abstractmethod
    async def ensure(self) -> None:
        """Create the ledger storage if it does not exist yet."""
        ...

    @abstractmethod
    async def lookup(self, migration_id: MigrationId) -> Digest | None:
        """Return the recorded digest for an id, or None if never applied."""
        ...

    @abstractmethod
    async def record(self, migration_id: MigrationId, digest: Digest) -> None:
        """Append a record. Raises AlreadyExistsError if the id is present."""
        ...

    @abstractmethod
    async def records(self) -> list[MigrationRecord]:
        """All records, oldest first."""
        ...

    @abstractmethod
    def transaction(self) -> AsyncContextManager[None]:
        """One atomic unit: commit on clean exit, roll back on any exception."""
        ...
