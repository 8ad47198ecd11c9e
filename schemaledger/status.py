"""Status reporting — compare a migration set against the ledger without applying."""

from __future__ import annotations

from typing import Iterable

from pydantic import BaseModel, Field

from schemaledger.digest import DEFAULT_ALGORITHM, compute_digest
from schemaledger.ledger.base import MigrationLedger
from schemaledger.types import Digest, MigrationId, MigrationInput, MigrationRecord


class ModifiedMigration(BaseModel):
    migration_id: MigrationId
    expected_digest: Digest
    actual_digest: Digest


class StatusReport(BaseModel):
    applied: list[MigrationRecord] = Field(default_factory=list)
    pending: list[MigrationId] = Field(default_factory=list)
    modified: list[ModifiedMigration] = Field(default_factory=list)
    unknown: list[MigrationRecord] = Field(default_factory=list)

    @property
    def clean(self) -> bool:
        """True when no applied migration has changed."""
        return not self.modified


async def migration_status(
    ledger: MigrationLedger,
    migrations: Iterable[MigrationInput],
    digest_algorithm: str = DEFAULT_ALGORITHM,
) -> StatusReport:
    """Classify each migration as applied, pending or modified.

    Ledger records with no matching input are reported as unknown.
    """
    recorded = {r.id: r for r in await ledger.records()}
    report = StatusReport()
    seen: set[MigrationId] = set()

    for migration in migrations:
        seen.add(migration.id)
        record = recorded.get(migration.id)
        if record is None:
            report.pending.append(migration.id)
            continue
        digest = compute_digest(migration.body, digest_algorithm)
        if digest == record.digest:
            report.applied.append(record)
        else:
            report.modified.append(
                ModifiedMigration(
                    migration_id=migration.id,
                    expected_digest=record.digest,
                    actual_digest=digest,
                )
            )

    report.unknown = [r for r_id, r in recorded.items() if r_id not in seen]
    return report
