"""Migration runner — decides, per migration, whether to apply, skip or reject.

For every (id, body) the runner compares the body's digest with the one
the ledger recorded:

  - no record:        run the body, then record its digest
  - same digest:      already applied, nothing to do
  - different digest: ConflictError, nothing is run or recorded

Lookup, execution and record happen inside one ledger transaction, so a
failing body never leaves a record behind.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from schemaledger.digest import DEFAULT_ALGORITHM, compute_digest
from schemaledger.events import bus as events
from schemaledger.events.bus import EventBus
from schemaledger.exceptions import AlreadyExistsError, ConflictError
from schemaledger.executor import Executor
from schemaledger.ledger.base import MigrationLedger
from schemaledger.types import (
    ApplyResult,
    Digest,
    MigrationId,
    MigrationInput,
    Outcome,
    RunReport,
)

logger = structlog.get_logger()


class MigrationRunner:
    """Applies migrations in caller order against an injected ledger and executor."""

    def __init__(
        self,
        ledger: MigrationLedger,
        executor: Executor,
        event_bus: EventBus | None = None,
        digest_algorithm: str = DEFAULT_ALGORITHM,
        max_race_retries: int = 3,
    ) -> None:
        self._ledger = ledger
        self._executor = executor
        self._event_bus = event_bus
        self._digest_algorithm = digest_algorithm
        self._max_race_retries = max_race_retries

    async def apply(self, migration_id: MigrationId, body: str) -> ApplyResult:
        """Apply one migration, or skip it if it already ran with this content.

        Raises ConflictError if it ran before with different content. Errors
        from the executor propagate unchanged.
        """
        digest = compute_digest(body, self._digest_algorithm)
        attempts = 0
        while True:
            try:
                return await self._apply_once(migration_id, body, digest)
            except AlreadyExistsError:
                # Another runner recorded this id between our lookup and
                # insert; our transaction rolled back, so decide again.
                attempts += 1
                await self._emit(events.RACE_LOST, migration_id, attempt=attempts)
                if attempts > self._max_race_retries:
                    logger.error(
                        "lost race too many times",
                        migration_id=migration_id,
                        attempts=attempts,
                    )
                    raise
                logger.warning(
                    "concurrent runner recorded migration, re-checking",
                    migration_id=migration_id,
                    attempt=attempts,
                )

    async def apply_all(self, migrations: Iterable[MigrationInput]) -> RunReport:
        """Apply migrations strictly in order, stopping at the first failure.

        Migrations before the failing one stay committed.
        """
        report = RunReport()
        for migration in migrations:
            result = await self.apply(migration.id, migration.body)
            report.results.append(result)
        logger.info(
            "migration run finished",
            applied=len(report.applied),
            skipped=len(report.skipped),
        )
        return report

    async def _apply_once(
        self, migration_id: MigrationId, body: str, digest: Digest
    ) -> ApplyResult:
        try:
            async with self._ledger.transaction():
                known = await self._ledger.lookup(migration_id)
                if known is None:
                    logger.info(
                        "new migration, applying",
                        migration_id=migration_id,
                        digest=digest,
                    )
                    await self._emit(events.APPLYING, migration_id, digest=digest)
                    await self._executor.run(body)
                    await self._ledger.record(migration_id, digest)
                    outcome = Outcome.APPLIED
                elif known == digest:
                    outcome = Outcome.SKIPPED
                else:
                    raise ConflictError(migration_id, known, digest)
        except ConflictError as exc:
            logger.error(
                "conflict detected",
                migration_id=migration_id,
                expected_digest=exc.expected_digest,
                actual_digest=exc.actual_digest,
            )
            await self._emit(
                events.CONFLICT,
                migration_id,
                expected_digest=exc.expected_digest,
                actual_digest=exc.actual_digest,
            )
            raise
        except AlreadyExistsError:
            raise
        except Exception as exc:
            logger.error("migration failed", migration_id=migration_id, error=str(exc))
            await self._emit(events.FAILED, migration_id, digest=digest, error=str(exc))
            raise

        if outcome == Outcome.APPLIED:
            logger.info("migration applied", migration_id=migration_id, digest=digest)
            await self._emit(events.APPLIED, migration_id, digest=digest)
        else:
            logger.info(
                "already applied, skipping",
                migration_id=migration_id,
                digest=digest,
            )
            await self._emit(events.SKIPPED, migration_id, digest=digest)
        return ApplyResult(migration_id=migration_id, outcome=outcome, digest=digest)

    async def _emit(self, topic: str, migration_id: MigrationId, **fields) -> None:
        if self._event_bus is not None:
            await self._event_bus.emit(
                events.MigrationEvent(topic=topic, migration_id=migration_id, **fields)
            )
