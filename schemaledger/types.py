"""Core types shared across the ledger, runner and loader."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TypeAlias

from pydantic import BaseModel, Field

# ── ID Types ──────────────────────────────────────────────────────────────────

MigrationId: TypeAlias = str
Digest: TypeAlias = str


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Migrations ───────────────────────────────────────────────────────────────


class MigrationInput(BaseModel):
    """One migration as supplied by a loader. Never persisted."""

    id: MigrationId
    body: str


class MigrationRecord(BaseModel):
    """A migration that has been durably applied.

    Records are written once and never updated or deleted.
    """

    id: MigrationId
    digest: Digest
    applied_at: datetime | None = None


# ── Outcomes ─────────────────────────────────────────────────────────────────


class Outcome(str, Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"


class ApplyResult(BaseModel):
    """What the runner decided for a single migration."""

    migration_id: MigrationId
    outcome: Outcome
    digest: Digest


class RunReport(BaseModel):
    """Outcome of applying an ordered list of migrations."""

    results: list[ApplyResult] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utc_now)

    @property
    def applied(self) -> list[MigrationId]:
        return [r.migration_id for r in self.results if r.outcome == Outcome.APPLIED]

    @property
    def skipped(self) -> list[MigrationId]:
        return [r.migration_id for r in self.results if r.outcome == Outcome.SKIPPED]
