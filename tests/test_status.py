"""Tests for migration status reporting."""

import pytest

from schemaledger.digest import compute_digest
from schemaledger.runner import MigrationRunner
from schemaledger.status import migration_status
from schemaledger.types import MigrationInput


@pytest.mark.asyncio
async def test_status_classifies_migrations(ledger, executor):
    runner = MigrationRunner(ledger, executor)
    await runner.apply("0001", "b1")
    await runner.apply("0002", "b2")
    await runner.apply("0000 retired", "old")

    report = await migration_status(ledger, [
        MigrationInput(id="0001", body="b1"),
        MigrationInput(id="0002", body="b2 edited"),
        MigrationInput(id="0003", body="b3"),
    ])

    assert [r.id for r in report.applied] == ["0001"]
    assert report.pending == ["0003"]
    assert [m.migration_id for m in report.modified] == ["0002"]
    assert report.modified[0].expected_digest == compute_digest("b2")
    assert report.modified[0].actual_digest == compute_digest("b2 edited")
    assert [r.id for r in report.unknown] == ["0000 retired"]
    assert not report.clean


@pytest.mark.asyncio
async def test_status_is_read_only(ledger, executor):
    report = await migration_status(ledger, [MigrationInput(id="0001", body="b1")])
    assert report.pending == ["0001"]
    assert report.clean
    assert await ledger.records() == []
    assert executor.bodies == []
