"""Shared test fixtures — RecordingExecutor for testing without a database."""

from __future__ import annotations

import os
import tempfile

import pytest
import pytest_asyncio
import structlog

from schemaledger.events.bus import EventBus
from schemaledger.executor import Executor
from schemaledger.ledger.memory import InMemoryLedger
from schemaledger.store import SqliteStore


class RecordingExecutor(Executor):
    """Executor that remembers bodies instead of running them."""

    def __init__(self, fail_on: set[str] | None = None):
        self._fail_on = fail_on or set()
        self.bodies: list[str] = []  # every body run, in order

    async def run(self, body: str) -> None:
        if body in self._fail_on:
            raise RuntimeError(f"boom: {body}")
        self.bodies.append(body)


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def ledger():
    return InMemoryLedger()


@pytest.fixture
def decisions():
    """Every decision event the ``event_bus`` fixture delivered, in order."""
    return []


@pytest.fixture
def event_bus(decisions):
    bus = EventBus()

    async def record(event):
        decisions.append(event)

    bus.subscribe(record)
    return bus


@pytest.fixture
def db_path():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    os.unlink(path)


@pytest_asyncio.fixture
async def store(db_path):
    store = SqliteStore(db_path)
    await store.open()
    yield store
    await store.close()


@pytest.fixture(autouse=True)
def reset_structlog():
    # CLI commands bind structlog to the stream that was stderr at the time
    yield
    structlog.reset_defaults()
