"""Decision events — one typed event per runner decision.

Subscribers register for a topic pattern; "migration.*" receives all
of them. Handlers run in subscription order. A failing handler is logged
and never interrupts a migration run.
"""

from __future__ import annotations

import fnmatch
import logging
from datetime import datetime
from typing import Awaitable, Callable

from pydantic import BaseModel, Field

from schemaledger.types import Digest, MigrationId, utc_now

_logger = logging.getLogger(__name__)

APPLYING = "migration.applying"
APPLIED = "migration.applied"
SKIPPED = "migration.skipped"
CONFLICT = "migration.conflict"
FAILED = "migration.failed"
RACE_LOST = "migration.race_lost"


class MigrationEvent(BaseModel):
    topic: str
    migration_id: MigrationId
    digest: Digest = ""
    expected_digest: Digest = ""  # conflict only
    actual_digest: Digest = ""  # conflict only
    error: str = ""
    attempt: int = 0  # race_lost only
    timestamp: datetime = Field(default_factory=utc_now)


EventHandler = Callable[[MigrationEvent], Awaitable[None]]


class EventBus:
    def __init__(self) -> None:
        self._subscribers: list[tuple[str, EventHandler]] = []

    def subscribe(self, handler: EventHandler, pattern: str = "migration.*") -> None:
        self._subscribers.append((pattern, handler))

    async def emit(self, event: MigrationEvent) -> None:
        for pattern, handler in self._subscribers:
            if not fnmatch.fnmatch(event.topic, pattern):
                continue
            try:
                await handler(event)
            except Exception:
                _logger.exception("Event handler failed for %s", event.topic)
