"""Executors — run a migration body against the target store.

The runner never talks to a store's execution API directly; it is handed
an executor with a single ``run`` method.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from abc import ABC, abstractmethod

import aiosqlite

_logger = logging.getLogger(__name__)

_LINE_COMMENT = re.compile(r"--[^\n]*")


class Executor(ABC):
    @abstractmethod
    async def run(self, body: str) -> None:
        """Run the body. Store errors propagate unchanged."""
        ...


def split_statements(body: str) -> list[str]:
    """Split a SQL body into single statements.

    Semicolons inside string literals, comments and trigger bodies do not
    end a statement. A final statement without a semicolon is kept.
    """
    statements: list[str] = []
    buffer = ""
    parts = body.split(";")
    for i, part in enumerate(parts):
        buffer += part
        if i < len(parts) - 1:
            buffer += ";"
            if sqlite3.complete_statement(buffer):
                statements.append(buffer.strip())
                buffer = ""
    if _LINE_COMMENT.sub("", buffer).strip():
        statements.append(buffer.strip())
    return statements


class SqliteExecutor(Executor):
    """Runs bodies statement by statement on a shared connection.

    Not ``executescript``: it commits any open transaction before running.
    """

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def run(self, body: str) -> None:
        statements = split_statements(body)
        _logger.debug("Executing %d statement(s)", len(statements))
        for statement in statements:
            await self._db.execute(statement)
