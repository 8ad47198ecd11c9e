"""Reference loader — turns SQL files into ordered (id, body) pairs.

Two layouts are supported:

  - a directory of ``*.sql`` files, applied in file-name order; the id is
    the file stem with underscores read as spaces, so
    ``0001_create_documents.sql`` becomes ``"0001 create documents"``
  - a single script where each migration starts with a header line
    ``-- migration: <id>``

Bodies are returned exactly as written; the digest is taken over them.
"""

from __future__ import annotations

import re
from pathlib import Path

from schemaledger.exceptions import ScriptFormatError
from schemaledger.types import MigrationInput

MIGRATION_SUFFIX = ".sql"
_HEADER = re.compile(r"^--\s*migration:\s*(?P<id>.+?)\s*$")


def migration_id_for(path: Path) -> str:
    return path.stem.replace("_", " ")


def load_directory(directory: Path) -> list[MigrationInput]:
    """Load every ``*.sql`` file in a directory, sorted by file name."""
    if not directory.is_dir():
        raise ScriptFormatError(f"{directory} is not a directory")

    migrations: list[MigrationInput] = []
    seen: dict[str, Path] = {}
    for path in sorted(directory.glob(f"*{MIGRATION_SUFFIX}")):
        migration_id = migration_id_for(path)
        if not migration_id.strip():
            raise ScriptFormatError(f"Cannot derive a migration id from {path.name}")
        if migration_id in seen:
            raise ScriptFormatError(
                f"{path.name} and {seen[migration_id].name} share id {migration_id!r}"
            )
        seen[migration_id] = path
        migrations.append(
            MigrationInput(id=migration_id, body=path.read_text(encoding="utf-8"))
        )
    return migrations


def split_script(text: str) -> list[MigrationInput]:
    """Split one script on ``-- migration: <id>`` header lines.

    Anything before the first header is ignored.
    """
    migrations: list[MigrationInput] = []
    current_id: str | None = None
    lines: list[str] = []

    def flush() -> None:
        if current_id is None:
            return
        if any(m.id == current_id for m in migrations):
            raise ScriptFormatError(f"Duplicate migration id {current_id!r}")
        migrations.append(MigrationInput(id=current_id, body="".join(lines)))

    for line in text.splitlines(keepends=True):
        match = _HEADER.match(line.rstrip("\r\n"))
        if match:
            flush()
            current_id = match.group("id")
            lines = []
        else:
            lines.append(line)
    flush()
    return migrations


def load_path(path: Path) -> list[MigrationInput]:
    """Load a directory of files or a single headed script."""
    if path.is_dir():
        return load_directory(path)
    if path.is_file():
        return split_script(path.read_text(encoding="utf-8"))
    raise ScriptFormatError(f"No migrations found at {path}")
