"""Custom exception hierarchy for schemaledger."""


class SchemaLedgerError(Exception):
    """Base for all schemaledger errors."""


class ConflictError(SchemaLedgerError):
    """An applied migration's content no longer matches its recorded digest."""

    def __init__(self, migration_id: str, expected_digest: str, actual_digest: str) -> None:
        self.migration_id = migration_id
        self.expected_digest = expected_digest
        self.actual_digest = actual_digest
        super().__init__(
            f"Digest for migration {migration_id!r} has changed "
            f"from {expected_digest} to {actual_digest}"
        )


class ExecutionError(SchemaLedgerError):
    """A migration body failed against the target store."""

    def __init__(self, migration_id: str, cause: BaseException) -> None:
        self.migration_id = migration_id
        self.cause = cause
        super().__init__(f"Migration {migration_id!r} failed: {cause}")


class AlreadyExistsError(SchemaLedgerError):
    """The ledger already holds a record for this migration id."""

    def __init__(self, migration_id: str) -> None:
        self.migration_id = migration_id
        super().__init__(f"Migration {migration_id!r} is already recorded")


class ScriptFormatError(SchemaLedgerError):
    """A migration source could not be turned into (id, body) pairs."""
