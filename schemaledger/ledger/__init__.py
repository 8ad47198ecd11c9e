"""Migration ledgers — the durable record of what has been applied."""

from schemaledger.ledger.base import MigrationLedger
from schemaledger.ledger.memory import InMemoryLedger
from schemaledger.ledger.sqlite import SqliteLedger

__all__ = ["MigrationLedger", "InMemoryLedger", "SqliteLedger"]
