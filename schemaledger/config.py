"""Global configuration — loaded from environment variables."""

import re
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class LedgerSettings(BaseSettings):
    db_path: Path = Path("schemaledger.db")
    migrations_dir: Path = Path("migrations")
    ledger_table: str = "_migrations"
    digest_algorithm: str = "md5"  # any hashlib algorithm name
    busy_timeout_seconds: float = 5.0  # wait for a competing runner's lock
    max_race_retries: int = 3
    log_level: str = "INFO"

    model_config = {"env_prefix": "SCHEMALEDGER_"}

    @field_validator("ledger_table")
    @classmethod
    def _plain_identifier(cls, value: str) -> str:
        # Interpolated into SQL, so only bare identifiers are accepted.
        if not _IDENTIFIER.match(value):
            raise ValueError(f"ledger_table must be a plain SQL identifier, got {value!r}")
        return value


settings = LedgerSettings()
