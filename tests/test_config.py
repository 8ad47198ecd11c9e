"""Tests for environment-driven settings."""

import pytest
from pydantic import ValidationError

from schemaledger.config import LedgerSettings


def test_defaults():
    s = LedgerSettings()
    assert s.ledger_table == "_migrations"
    assert s.digest_algorithm == "md5"
    assert s.max_race_retries == 3


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("SCHEMALEDGER_LEDGER_TABLE", "schema_ledger")
    monkeypatch.setenv("SCHEMALEDGER_MAX_RACE_RETRIES", "7")
    s = LedgerSettings()
    assert s.ledger_table == "schema_ledger"
    assert s.max_race_retries == 7


def test_rejects_unsafe_table_name():
    with pytest.raises(ValidationError):
        LedgerSettings(ledger_table="_migrations; DROP TABLE documents")
