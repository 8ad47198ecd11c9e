"""Tests for the reference migration loader."""

import pytest

from schemaledger.exceptions import ScriptFormatError
from schemaledger.loader import load_directory, load_path, migration_id_for, split_script


@pytest.fixture
def migrations_dir(tmp_path):
    (tmp_path / "0002_add_index.sql").write_text("CREATE INDEX ix ON documents (id);\n")
    (tmp_path / "0001_create_documents.sql").write_text(
        "CREATE TABLE documents (id TEXT PRIMARY KEY);\n"
    )
    (tmp_path / "README.md").write_text("not a migration")
    return tmp_path


def test_migration_id_for(tmp_path):
    assert migration_id_for(tmp_path / "0001_create_documents.sql") == "0001 create documents"


def test_load_directory_sorted(migrations_dir):
    migrations = load_directory(migrations_dir)
    assert [m.id for m in migrations] == ["0001 create documents", "0002 add index"]
    assert migrations[0].body == "CREATE TABLE documents (id TEXT PRIMARY KEY);\n"


def test_load_directory_rejects_clashing_ids(tmp_path):
    (tmp_path / "0001_a.sql").write_text("SELECT 1;")
    (tmp_path / "0001 a.sql").write_text("SELECT 2;")
    with pytest.raises(ScriptFormatError):
        load_directory(tmp_path)


def test_load_directory_missing(tmp_path):
    with pytest.raises(ScriptFormatError):
        load_directory(tmp_path / "nope")


def test_split_script():
    text = (
        "-- preamble, ignored\n"
        "-- migration: 0001 create documents\n"
        "CREATE TABLE documents (id TEXT);\n"
        "\n"
        "-- migration: 0002 add index\n"
        "CREATE INDEX ix ON documents (id);\n"
    )
    migrations = split_script(text)
    assert [m.id for m in migrations] == ["0001 create documents", "0002 add index"]
    assert migrations[0].body == "CREATE TABLE documents (id TEXT);\n\n"
    assert migrations[1].body == "CREATE INDEX ix ON documents (id);\n"


def test_split_script_duplicate_ids():
    text = "-- migration: 0001\nSELECT 1;\n-- migration: 0001\nSELECT 2;\n"
    with pytest.raises(ScriptFormatError):
        split_script(text)


def test_split_script_without_headers():
    assert split_script("SELECT 1;\n") == []


def test_load_path_dispatch(migrations_dir, tmp_path_factory):
    assert len(load_path(migrations_dir)) == 2

    script = tmp_path_factory.mktemp("single") / "all.sql"
    script.write_text("-- migration: 0001\nSELECT 1;\n")
    assert [m.id for m in load_path(script)] == ["0001"]

    with pytest.raises(ScriptFormatError):
        load_path(migrations_dir / "missing.sql")
