"""Tests that the alembic schema matches the ORM models."""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from app.models import Base

VERSIONS_DIR = Path(__file__).resolve().parents[2] / "db" / "migrations" / "versions"


def load_revision(filename: str):
    spec = importlib.util.spec_from_file_location(filename[:-3], VERSIONS_DIR / filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def migrated(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'schema.db'}")
    revision = load_revision("20261019_0000_001_initial_schema.py")
    with engine.begin() as conn:
        with Operations.context(MigrationContext.configure(conn)):
            revision.upgrade()
    yield engine
    engine.dispose()


class TestInitialSchema:
    def test_tables_and_columns_match_models(self, migrated):
        inspector = inspect(migrated)

        for table in Base.metadata.sorted_tables:
            columns = {column["name"] for column in inspector.get_columns(table.name)}
            assert columns == set(table.columns.keys())

    def test_email_has_single_unique_index(self, migrated):
        indexes = inspect(migrated).get_indexes("users")
        email_indexes = [index for index in indexes if index["column_names"] == ["email"]]

        assert [(index["name"], bool(index["unique"])) for index in email_indexes] == [("ix_users_email", True)]

        model_index = next(index for index in Base.metadata.tables["users"].indexes if index.name == "ix_users_email")
        assert model_index.unique

    def test_downgrade_drops_everything(self, migrated):
        revision = load_revision("20261019_0000_001_initial_schema.py")
        with migrated.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                revision.downgrade()

        assert inspect(migrated).get_table_names() == []
