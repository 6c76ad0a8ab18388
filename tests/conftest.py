"""
Pytest configuration for the jcatalog exporter test suite.

Provides a SQLite database shaped like a Mendix application database and an
in-memory metadata source for vendor-specific metadata shapes.
"""

import pytest
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from sqlalchemy import create_engine

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from create_test_db import create_test_database  # noqa: E402
from jcatalog_exporter.models import TableRow, ColumnRow, PrimaryKeyRow, ImportedKeyRow  # noqa: E402


class FakeMetadataSource:
    """Metadata source serving canned rows, recording every table-level call."""

    def __init__(self, catalog_name: Optional[str] = "shop", schemas: Optional[List[str]] = None):
        self.catalog_name = catalog_name
        self.schemas = schemas if schemas is not None else ["public"]
        self.tables: Dict[str, List[TableRow]] = {}
        self.columns: Dict[Tuple[str, str], List[ColumnRow]] = {}
        self.primary_keys: Dict[Tuple[str, str], List[PrimaryKeyRow]] = {}
        self.imported_keys: Dict[Tuple[str, str], List[ImportedKeyRow]] = {}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.calls: List[Tuple[str, str, str]] = []

    def add_table(self, schema: str, name: str, remarks: Optional[str] = None,
                  columns: Optional[List[ColumnRow]] = None,
                  primary_keys: Optional[List[PrimaryKeyRow]] = None,
                  imported_keys: Optional[List[ImportedKeyRow]] = None) -> None:
        self.tables.setdefault(schema, []).append(TableRow(name=name, remarks=remarks))
        self.columns[(schema, name)] = columns or []
        self.primary_keys[(schema, name)] = primary_keys or []
        self.imported_keys[(schema, name)] = imported_keys or []

    def get_catalog_name(self) -> Optional[str]:
        return self.catalog_name

    def get_schema_names(self) -> List[str]:
        return list(self.schemas)

    def get_tables(self, schema: str) -> List[TableRow]:
        return list(self.tables.get(schema, []))

    def _lookup(self, kind: str, store: Dict, schema: str, table: str) -> List:
        self.calls.append((kind, schema, table))
        if (schema, table) in self.failures:
            raise self.failures[(schema, table)]
        return list(store.get((schema, table), []))

    def get_columns(self, schema: str, table: str) -> List[ColumnRow]:
        return self._lookup("columns", self.columns, schema, table)

    def get_primary_keys(self, schema: str, table: str) -> List[PrimaryKeyRow]:
        return self._lookup("primary_keys", self.primary_keys, schema, table)

    def get_imported_keys(self, schema: str, table: str) -> List[ImportedKeyRow]:
        return self._lookup("imported_keys", self.imported_keys, schema, table)


def fk_row(name, column, table, ref_column="id", seq=1, schema="public") -> ImportedKeyRow:
    """Shorthand for an imported key row."""
    return ImportedKeyRow(fk_name=name, fk_column=column, pk_table=table,
                          pk_schema=schema, pk_column=ref_column, key_seq=seq)


def id_column(name="id", nullable="NO") -> ColumnRow:
    return ColumnRow(name=name, type_name="int4", size=10, is_nullable=nullable)


@pytest.fixture
def shop_source():
    """The customer/order database with one junction table."""
    source = FakeMetadataSource()
    source.add_table(
        "public", "customer",
        columns=[id_column(), ColumnRow(name="name", type_name="varchar", size=200, is_nullable="NO")],
        primary_keys=[PrimaryKeyRow("id", 1)],
    )
    source.add_table(
        "public", "order",
        columns=[id_column(), id_column("customer_id", nullable="YES")],
        primary_keys=[PrimaryKeyRow("id", 1)],
        imported_keys=[fk_row("fk_order_customer", "customer_id", "customer")],
    )
    source.add_table(
        "public", "mod$customer_order",
        columns=[id_column("customer_id"), id_column("order_id")],
        imported_keys=[
            fk_row("fk_co_customer", "customer_id", "customer"),
            fk_row("fk_co_order", "order_id", "order"),
        ],
    )
    return source


@pytest.fixture
def sample_db_path(tmp_path):
    """Path of a freshly created SQLite test database."""
    return create_test_database(str(tmp_path / "test_mendix.db"))


@pytest.fixture
def sample_db_url(sample_db_path):
    return f"sqlite:///{sample_db_path}"


@pytest.fixture
def sqlite_engine(sample_db_url):
    engine = create_engine(sample_db_url)
    yield engine
    engine.dispose()
