"""Metadata sources: the read-only view of a database catalog used by the exporter."""

import logging
import re
from contextlib import contextmanager
from typing import List, Optional, Iterator, Protocol

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError, CompileError
from sqlalchemy.types import TypeEngine, Integer, BigInteger, SmallInteger

from ..exceptions import ConnectionFailure
from ..models import TableRow, ColumnRow, PrimaryKeyRow, ImportedKeyRow
from .urls import build_connection_url

logger = logging.getLogger(__name__)

_TYPE_ARGUMENTS = re.compile(r"\(.*\)")

# Precision the JDBC drivers report for integer columns, most specific first
_INTEGER_PRECISION = ((BigInteger, 19), (SmallInteger, 5), (Integer, 10))


class MetadataSource(Protocol):
    """Catalog metadata of one connected database."""

    def get_catalog_name(self) -> Optional[str]: ...

    def get_schema_names(self) -> List[str]: ...

    def get_tables(self, schema: str) -> List[TableRow]: ...

    def get_columns(self, schema: str, table: str) -> List[ColumnRow]: ...

    def get_primary_keys(self, schema: str, table: str) -> List[PrimaryKeyRow]: ...

    def get_imported_keys(self, schema: str, table: str) -> List[ImportedKeyRow]: ...


class InspectorMetadataSource:
    """Metadata source backed by a SQLAlchemy Inspector on an open connection."""

    def __init__(self, connection: Connection):
        """Initialize with an open connection; the connection is not closed here."""
        self.connection = connection
        self.inspector = inspect(connection)
        self.dialect = connection.dialect

    def get_catalog_name(self) -> Optional[str]:
        """Database name of the connection, None where the dialect has no catalogs."""
        if self.dialect.name == "sqlite":
            return None
        return self.connection.engine.url.database

    def get_schema_names(self) -> List[str]:
        return self.inspector.get_schema_names()

    def get_tables(self, schema: str) -> List[TableRow]:
        """Base tables of a schema, views excluded."""
        tables = []
        for table_name in self.inspector.get_table_names(schema=schema):
            tables.append(TableRow(
                name=table_name,
                remarks=self._get_table_comment(schema, table_name),
            ))
        return tables

    def _get_table_comment(self, schema: str, table: str) -> Optional[str]:
        try:
            return self.inspector.get_table_comment(table, schema=schema).get("text")
        except NotImplementedError:
            # Dialect without table comments (e.g. SQLite)
            return None

    def get_columns(self, schema: str, table: str) -> List[ColumnRow]:
        columns = []
        for col in self.inspector.get_columns(table, schema=schema):
            col_type = col.get("type")
            columns.append(ColumnRow(
                name=col["name"],
                type_name=self._type_name(col_type),
                size=self._type_size(col_type),
                is_nullable=col.get("nullable", True),
                remarks=col.get("comment"),
                default=col.get("default"),
            ))
        return columns

    def _type_name(self, col_type: Optional[TypeEngine]) -> Optional[str]:
        """Dialect type name without arguments: VARCHAR(255) -> VARCHAR."""
        if col_type is None:
            return None
        try:
            compiled = col_type.compile(dialect=self.dialect)
        except (CompileError, NotImplementedError):
            # Types the dialect reflected but cannot render (NullType)
            return type(col_type).__name__.upper()
        return _TYPE_ARGUMENTS.sub("", compiled).strip()

    @staticmethod
    def _type_size(col_type: Optional[TypeEngine]) -> int:
        """Declared length or precision, the integer precision for integer types, else 0."""
        for attr in ("length", "precision"):
            value = getattr(col_type, attr, None)
            if isinstance(value, int):
                return value
        for type_class, precision in _INTEGER_PRECISION:
            if isinstance(col_type, type_class):
                return precision
        return 0

    def get_primary_keys(self, schema: str, table: str) -> List[PrimaryKeyRow]:
        constraint = self.inspector.get_pk_constraint(table, schema=schema) or {}
        return [
            PrimaryKeyRow(column_name=column, key_seq=position)
            for position, column in enumerate(constraint.get("constrained_columns") or [], start=1)
        ]

    def get_imported_keys(self, schema: str, table: str) -> List[ImportedKeyRow]:
        """Foreign keys flattened to one row per column pair."""
        rows = []
        for fk in self.inspector.get_foreign_keys(table, schema=schema):
            pairs = zip(fk["constrained_columns"], fk["referred_columns"])
            for position, (local_column, referred_column) in enumerate(pairs, start=1):
                rows.append(ImportedKeyRow(
                    fk_name=fk.get("name"),
                    fk_column=local_column,
                    pk_table=fk["referred_table"],
                    pk_schema=fk.get("referred_schema") or self.inspector.default_schema_name,
                    pk_column=referred_column,
                    key_seq=position,
                ))
        return rows


@contextmanager
def borrowed_metadata_session(connection: Connection) -> Iterator[InspectorMetadataSource]:
    """Metadata session over a caller-owned connection, left open on exit."""
    yield InspectorMetadataSource(connection)


def _release(connection: Optional[Connection], engine: Optional[Engine]) -> None:
    """Close a self-opened connection and engine; failures are only logged."""
    if connection is not None:
        try:
            connection.close()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to close connection: {e}")
    if engine is not None:
        try:
            engine.dispose()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to dispose engine: {e}")


@contextmanager
def open_metadata_session(url: str, username: Optional[str] = None,
                          password: Optional[str] = None) -> Iterator[InspectorMetadataSource]:
    """Open a connection for the duration of one export and close it afterwards."""
    connection_url = build_connection_url(url, username, password)
    engine = None
    connection = None
    try:
        engine = create_engine(connection_url)
        connection = engine.connect()
        source = InspectorMetadataSource(connection)
    except (SQLAlchemyError, ImportError) as e:
        _release(connection, engine)
        raise ConnectionFailure(
            f"Failed to connect to {connection_url.render_as_string(hide_password=True)}: {e}"
        ) from e

    logger.info(f"Connected to {connection_url.get_backend_name()} database")
    try:
        yield source
    finally:
        _release(connection, engine)
