"""Metadata rows and jcatalog document models."""

from .metadata import TableRow, ColumnRow, PrimaryKeyRow, ImportedKeyRow
from .document import (
    JCatalogDocument,
    Connection,
    Catalog,
    Schema,
    Table,
    Column,
    ColumnMetadata,
    PrimaryKey,
    PrimaryKeyColumn,
    ForeignKey,
    ForeignKeyColumn,
    Association,
    MANY_TO_MANY,
)

__all__ = [
    "TableRow",
    "ColumnRow",
    "PrimaryKeyRow",
    "ImportedKeyRow",
    "JCatalogDocument",
    "Connection",
    "Catalog",
    "Schema",
    "Table",
    "Column",
    "ColumnMetadata",
    "PrimaryKey",
    "PrimaryKeyColumn",
    "ForeignKey",
    "ForeignKeyColumn",
    "Association",
    "MANY_TO_MANY",
]
