"""Predicates separating engine and platform objects from application objects."""

from typing import Optional, Iterable

# Schemas owned by the database engine
SYSTEM_SCHEMA_PREFIXES = ("information_schema", "pg_", "sys")
SYSTEM_SCHEMA_NAMES = ("performance_schema", "mysql")

# Engine tables (SQL Server catalog, replication and diagram tables)
SYSTEM_TABLE_PREFIXES = ("sys", "msrep", "dt", "$")

# Tables of the platform's built-in and marketplace modules
VENDOR_MODULE_PREFIXES = (
    "system$",
    "administration$",
    "mx",
    "deeplink$",
    "encryption$",
    "email$",
    "audittrail$",
    "modelreflection$",
    "communitycommons$",
)


def _has_prefix(name: str, prefixes: Iterable[str]) -> bool:
    lower = name.lower()
    return any(lower.startswith(prefix) for prefix in prefixes)


def is_system_schema(schema_name: Optional[str]) -> bool:
    """Check if a schema belongs to the database engine."""
    if schema_name is None:
        return False
    return (_has_prefix(schema_name, SYSTEM_SCHEMA_PREFIXES)
            or schema_name.lower() in SYSTEM_SCHEMA_NAMES)


def is_system_table(table_name: Optional[str]) -> bool:
    """Check if a table belongs to the database engine."""
    if table_name is None:
        return False
    return _has_prefix(table_name, SYSTEM_TABLE_PREFIXES)


def is_vendor_system_table(table_name: Optional[str]) -> bool:
    """Check if a table belongs to a platform or marketplace module."""
    if table_name is None:
        return False
    return _has_prefix(table_name, VENDOR_MODULE_PREFIXES)


def is_excluded_table(table_name: Optional[str], include_system_tables: bool = False) -> bool:
    """Apply the system and vendor table filters, in that order."""
    if include_system_tables:
        return False
    return is_system_table(table_name) or is_vendor_system_table(table_name)
