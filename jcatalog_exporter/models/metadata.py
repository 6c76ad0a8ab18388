"""Raw metadata rows as reported by a metadata source."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass
class TableRow:
    """A table reported for one schema."""
    name: str
    remarks: Optional[str] = None


@dataclass
class ColumnRow:
    """A column reported for one table, in catalog order."""
    name: str
    type_name: Optional[str]
    size: int = 0
    # "YES"/"NO" from information_schema style sources, bool from SQLAlchemy
    is_nullable: Union[str, bool, None] = None
    remarks: Optional[str] = None
    default: Optional[str] = None


@dataclass
class PrimaryKeyRow:
    """One column of a table's primary key."""
    column_name: str
    key_seq: int


@dataclass
class ImportedKeyRow:
    """One column pair of a foreign key constraint declared on a table."""
    fk_name: Optional[str]
    fk_column: str
    pk_table: str
    pk_schema: Optional[str]
    pk_column: str
    key_seq: int
