"""Column, primary key and foreign key collection for structural tables."""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Iterable, Union

from ..models import (
    ColumnRow, PrimaryKeyRow, ImportedKeyRow,
    Column, ColumnMetadata, PrimaryKey, PrimaryKeyColumn, ForeignKey, ForeignKeyColumn,
)


def _non_empty(value: Optional[str]) -> Optional[str]:
    return value if value else None


def is_nullable_flag(flag: Union[str, bool, None]) -> bool:
    """Interpret a vendor nullability flag; only "YES" (any case) is nullable."""
    if isinstance(flag, bool):
        return flag
    if flag is None:
        return False
    return str(flag).upper() == "YES"


def collect_columns(rows: Iterable[ColumnRow]) -> List[Column]:
    """One Column per metadata row, in the order reported."""
    columns = []
    for row in rows:
        columns.append(Column(
            name=row.name,
            metadata=ColumnMetadata(
                type=row.type_name,
                size=row.size or 0,
                nullable=is_nullable_flag(row.is_nullable),
                annotation=_non_empty(row.remarks),
                default=_non_empty(row.default),
            ),
        ))
    return columns


def collect_primary_key(rows: Iterable[PrimaryKeyRow]) -> Optional[PrimaryKey]:
    """Primary key in reported order, or None when the table has none."""
    pk_columns = [
        PrimaryKeyColumn(column=row.column_name, position=str(row.key_seq))
        for row in rows
    ]
    if not pk_columns:
        return None
    return PrimaryKey(columns=pk_columns)


@dataclass
class _ForeignKeyBuilder:
    """Accumulates the column pairs of one constraint."""
    name: str
    referenced_table: str
    referenced_schema: Optional[str]
    columns: List[ForeignKeyColumn] = field(default_factory=list)

    def build(self) -> ForeignKey:
        return ForeignKey(
            name=self.name,
            referenced_table=self.referenced_table,
            referenced_schema=self.referenced_schema,
            columns=self.columns,
        )


def _unique_name(name: str, taken: Dict[str, _ForeignKeyBuilder]) -> str:
    if name not in taken:
        return name
    suffix = 2
    while f"{name}_{suffix}" in taken:
        suffix += 1
    return f"{name}_{suffix}"


def collect_foreign_keys(rows: Iterable[ImportedKeyRow]) -> List[ForeignKey]:
    """Group imported key rows into foreign keys, in first-seen constraint order.

    Named constraints are grouped by name. An unnamed constraint gets the
    synthesized name ``FK_<local column>`` from its first column; a row with
    ``key_seq`` 1 starts a new unnamed constraint and later rows join it.
    """
    builders: Dict[str, _ForeignKeyBuilder] = {}
    current_unnamed: Optional[str] = None

    for row in rows:
        if row.fk_name:
            key = row.fk_name
            current_unnamed = None
        elif current_unnamed is None or row.key_seq <= 1:
            key = _unique_name(f"FK_{row.fk_column}", builders)
            current_unnamed = key
        else:
            key = current_unnamed

        builder = builders.get(key)
        if builder is None:
            builder = _ForeignKeyBuilder(
                name=key,
                referenced_table=row.pk_table,
                referenced_schema=row.pk_schema,
            )
            builders[key] = builder

        builder.columns.append(ForeignKeyColumn(
            column=row.fk_column,
            referenced_column=row.pk_column,
            position=str(row.key_seq),
        ))

    return [builder.build() for builder in builders.values()]
