"""Pydantic models for the jcatalog document.

Field order is the key order of the written JSON. Optional fields left as
``None`` are omitted from the output rather than written as ``null``.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any


MANY_TO_MANY = "many-to-many"


class _JCatalogModel(BaseModel):
    """Base for document models; accepts both field names and JSON aliases."""
    model_config = ConfigDict(populate_by_name=True)


class ColumnMetadata(_JCatalogModel):
    """Type and constraint details of a column."""
    type: Optional[str] = None
    size: int = 0
    nullable: bool = False
    annotation: Optional[str] = None
    default: Optional[str] = None


class Column(_JCatalogModel):
    """A table column."""
    name: str
    metadata: ColumnMetadata


class PrimaryKeyColumn(_JCatalogModel):
    """A primary key column and its 1-based position."""
    column: str
    position: str


class PrimaryKey(_JCatalogModel):
    """Primary key of a table."""
    columns: List[PrimaryKeyColumn]


class ForeignKeyColumn(_JCatalogModel):
    """One local/referenced column pair of a foreign key."""
    column: str
    referenced_column: str = Field(alias="referencedColumn")
    position: str


class ForeignKey(_JCatalogModel):
    """A foreign key constraint, coalesced over all of its column pairs."""
    name: str
    referenced_table: str = Field(alias="referencedTable")
    referenced_schema: Optional[str] = Field(default=None, alias="referencedSchema")
    columns: List[ForeignKeyColumn] = Field(default_factory=list)


class Table(_JCatalogModel):
    """A structural (non-junction) table."""
    name: str
    columns: List[Column] = Field(default_factory=list)
    primarykey: Optional[PrimaryKey] = None
    foreignkeys: Optional[List[ForeignKey]] = None
    annotation: Optional[str] = None


class Association(_JCatalogModel):
    """A many-to-many association derived from a junction table."""
    type: str = MANY_TO_MANY
    junction_table: str = Field(alias="junctionTable")
    name: str
    entity1: Optional[str] = None
    entity2: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.entity1 is not None and self.entity2 is not None


class Schema(_JCatalogModel):
    """A database schema with at least one retained table."""
    name: str
    tables: List[Table] = Field(default_factory=list)
    associations: Optional[List[Association]] = None


class Catalog(_JCatalogModel):
    """The database catalog being exported."""
    name: str
    schemas: List[Schema] = Field(default_factory=list)


class Connection(_JCatalogModel):
    """Container for the exported catalogs."""
    catalogs: List[Catalog] = Field(default_factory=list)


class JCatalogDocument(_JCatalogModel):
    """Root of a jcatalog document."""
    connection: Connection

    @property
    def catalog(self) -> Catalog:
        """The single catalog produced by one export run."""
        return self.connection.catalogs[0]

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready structure with aliases and no null fields."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def summary(self) -> Dict[str, int]:
        """Counts of exported schemas, tables and associations."""
        schemas = self.catalog.schemas
        return {
            "schemas": len(schemas),
            "tables": sum(len(s.tables) for s in schemas),
            "associations": len({
                a.junction_table
                for s in schemas
                for a in (s.associations or [])
            }),
        }
