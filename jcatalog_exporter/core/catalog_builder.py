"""Builds a jcatalog document from database metadata."""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Union

from sqlalchemy.exc import SQLAlchemyError

from ..config import ExportOptions, AssociationScope
from ..exceptions import MetadataQueryFailure, ExportDeadlineExceeded
from ..models import (
    TableRow, JCatalogDocument, Connection, Catalog, Schema, Table, Association,
)
from ..services.metadata_source import MetadataSource
from ..services.filters import is_system_schema, is_excluded_table
from ..services.collectors import collect_columns, collect_primary_key, collect_foreign_keys
from ..services.junction import is_junction_table, junction_to_association

logger = logging.getLogger(__name__)

FALLBACK_SCHEMA = "public"


@dataclass
class SchemaContent:
    """Structural tables and associations found in one schema."""
    name: str
    tables: List[Table] = field(default_factory=list)
    associations: List[Association] = field(default_factory=list)


class CatalogBuilder:
    """Walks catalog -> schemas -> tables and assembles the jcatalog document.

    The walk is sequential over a single metadata source. The source is
    neither opened nor closed here; see ``services.metadata_source`` for the
    session helpers that own the connection.
    """

    def __init__(self, source: MetadataSource, options: Optional[ExportOptions] = None):
        """Initialize with a connected metadata source."""
        self.source = source
        self.options = options or ExportOptions()
        self._deadline: Optional[float] = None

    def build(self) -> JCatalogDocument:
        """Run the full metadata walk and return the finished document."""
        if self.options.deadline_seconds:
            self._deadline = time.monotonic() + self.options.deadline_seconds

        catalog_name = self.get_catalog_name()
        logger.info(f"Catalog: {catalog_name}")

        schema_names = self.enumerate_schemas()
        logger.info(f"Found {len(schema_names)} schema(s)")

        contents = [self.build_schema(schema_name) for schema_name in schema_names]
        schemas = self.assemble_schemas(contents)

        total_tables = sum(len(s.tables) for s in schemas)
        logger.info(f"Total tables processed: {total_tables}")

        return JCatalogDocument(
            connection=Connection(catalogs=[Catalog(name=catalog_name, schemas=schemas)])
        )

    def get_catalog_name(self) -> str:
        """Catalog name reported by the source, or the configured fallback."""
        try:
            name = self.source.get_catalog_name()
        except SQLAlchemyError as e:
            raise MetadataQueryFailure(f"Failed to read catalog name: {e}") from e
        return name or self.options.default_catalog_name

    def enumerate_schemas(self) -> List[str]:
        """Application schemas in reported order, or the fallback schema."""
        try:
            reported = self.source.get_schema_names()
        except SQLAlchemyError as e:
            raise MetadataQueryFailure(f"Failed to list schemas: {e}") from e

        schema_names = []
        for schema_name in reported:
            if schema_name in schema_names:
                continue
            if not self.options.include_system_tables and is_system_schema(schema_name):
                logger.debug(f"Skipping system schema {schema_name}")
                continue
            schema_names.append(schema_name)

        if not schema_names:
            logger.info(f"No application schemas found, using {FALLBACK_SCHEMA}")
            schema_names = [FALLBACK_SCHEMA]
        return schema_names

    def enumerate_tables(self, schema_name: str) -> List[TableRow]:
        """Tables of a schema with system and platform module tables removed."""
        try:
            reported = self.source.get_tables(schema_name)
        except SQLAlchemyError as e:
            raise MetadataQueryFailure(f"Failed to list tables of schema {schema_name}: {e}") from e

        return [
            row for row in reported
            if not is_excluded_table(row.name, self.options.include_system_tables)
        ]

    def build_schema(self, schema_name: str) -> SchemaContent:
        """Process every retained table of one schema."""
        logger.info(f"Processing schema: {schema_name}")
        content = SchemaContent(name=schema_name)

        for table_row in self.enumerate_tables(schema_name):
            self._check_deadline()
            try:
                result = self.build_table(schema_name, table_row)
            except SQLAlchemyError as e:
                if not self.options.skip_failing_tables:
                    raise MetadataQueryFailure(
                        f"Failed to read metadata of {schema_name}.{table_row.name}: {e}"
                    ) from e
                logger.warning(f"Skipping table {schema_name}.{table_row.name}: {e}")
                continue

            if isinstance(result, Association):
                content.associations.append(result)
            else:
                content.tables.append(result)

        return content

    def build_table(self, schema_name: str, table_row: TableRow) -> Union[Table, Association]:
        """Structural Table, or Association when the table is a junction."""
        table_name = table_row.name
        foreign_keys = collect_foreign_keys(self.source.get_imported_keys(schema_name, table_name))

        if is_junction_table(table_name, foreign_keys):
            logger.info(f"  Detected junction table: {table_name} (converting to association)")
            return junction_to_association(table_name, foreign_keys)

        logger.info(f"  Processing table: {table_name}")
        columns = collect_columns(self.source.get_columns(schema_name, table_name))
        primary_key = collect_primary_key(self.source.get_primary_keys(schema_name, table_name))

        return Table(
            name=table_name,
            columns=columns,
            primarykey=primary_key,
            foreignkeys=foreign_keys or None,
            annotation=table_row.remarks or None,
        )

    def assemble_schemas(self, contents: List[SchemaContent]) -> List[Schema]:
        """Drop empty schemas and attach associations per the configured scope."""
        schemas = []
        accumulated: List[Association] = []

        for content in contents:
            if self.options.association_scope == AssociationScope.CATALOG:
                accumulated.extend(content.associations)
                associations = list(accumulated)
            else:
                associations = content.associations

            if not content.tables:
                if content.associations:
                    logger.warning(
                        f"Schema {content.name} has no tables; "
                        f"{len(content.associations)} association(s) not attached to it"
                    )
                continue

            if associations:
                logger.info(f"Added {len(associations)} associations to schema {content.name}")
            schemas.append(Schema(
                name=content.name,
                tables=content.tables,
                associations=associations or None,
            ))

        return schemas

    def _check_deadline(self) -> None:
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise ExportDeadlineExceeded(
                f"Metadata export exceeded {self.options.deadline_seconds}s deadline"
            )
