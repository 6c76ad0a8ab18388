#!/usr/bin/env python3
"""
Standalone exporter: database metadata to a jcatalog file.

Usage:
    jcatalog-export <url> <username> <password> <output_file> [include_system_tables]

Examples:
    jcatalog-export "postgresql://localhost:5432/mendix" postgres secret mendix.jcatalog false
    jcatalog-export "jdbc:postgresql://localhost:5432/mendix" postgres secret mendix.jcatalog false
    jcatalog-export "jdbc:sqlserver://localhost:1433;databaseName=mendix" sa secret mendix.jcatalog false
    jcatalog-export "mysql+pymysql://localhost:3306/mendix" root secret mendix.jcatalog false
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import ExportOptions, AssociationScope
from .core import CatalogExporter
from .exceptions import CatalogExportError
from .services import build_connection_url

logger = logging.getLogger(__name__)


def parse_flag(value: str) -> bool:
    """Only "true" (any case) enables the flag."""
    return value.strip().lower() == "true"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jcatalog-export",
        description="Export database metadata to a jcatalog file",
        epilog="Examples:" + __doc__.split("Examples:", 1)[1],
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("url", help="Database URL (SQLAlchemy or JDBC style)")
    parser.add_argument("username", help="Database user")
    parser.add_argument("password", help="Database password")
    parser.add_argument("output_file", help="Path of the jcatalog file to write")
    parser.add_argument("include_system_tables", nargs="?", default="false",
                        help="true to keep system schemas and tables (default: false)")
    parser.add_argument("--catalog-name", dest="default_catalog_name",
                        help="Catalog name used when the database reports none")
    parser.add_argument("--association-scope", choices=[s.value for s in AssociationScope],
                        help="Attach associations to their own schema or to every schema")
    parser.add_argument("--deadline", dest="deadline_seconds", type=float,
                        help="Abort when the export takes longer than this many seconds")
    parser.add_argument("--fail-on-table-error", action="store_true",
                        help="Abort instead of skipping a table whose metadata cannot be read")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run the exporter; returns the process exit code."""
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        # usage errors exit with 1 like every other failure
        return 0 if e.code == 0 else 1

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    try:
        options = ExportOptions.from_env(
            output_path=args.output_file,
            include_system_tables=parse_flag(args.include_system_tables),
            default_catalog_name=args.default_catalog_name,
            association_scope=args.association_scope,
            deadline_seconds=args.deadline_seconds,
            skip_failing_tables=False if args.fail_on_table_error else None,
        )
        display_url = build_connection_url(args.url).render_as_string(hide_password=True)
        print(f"Connecting to database: {display_url}")
        result = CatalogExporter(options).export_url(args.url, args.username, args.password)
    except (CatalogExportError, ValueError) as e:
        logger.debug("Export failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
