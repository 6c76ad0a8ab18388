"""Core export logic."""

from .catalog_builder import CatalogBuilder
from .exporter import CatalogExporter, ExportResult, render_document, write_document

__all__ = [
    "CatalogBuilder",
    "CatalogExporter",
    "ExportResult",
    "render_document",
    "write_document",
]
