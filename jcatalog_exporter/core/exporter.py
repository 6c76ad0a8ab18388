"""Export orchestration: build the document and write it to disk."""

import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy.engine import Connection

from ..config import ExportOptions
from ..exceptions import OutputWriteFailure
from ..models import JCatalogDocument
from ..services.metadata_source import (
    MetadataSource, borrowed_metadata_session, open_metadata_session,
)
from .catalog_builder import CatalogBuilder

logger = logging.getLogger(__name__)

JSON_INDENT = 4


@dataclass
class ExportResult:
    """Outcome of a successful export."""
    output_path: str
    summary: Dict[str, int] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return f"Successfully exported metadata to: {self.output_path}"


def render_document(document: JCatalogDocument) -> str:
    """Serialize a document as pretty-printed JSON."""
    return json.dumps(document.to_dict(), indent=JSON_INDENT, ensure_ascii=False)


def _output_mode(target: Path) -> int:
    """Mode of an existing target, otherwise what a plain open() would create."""
    if target.exists():
        return stat.S_IMODE(target.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_document(document: JCatalogDocument, output_path: str) -> str:
    """Write a document to ``output_path`` as UTF-8 JSON.

    The content goes to a temporary file next to the target first, so the
    target is either fully replaced or left untouched.
    """
    content = render_document(document)
    target = Path(output_path)
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=target.parent,
            prefix=f".{target.name}.", suffix=".tmp", delete=False,
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
            tmp.flush()
        os.chmod(tmp_name, _output_mode(target))
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            try:
                os.unlink(tmp_name)
            except OSError as cleanup_error:
                logger.warning(f"Could not remove temporary file {tmp_name}: {cleanup_error}")
        raise OutputWriteFailure(f"Failed to write {output_path}: {e}") from e

    logger.info(f"Wrote catalog to {output_path}")
    return output_path


class CatalogExporter:
    """Exports a database catalog to a jcatalog file."""

    def __init__(self, options: Optional[ExportOptions] = None):
        """Initialize with export options."""
        self.options = options or ExportOptions()

    def build(self, source: MetadataSource) -> JCatalogDocument:
        """Build the document without writing it."""
        logger.info("Extracting metadata...")
        return CatalogBuilder(source, self.options).build()

    def export(self, source: MetadataSource) -> ExportResult:
        """Build the document from an open source and write it."""
        document = self.build(source)
        output_path = self.options.output_path
        logger.info(f"Writing to file: {output_path}")
        written = write_document(document, output_path)
        return ExportResult(output_path=written, summary=document.summary())

    def export_connection(self, connection: Connection) -> ExportResult:
        """Export over a caller-owned connection; the connection stays open."""
        with borrowed_metadata_session(connection) as source:
            return self.export(source)

    def export_url(self, url: str, username: Optional[str] = None,
                   password: Optional[str] = None) -> ExportResult:
        """Connect, export and disconnect."""
        with open_metadata_session(url, username, password) as source:
            return self.export(source)
