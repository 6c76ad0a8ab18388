"""Main FastAPI application.

The service owns an engine on ``DATABASE_URL`` and exports the catalog of
that database over connections borrowed from it.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from fastapi import FastAPI, Depends, HTTPException
from sqlalchemy import create_engine
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from .. import __version__
from ..config import ExportOptions, RUNTIME_OUTPUT_PATH, RUNTIME_CATALOG_NAME, EXPORT_DIR_ENV
from ..core import CatalogExporter
from ..exceptions import CatalogExportError, ConnectionFailure
from ..services import borrowed_metadata_session, build_connection_url
from .schemas import ExportRequest, ExportResponse, HealthResponse

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./app.db"

RUNTIME_DEFAULTS = {
    "output_path": RUNTIME_OUTPUT_PATH,
    "default_catalog_name": RUNTIME_CATALOG_NAME,
}

app = FastAPI(
    title="jcatalog exporter",
    description="Exports the database catalog as a jcatalog document",
    version=__version__,
)

_engine: Optional[Engine] = None


def get_engine() -> Engine:
    """Engine of the service database, created on first use."""
    global _engine
    if _engine is None:
        try:
            url = build_connection_url(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))
            _engine = create_engine(url)
        except (CatalogExportError, SQLAlchemyError, ImportError) as e:
            logger.error(f"Cannot create database engine: {e}")
            raise HTTPException(status_code=503, detail=f"Cannot create database engine: {e}")
    return _engine


def get_connection(engine: Engine = Depends(get_engine)) -> Iterator[Connection]:
    """Connection borrowed from the service engine for one request."""
    try:
        connection = engine.connect()
    except SQLAlchemyError as e:
        logger.error(f"Failed to connect to database: {e}")
        raise HTTPException(status_code=503, detail=f"Cannot connect to database: {e}")
    try:
        yield connection
    finally:
        try:
            connection.close()
        except SQLAlchemyError as e:
            logger.warning(f"Failed to close connection: {e}")


def _http_error(error: Exception) -> HTTPException:
    status_code = 503 if isinstance(error, ConnectionFailure) else 500
    return HTTPException(status_code=status_code, detail=str(error))


def resolve_export_path(requested: str) -> str:
    """Resolve a client-supplied output path inside the export directory.

    Absolute paths and paths escaping the directory are rejected with 400.
    """
    export_dir = Path(os.getenv(EXPORT_DIR_ENV) or os.getcwd()).resolve()
    candidate = Path(requested)
    if candidate.is_absolute():
        raise HTTPException(status_code=400, detail=f"Output path must be relative: {requested}")

    resolved = (export_dir / candidate).resolve()
    if not resolved.is_relative_to(export_dir):
        raise HTTPException(status_code=400, detail=f"Output path outside export directory: {requested}")
    return str(resolved)


@app.get("/health", response_model=HealthResponse)
def health(engine: Engine = Depends(get_engine)):
    """Service health and database backend."""
    return HealthResponse(status="ok", database=engine.url.get_backend_name())


@app.post("/api/export", response_model=ExportResponse)
def export_catalog(request: Optional[ExportRequest] = None,
                   connection: Connection = Depends(get_connection)):
    """Export the service database catalog to a jcatalog file."""
    request = request or ExportRequest()
    output_path = resolve_export_path(request.output_path) if request.output_path else None
    try:
        options = ExportOptions.from_env(
            defaults=RUNTIME_DEFAULTS,
            output_path=output_path,
            include_system_tables=request.include_system_tables,
        )
        result = CatalogExporter(options).export_connection(connection)
    except (CatalogExportError, ValueError) as e:
        logger.error(f"Failed to export metadata: {e}")
        raise _http_error(e) from e

    return ExportResponse(message=result.message, output_path=result.output_path, **result.summary)


@app.get("/api/catalog")
def get_catalog(include_system_tables: Optional[bool] = None,
                connection: Connection = Depends(get_connection)) -> Dict[str, Any]:
    """Build the catalog document and return it without writing a file."""
    try:
        options = ExportOptions.from_env(
            defaults=RUNTIME_DEFAULTS,
            include_system_tables=include_system_tables,
        )
        with borrowed_metadata_session(connection) as source:
            document = CatalogExporter(options).build(source)
    except (CatalogExportError, ValueError) as e:
        logger.error(f"Failed to build catalog: {e}")
        raise _http_error(e) from e

    return document.to_dict()
