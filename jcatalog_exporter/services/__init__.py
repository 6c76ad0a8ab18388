"""Services for the jcatalog exporter."""

from .metadata_source import (
    MetadataSource,
    InspectorMetadataSource,
    borrowed_metadata_session,
    open_metadata_session,
)
from .urls import build_connection_url

__all__ = [
    "MetadataSource",
    "InspectorMetadataSource",
    "borrowed_metadata_session",
    "open_metadata_session",
    "build_connection_url",
]
