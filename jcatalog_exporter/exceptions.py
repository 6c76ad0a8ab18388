"""Errors raised while exporting a database catalog."""


class CatalogExportError(Exception):
    """Base class for all export failures."""


class ConnectionFailure(CatalogExportError):
    """Unable to obtain or authenticate a database connection."""


class MetadataQueryFailure(CatalogExportError):
    """Reading catalog metadata failed; the partial document is discarded."""


class ExportDeadlineExceeded(MetadataQueryFailure):
    """The metadata walk ran past the caller's deadline."""


class OutputWriteFailure(CatalogExportError):
    """The finished document could not be written."""
