"""jcatalog exporter: relational database metadata to jcatalog JSON."""

__version__ = "1.0.0"
