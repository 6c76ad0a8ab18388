"""FastAPI service exporting the catalog of its own database."""
