"""Main entry point for the jcatalog export service."""

import uvicorn
import logging
import os

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def main():
    """Main function to run the service."""
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "127.0.0.1")

    print(f"""
    jcatalog exporter

    Starting server at: http://{host}:{port}

    Environment Variables:
    - DATABASE_URL (database to export, defaults to sqlite:///./app.db)
    - JCATALOG_OUTPUT_PATH, JCATALOG_INCLUDE_SYSTEM_TABLES (optional export defaults)

    POST /api/export writes the catalog, GET /api/catalog returns it.
    """)

    uvicorn.run(
        "jcatalog_exporter.api.main:app",
        host=host,
        port=port,
    )


if __name__ == "__main__":
    main()
