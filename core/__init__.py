"""
Core utilities and configuration for the user ingestion service.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Database engine and session management
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration

Usage:
    from core.config import settings
    from core.database import async_session_maker
    from core.exceptions import StorageWriteError, ValidationError
    from core.logging import setup_logging

Example:
    setup_logging()

    async with async_session_maker() as session:
        result = await IngestionRunner(session).run(settings.CSV_FILE_PATH)
"""

__all__ = [
    "settings",
    "get_session",
    "setup_logging",
    # Exceptions
    "IngestionException",
    "RowError",
    "MalformedRowError",
    "ArityError",
    "ValidationError",
    "StorageError",
    "StorageWriteError",
    "StorageConnectivityError",
    "ReportGenerationError",
]
