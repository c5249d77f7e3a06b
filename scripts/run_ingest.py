"""
Script to ingest one CSV file from the command line
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.database import engine
from core.logging import setup_logging
from ingestion.runner import run_ingestion

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Stream a CSV file of users into PostgreSQL")
    parser.add_argument(
        "file_path",
        nargs="?",
        default=settings.CSV_FILE_PATH,
        help="CSV file to ingest (defaults to CSV_FILE_PATH)"
    )
    return parser.parse_args(argv)


async def main(file_path: str) -> int:
    try:
        result = await run_ingestion(file_path)
    finally:
        await engine.dispose()

    logger.info(
        f"Ingestion {result['status']}: "
        f"Read={result['lines_read']}, Loaded={result['records_loaded']}, "
        f"Malformed={result['rows_malformed']}, Invalid={result['rows_invalid']}"
    )
    return 0 if result["status"] == "committed" else 1


if __name__ == "__main__":
    args = parse_args()
    setup_logging()

    if not args.file_path:
        logger.error("No CSV file given and CSV_FILE_PATH is not set")
        sys.exit(2)

    sys.exit(asyncio.run(main(args.file_path)))
