# ============================================================================
# File: ingestion/runner.py
# Description: Streaming CSV ingestion orchestrator with all-or-nothing commit
# ============================================================================
"""
Ingestion Runner - streams one CSV file into the users table.

This module provides:
- Line-by-line streaming (memory bounded by one batch)
- Row-level failures logged and skipped without aborting the run
- One transaction per run: COMMIT on clean EOF, ROLLBACK on any fatal fault
- An age distribution report after every run, whatever its outcome
"""

from pathlib import Path
from typing import Dict, Any, Optional, List, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
import logging

from core.config import settings
from core.database import async_session_maker
from core.exceptions import (
    IngestionException,
    MalformedRowError,
    ValidationError,
    StorageConnectivityError,
)
from ingestion.accumulator import BatchAccumulator
from ingestion.loaders.postgres_loader import BatchWriter
from ingestion.parser import HeaderPath, parse_line, parse_header, ensure_arity, build_record
from ingestion.report import ReportGenerator
from ingestion.transformers.mapper import RowMapper
from models.base import IngestionState, RunStatus

logger = logging.getLogger(__name__)


class IngestionRunner:
    """
    CSV ingestion orchestrator

    Responsibilities:
    - Own the session's transaction for the whole run
    - Drive parse → build → map → accumulate → flush
    - Commit or roll back, then trigger the report exactly once
    - Never raise: every outcome is logged and returned
    """

    def __init__(
        self,
        db_session: AsyncSession,
        batch_size: Optional[int] = None,
        mapper: Optional[RowMapper] = None,
        writer: Optional[BatchWriter] = None,
        report_generator: Optional[ReportGenerator] = None
    ):
        self.db = db_session
        self.batch_size = batch_size if batch_size is not None else settings.INGEST_BATCH_SIZE
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        self.mapper = mapper or RowMapper()
        self.writer = writer or BatchWriter()
        self.report_generator = report_generator or ReportGenerator(db_session)
        self.state = IngestionState.IDLE

    async def run(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Ingest a single file.

        Args:
            file_path: Comma-delimited file whose first non-empty line is the header

        Returns:
            Dictionary with run statistics:
            - status: "committed" or "rolled_back"
            - lines_read: Data lines seen (header and blank lines excluded)
            - records_accepted: Records mapped and buffered for insert
            - records_loaded: Records durably committed (0 after rollback)
            - rows_malformed / rows_invalid: Rows skipped
            - batches_written: INSERT statements issued
            - report: Report text, or None if it could not be produced
            - error: Error message when the run was rolled back
        """
        stats = {
            "lines_read": 0,
            "records_accepted": 0,
            "rows_malformed": 0,
            "rows_invalid": 0,
            "batches_written": 0,
        }
        status = RunStatus.PENDING
        error_message = None

        logger.info(f"Starting ingestion of {file_path}")

        try:
            await self._begin(file_path)
            await self._stream(file_path, stats)

            self.state = IngestionState.COMMITTING
            await self.db.commit()
            status = RunStatus.COMMITTED

            logger.info(
                f"Ingestion committed: Loaded: {stats['records_accepted']}, "
                f"Malformed: {stats['rows_malformed']}, Invalid: {stats['rows_invalid']}, "
                f"Batches: {stats['batches_written']}"
            )

        except IngestionException as e:
            error_message = e.message
            logger.error(
                f"Fatal error during ingestion, rolling back: {e}",
                exc_info=True,
                extra={"error_context": e.to_dict()}
            )
            status = await self._rollback()

        except Exception as e:
            error_message = str(e)
            logger.exception("Fatal error during ingestion, rolling back")
            status = await self._rollback()

        report = await self._report()
        self.state = IngestionState.DONE

        return {
            "status": status.value,
            "file_path": str(file_path),
            **stats,
            "records_loaded": stats["records_accepted"] if status == RunStatus.COMMITTED else 0,
            "report": report,
            "error": error_message,
        }

    async def _begin(self, file_path: Union[str, Path]):
        """Open the run's transaction and check out its connection"""
        try:
            await self.db.begin()
            await self.db.connection()
        except (SQLAlchemyError, OSError) as e:
            raise StorageConnectivityError(
                "Could not open a database transaction",
                context={"file_path": str(file_path)},
                original_exception=e
            )
        self.state = IngestionState.HEADER_PENDING

    async def _stream(self, file_path: Union[str, Path], stats: Dict[str, int]):
        header_paths: Optional[List[HeaderPath]] = None
        accumulator = BatchAccumulator(self.batch_size)

        # Universal newlines: CRLF and LF both arrive as "\n"; a leading BOM is dropped
        with open(file_path, "r", encoding="utf-8-sig") as stream:
            for line_number, raw_line in enumerate(stream, start=1):
                line = raw_line.strip()
                if not line:
                    continue

                if header_paths is None:
                    header_paths = parse_header(line)
                    self.state = IngestionState.STREAMING
                    logger.info(f"Header has {len(header_paths)} columns")
                    continue

                stats["lines_read"] += 1

                try:
                    values = parse_line(line)
                    ensure_arity(header_paths, values, line_number)
                    record = self.mapper.map(build_record(header_paths, values))

                except MalformedRowError as e:
                    stats["rows_malformed"] += 1
                    logger.warning(
                        f"Skipping malformed row at line {line_number}: {line}",
                        extra={"error_context": e.to_dict()}
                    )
                    continue

                except ValidationError as e:
                    stats["rows_invalid"] += 1
                    logger.warning(
                        f"Skipping invalid row at line {line_number} ({e.message}): {line}",
                        extra={"error_context": e.to_dict()}
                    )
                    continue

                accumulator.add(record)
                stats["records_accepted"] += 1

                if accumulator.is_full():
                    await self._flush(accumulator, stats)

        if header_paths is None:
            logger.warning(f"No header line found in {file_path}; nothing to ingest")

        await self._flush(accumulator, stats)

    async def _flush(self, accumulator: BatchAccumulator, stats: Dict[str, int]):
        if not len(accumulator):
            return

        self.state = IngestionState.FLUSHING
        batch = accumulator.drain()
        written = await self.writer.write(batch, self.db)
        stats["batches_written"] += 1

        logger.info(f"Batch {stats['batches_written']}: inserted {written} rows")
        self.state = IngestionState.STREAMING

    async def _rollback(self) -> RunStatus:
        self.state = IngestionState.ROLLING_BACK
        try:
            await self.db.rollback()
            logger.info("Transaction rolled back; no rows from this run were kept")
        except (SQLAlchemyError, OSError):
            logger.exception("Rollback failed; the connection will be discarded")
        return RunStatus.ROLLED_BACK

    async def _report(self) -> Optional[str]:
        self.state = IngestionState.REPORT_PENDING
        try:
            return await self.report_generator.generate()
        except Exception:
            # The commit/rollback outcome is already final
            logger.exception("Age distribution report generation failed")
            return None


async def run_ingestion(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Run one ingestion on a fresh session; the connection is released on every path"""
    async with async_session_maker() as session:
        runner = IngestionRunner(session)
        return await runner.run(file_path)
