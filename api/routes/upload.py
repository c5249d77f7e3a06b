"""
Ingestion trigger endpoint
"""

import os
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse
from api.dependencies import get_ingestion_guard, IngestionGuard
from core.config import settings
from ingestion.runner import run_ingestion
from schemas.api import UploadAcceptedResponse, ErrorResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Ingestion"])


async def ingest_in_background(file_path: str, guard: IngestionGuard):
    """Run ingestion after the response is sent; the guard is released whatever happens"""
    try:
        result = await run_ingestion(file_path)
        logger.info(
            f"CSV processing finished: {result['status']} - "
            f"Loaded: {result['records_loaded']}, "
            f"Skipped: {result['rows_malformed'] + result['rows_invalid']}"
        )
    except Exception:
        logger.exception("Error during CSV processing")
    finally:
        guard.release()


@router.post(
    "/upload",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=UploadAcceptedResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def upload(
    request: Request,
    background_tasks: BackgroundTasks,
    guard: IngestionGuard = Depends(get_ingestion_guard)
):
    """
    Start ingesting the configured CSV file.

    Returns immediately; progress and the age distribution report are
    written to the server log.
    """
    request_id = getattr(request.state, "request_id", None)
    csv_file_path = settings.CSV_FILE_PATH

    if not csv_file_path:
        logger.error("CSV_FILE_PATH environment variable is not set.")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Server configuration error: CSV_FILE_PATH is not set."}
        )

    if not os.path.isfile(csv_file_path):
        logger.error(f"CSV file not found at path: {csv_file_path}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "CSV file not found at the configured path.", "path": csv_file_path}
        )

    if not guard.try_acquire():
        logger.warning(f"[{request_id}] Ingestion already in progress; trigger rejected")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "An ingestion run is already in progress.", "path": csv_file_path}
        )

    background_tasks.add_task(ingest_in_background, csv_file_path, guard)
    logger.info(f"[{request_id}] CSV processing accepted for {csv_file_path}")

    return UploadAcceptedResponse(
        message="CSV processing accepted. Progress and report will be available in server logs.",
        path=csv_file_path,
        request_id=request_id
    )
