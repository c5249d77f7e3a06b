"""
Streaming CSV ingestion pipeline.

Modules:
    parser: Line splitting and nested record construction from dot-path headers
    accumulator: Bounded in-memory batch buffer
    runner: Orchestrator owning the run's transaction and state machine
    report: Age distribution report over stored users

Subpackages:
    transformers: Row mapper (validation and reshaping into UserRecord)
    loaders: Batch writer issuing one multi-row INSERT per batch

Architecture:
    Data flows strictly forward, one line at a time:

    1. Parse - split the line, check it against the header column count
    2. Build - nest values under their dot-separated header paths
    3. Map - validate name/age, collect address and additional_info
    4. Load - buffer up to the batch size, then INSERT in one statement

    Row-level problems are logged and skipped. Storage or I/O faults
    roll back the whole run. The report runs after either outcome.

Usage:
    from ingestion.runner import IngestionRunner

    async with async_session_maker() as session:
        result = await IngestionRunner(session).run("/data/users.csv")

    print(f"{result['status']}: loaded {result['records_loaded']} records")
"""

__all__ = [
    "IngestionRunner",
    "RowMapper",
    "BatchAccumulator",
    "BatchWriter",
    "ReportGenerator",
    "parse_line",
    "parse_header",
    "build_record",
]
