"""
Custom exceptions for the ingestion pipeline with structured error context.

Every exception carries a context dictionary so failures can be logged
with enough information to find the offending line or batch.

Exception Hierarchy:
    IngestionException (base)
    ├── RowError (recoverable: row dropped, run continues)
    │   ├── MalformedRowError (alias: ArityError)
    │   └── ValidationError
    ├── StorageError (fatal: run rolled back)
    │   ├── StorageWriteError
    │   └── StorageConnectivityError
    └── ReportGenerationError (isolated: logged, never rethrown)
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class IngestionException(Exception):
    """
    Base exception for all ingestion-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (file, line number, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Row Errors
# ============================================================================

class RowError(IngestionException):
    """Base exception for problems confined to a single input row."""
    pass


class MalformedRowError(RowError):
    """
    Raised when a row's column count does not match the header.

    Context should include:
        - line_number: Line number in the input file
        - expected_columns: Number of header columns
        - actual_columns: Number of tokens found on the line
    """
    pass


ArityError = MalformedRowError


class ValidationError(RowError):
    """
    Raised when a mandatory field is missing or invalid.

    Context should include:
        - field_name: Name of the field that failed validation
        - field_value: Value that failed validation
    """
    pass


# ============================================================================
# Storage Errors
# ============================================================================

class StorageError(IngestionException):
    """Base exception for storage failures; fatal to the whole run."""
    pass


class StorageWriteError(StorageError):
    """
    Raised when a batch insert fails.

    Context should include:
        - operation: Database operation (INSERT)
        - table_name: Name of the table
        - batch_size: Number of rows in the failed batch
    """
    pass


class StorageConnectivityError(StorageError):
    """Raised when no connection or transaction can be opened."""
    pass


# ============================================================================
# Report Errors
# ============================================================================

class ReportGenerationError(IngestionException):
    """Raised when the age distribution report cannot be produced."""
    pass
