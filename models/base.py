from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()


# ============================================================================
# ENUMS
# ============================================================================

class IngestionState(str, enum.Enum):
    """Lifecycle of a single ingestion run"""
    IDLE = "idle"
    HEADER_PENDING = "header_pending"
    STREAMING = "streaming"
    FLUSHING = "flushing"
    COMMITTING = "committing"
    ROLLING_BACK = "rolling_back"
    REPORT_PENDING = "report_pending"
    DONE = "done"


class RunStatus(str, enum.Enum):
    """Final transaction outcome of an ingestion run"""
    PENDING = "pending"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
