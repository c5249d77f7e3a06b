"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Health Check Schemas
# ============================================================================

class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field(..., description="Overall system status: healthy or unhealthy")
    timestamp: datetime = Field(default_factory=_utcnow)
    database_connected: bool
    ingestion_in_progress: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "database_connected": True,
                "ingestion_in_progress": False
            }
        }


# ============================================================================
# Upload Schemas
# ============================================================================

class UploadAcceptedResponse(BaseModel):
    """Returned once ingestion has been scheduled"""
    message: str
    path: str
    request_id: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    path: Optional[str] = None


# ============================================================================
# Report Schemas
# ============================================================================

class AgeDistributionResponse(BaseModel):
    """Age distribution over users with a known age"""
    timestamp: datetime = Field(default_factory=_utcnow)
    has_data: bool
    distribution: Dict[str, str] = Field(
        default_factory=dict,
        description="Age band -> percentage with two decimals, in ascending band order"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "timestamp": "2024-01-15T10:30:00Z",
                "has_data": True,
                "distribution": {
                    "< 20": "25.00",
                    "20 to 40": "50.00",
                    "40 to 60": "0.00",
                    "> 60": "25.00"
                }
            }
        }
