"""
Pydantic schemas for data validation and serialization.

Schemas:
    user: Storage-ready user record produced by the row mapper
    api: API endpoint response schemas

Usage:
    from schemas.user import UserRecord
    from schemas.api import HealthCheckResponse, AgeDistributionResponse

Example:
    record = UserRecord(name="Ann Lee", age=30, address={"city": "Paris"})
    assert record.additional_info is None
"""

__all__ = [
    "UserRecord",
    "HealthCheckResponse",
    "UploadAcceptedResponse",
    "ErrorResponse",
    "AgeDistributionResponse",
]
