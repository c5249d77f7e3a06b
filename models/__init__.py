"""
SQLAlchemy ORM models for database tables.

Models:
    base: Declarative base and shared enums (IngestionState, RunStatus)
    user: Normalized user rows written by the ingestion pipeline

Database Schema:
    address and additional_info use PostgreSQL JSONB; absent values are
    stored as SQL NULL rather than an empty JSON object.

Usage:
    from models.user import User
    from models.base import Base, IngestionState, RunStatus
"""

__all__ = [
    "Base",
    "IngestionState",
    "RunStatus",
    "User",
]
