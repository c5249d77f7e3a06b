from sqlalchemy import Column, BigInteger, Integer, Text, DateTime, Index, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from models.base import Base

# SQL NULL for absent structured fields instead of a JSON 'null' literal
StructuredField = JSON(none_as_null=True).with_variant(JSONB(none_as_null=True), "postgresql")


class User(Base):
    """
    Normalized user rows produced by CSV ingestion.

    Field Mapping:
    - name.firstName + name.lastName -> name
    - age -> age
    - address.line1 / line2 / city / state -> address (JSONB)
    - every other top-level column -> additional_info (JSONB)
    """
    __tablename__ = "users"

    id = Column(BigInteger, primary_key=True, autoincrement=True)

    name = Column(Text, nullable=False)
    age = Column(Integer, nullable=True)
    address = Column(StructuredField, nullable=True)
    additional_info = Column(StructuredField, nullable=True)

    # Server-side so the batch insert binds only the four mapped columns
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_users_age", "age"),
    )
