"""
Pydantic schema for the storage-ready user record
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any


class UserRecord(BaseModel):
    """
    One row of the users table, as produced by the row mapper.

    Ensures:
    - name is non-empty after trimming
    - age is an integer
    - optional structured fields are None rather than empty mappings
    """

    name: str = Field(..., min_length=1)
    age: int
    address: Optional[Dict[str, str]] = None
    additional_info: Optional[Dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty after stripping")
        return v

    @field_validator("address", "additional_info")
    @classmethod
    def empty_as_none(cls, v):
        """Absent, not empty"""
        return v or None

    def to_row(self) -> Dict[str, Any]:
        """Column values in insert order: name, age, address, additional_info"""
        return {
            "name": self.name,
            "age": self.age,
            "address": self.address,
            "additional_info": self.additional_info,
        }
