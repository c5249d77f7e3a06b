"""
Map nested CSV records onto the fixed users schema with validation
"""

from typing import Dict, Any, Optional
import re
import logging

from core.exceptions import ValidationError
from ingestion.parser import NestedRecord
from schemas.user import UserRecord

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("line1", "line2", "city", "state")
CLAIMED_KEYS = frozenset({"name", "age", "address"})

_LEADING_INT = re.compile(r"^[+-]?\d+")

# users.age is a PostgreSQL integer (int4)
AGE_MIN = -2 ** 31
AGE_MAX = 2 ** 31 - 1


class RowMapper:
    """
    Validate and reshape one nested record into a UserRecord.

    Handles:
    - Mandatory name (first + last) and integer age
    - Known address subfields, kept only when non-blank
    - Every other top-level field as additional_info

    Pure: no I/O, no shared state.
    """

    def map(self, record: NestedRecord) -> UserRecord:
        """
        Map a nested record.

        Raises:
            ValidationError: a mandatory field is missing or invalid
        """
        if not isinstance(record, dict):
            raise ValidationError(
                "Record must be a mapping",
                context={"field_value": repr(record)}
            )

        name_node = record.get("name")
        name_node = name_node if isinstance(name_node, dict) else {}
        first_name = self._clean(name_node.get("firstName"))
        last_name = self._clean(name_node.get("lastName"))

        if not first_name:
            raise ValidationError("Missing first name", context={"field_name": "name.firstName"})
        if not last_name:
            raise ValidationError("Missing last name", context={"field_name": "name.lastName"})

        age = self._parse_int(record.get("age"))
        if age is None:
            raise ValidationError(
                "Missing or non-numeric age",
                context={"field_name": "age", "field_value": record.get("age")}
            )
        if not AGE_MIN <= age <= AGE_MAX:
            raise ValidationError(
                "Age out of integer range",
                context={"field_name": "age", "field_value": record.get("age")}
            )

        return UserRecord(
            name=f"{first_name} {last_name}".strip(),
            age=age,
            address=self._build_address(record.get("address")),
            additional_info=self._build_additional_info(record),
        )

    def _build_address(self, node: Any) -> Optional[Dict[str, str]]:
        if not isinstance(node, dict):
            return None
        address = {}
        for field in ADDRESS_FIELDS:
            value = self._clean(node.get(field))
            if value:
                address[field] = value
        return address or None

    def _build_additional_info(self, record: NestedRecord) -> Optional[Dict[str, Any]]:
        residual = {}
        for key, value in record.items():
            if key in CLAIMED_KEYS:
                continue
            value = self._prune(value)
            if value:
                residual[key] = value
        return residual or None

    def _prune(self, value: Any) -> Any:
        """Trim scalars and drop blank leaves from nested mappings"""
        if isinstance(value, dict):
            pruned = {}
            for key, child in value.items():
                child = self._prune(child)
                if child:
                    pruned[key] = child
            return pruned
        return self._clean(value)

    @staticmethod
    def _clean(value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        return value.strip() or None

    @staticmethod
    def _parse_int(value: Any) -> Optional[int]:
        """Leading base-10 integer, ignoring trailing text ("30yrs" -> 30)"""
        if not isinstance(value, str):
            return None
        match = _LEADING_INT.match(value.strip())
        if not match:
            return None
        return int(match.group())
