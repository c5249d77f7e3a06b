"""
Line parsing and nested record construction for comma-delimited input.

Fields are split on every comma; quoting and escaping are not supported,
so a comma inside a value is always treated as a delimiter.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

from core.exceptions import MalformedRowError

logger = logging.getLogger(__name__)

HeaderPath = Tuple[str, ...]
NestedValue = Union[Optional[str], Dict[str, Any]]
NestedRecord = Dict[str, NestedValue]

DELIMITER = ","
PATH_SEPARATOR = "."


def parse_line(line: Any) -> List[str]:
    """
    Split one raw line into trimmed tokens.

    Returns an empty list for non-string input so callers can skip it.
    """
    if not isinstance(line, str):
        logger.warning(f"Invalid CSV line input, expected string: {line!r}")
        return []
    return [token.strip() for token in line.split(DELIMITER)]


def parse_header(line: str) -> List[HeaderPath]:
    """Turn a header line into dot-segmented paths (``address.city`` -> ``("address", "city")``)"""
    return [tuple(column.split(PATH_SEPARATOR)) for column in parse_line(line)]


def ensure_arity(header_paths: Sequence[HeaderPath], values: Sequence[str], line_number: Optional[int] = None):
    """Raise MalformedRowError unless there is exactly one value per header column"""
    if len(values) != len(header_paths):
        raise MalformedRowError(
            "Column count does not match header",
            context={
                "line_number": line_number,
                "expected_columns": len(header_paths),
                "actual_columns": len(values),
            }
        )


def build_record(header_paths: Sequence[HeaderPath], values: Sequence[str]) -> NestedRecord:
    """
    Build a nested record from header paths and row values.

    Missing values count as None and surplus values are ignored; empty
    tokens become None. Collisions are last-write-wins: a later scalar
    replaces an earlier branch, and a later nested path replaces an
    earlier scalar at the same key.
    """
    record: NestedRecord = {}

    for index, path in enumerate(header_paths):
        raw = values[index] if index < len(values) else None
        value = raw if raw != "" else None

        current = record
        for segment in path[:-1]:
            child = current.get(segment)
            if not isinstance(child, dict):
                child = {}
                current[segment] = child
            current = child
        current[path[-1]] = value

    return record
