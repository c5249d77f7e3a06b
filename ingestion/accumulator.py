"""
In-memory batch buffer between the row mapper and the batch writer
"""

from typing import List
from schemas.user import UserRecord

DEFAULT_BATCH_SIZE = 1000


class BatchAccumulator:
    """Collects mapped records until the batch is full, then hands them over all at once."""

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.batch_size = batch_size
        self._records: List[UserRecord] = []

    def add(self, record: UserRecord):
        self._records.append(record)

    def is_full(self) -> bool:
        return len(self._records) >= self.batch_size

    def drain(self) -> List[UserRecord]:
        """Return everything buffered and start a new, empty batch"""
        records, self._records = self._records, []
        return records

    def __len__(self) -> int:
        return len(self._records)
