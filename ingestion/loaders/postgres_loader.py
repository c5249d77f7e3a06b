"""
Write batches of user records into PostgreSQL inside the caller's transaction
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from models.user import User
from schemas.user import UserRecord
from core.exceptions import StorageWriteError
import logging

logger = logging.getLogger(__name__)


class BatchWriter:
    """
    Insert user records with one multi-row INSERT per batch.

    Ensures:
    - One statement (one round-trip) per batch, rows bound in batch order
    - Four parameters per row: name, age, address, additional_info
    - No commit: the transaction belongs to the caller
    """

    table_name = User.__tablename__

    def build_statement(self, batch: List[UserRecord]):
        """Multi-VALUES insert for the batch; address/additional_info bind through JSONB"""
        return insert(User).values([record.to_row() for record in batch])

    async def write(self, batch: List[UserRecord], db_session: AsyncSession) -> int:
        """
        Insert a batch using the borrowed session.

        Args:
            batch: Mapped records, in file order
            db_session: Session holding the run's open transaction

        Returns:
            Number of rows written

        Raises:
            StorageWriteError: constraint violation or connectivity fault
        """
        if not batch:
            return 0

        stmt = self.build_statement(batch)

        try:
            await db_session.execute(stmt)
        except (SQLAlchemyError, OSError) as e:
            raise StorageWriteError(
                "Failed to insert batch",
                context={
                    "operation": "INSERT",
                    "table_name": self.table_name,
                    "batch_size": len(batch),
                },
                original_exception=e
            )

        logger.debug(f"Inserted {len(batch)} rows into {self.table_name}")
        return len(batch)
