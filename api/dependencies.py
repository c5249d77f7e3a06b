"""
Shared FastAPI dependencies
"""

from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession
from core.database import async_session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session"""
    async with async_session_maker() as session:
        yield session


class IngestionGuard:
    """Admits one ingestion run at a time; further triggers are refused while it runs."""

    def __init__(self):
        self.running = False

    def try_acquire(self) -> bool:
        if self.running:
            return False
        self.running = True
        return True

    def release(self):
        self.running = False


ingestion_guard = IngestionGuard()


def get_ingestion_guard() -> IngestionGuard:
    return ingestion_guard
