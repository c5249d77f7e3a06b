"""
Age distribution report over the users table
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Mapping, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case
from sqlalchemy.exc import SQLAlchemyError
from models.user import User
from core.exceptions import ReportGenerationError
import logging

logger = logging.getLogger(__name__)

# Ascending, fixed order regardless of query result order
AGE_BANDS = ("< 20", "20 to 40", "40 to 60", "> 60")

NO_DATA_MESSAGE = "No users with age data found."
REPORT_TITLE = "--- Age Distribution Report ---"
REPORT_FOOTER = "---------------------------------"
BAND_WIDTH = 12

_CENT = Decimal("0.01")

age_group = case(
    (User.age < 20, AGE_BANDS[0]),
    (User.age <= 40, AGE_BANDS[1]),
    (User.age <= 60, AGE_BANDS[2]),
    else_=AGE_BANDS[3],
).label("age_group")


def compute_distribution(total: int, counts: Mapping[str, int]) -> Dict[str, Decimal]:
    """Percentage of ``total`` per band, rounded half-up to two decimals; empty bands are 0.00"""
    distribution = {}
    for band in AGE_BANDS:
        count = counts.get(band, 0)
        share = Decimal(count * 100) / Decimal(total)
        distribution[band] = share.quantize(_CENT, rounding=ROUND_HALF_UP)
    return distribution


def format_report(distribution: Mapping[str, Decimal]) -> str:
    lines = [REPORT_TITLE, f"{'Age Group':<{BAND_WIDTH}} | % Distribution"]
    for band in AGE_BANDS:
        lines.append(f"{band:<{BAND_WIDTH}} | {distribution.get(band, Decimal('0.00'))}%")
    lines.append(REPORT_FOOTER)
    return "\n".join(lines)


class ReportGenerator:
    """Aggregates users with a known age into four fixed age bands."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def distribution(self) -> Optional[Dict[str, Decimal]]:
        """
        Query the age distribution.

        Returns:
            Band -> percentage in band order, or None when no user has an age

        Raises:
            ReportGenerationError: the aggregate queries failed
        """
        try:
            total_result = await self.db.execute(
                select(func.count()).select_from(User).where(User.age.isnot(None))
            )
            total = int(total_result.scalar_one() or 0)

            if total == 0:
                return None

            band_result = await self.db.execute(
                select(age_group, func.count())
                .where(User.age.isnot(None))
                .group_by(age_group)
            )
            counts = {band: int(count) for band, count in band_result.all()}

        except (SQLAlchemyError, OSError) as e:
            raise ReportGenerationError(
                "Failed to query age distribution",
                context={"table_name": User.__tablename__},
                original_exception=e
            )

        return compute_distribution(total, counts)

    async def generate(self) -> str:
        """Log the report table line by line and return it as text"""
        distribution = await self.distribution()

        if distribution is None:
            logger.info(NO_DATA_MESSAGE)
            return NO_DATA_MESSAGE

        report = format_report(distribution)
        for line in report.splitlines():
            logger.info(line)
        return report
