"""
Age distribution endpoint
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from api.dependencies import get_db
from core.exceptions import ReportGenerationError
from ingestion.report import ReportGenerator
from schemas.api import AgeDistributionResponse
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Report"])


@router.get("/report", response_model=AgeDistributionResponse)
async def get_report(db: AsyncSession = Depends(get_db)):
    """Percentage of users per age band, over users with a known age"""
    try:
        distribution = await ReportGenerator(db).distribution()
    except ReportGenerationError as e:
        logger.error(f"Report query failed: {e}", extra={"error_context": e.to_dict()})
        raise HTTPException(status_code=503, detail="Age distribution is unavailable")

    if distribution is None:
        return AgeDistributionResponse(has_data=False)

    return AgeDistributionResponse(
        has_data=True,
        distribution={band: str(share) for band, share in distribution.items()}
    )
