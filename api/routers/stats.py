# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: stats.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_stats_service
from api.schemas.stats import StatsResponse
from services.RagStatsService import RagStatsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(svc: RagStatsService = Depends(get_stats_service)) -> StatsResponse:
    logger.info("GET /stats called")
    return StatsResponse(**await svc.get_stats())
