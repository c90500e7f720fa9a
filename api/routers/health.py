# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: health.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_health_service
from api.schemas.health import DeepHealthResponse, HealthResponse
from services.RagHealthService import RagHealthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", message="Chat RAG API running")


@router.get("/deep", response_model=DeepHealthResponse)
async def deep_health_check(
    svc: RagHealthService = Depends(get_health_service),
    run_chat: bool = Query(False, description="Also ping the chat completion model"),
) -> DeepHealthResponse:
    logger.info("GET /health/deep called (run_chat=%s)", run_chat)
    result = await svc.deep_health(run_chat=run_chat)
    logger.info("GET /health/deep completed (status=%s)", result.status)
    return result
