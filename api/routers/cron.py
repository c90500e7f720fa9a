# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: cron.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_monitoring_store, get_scheduler, require_cron_secret
from api.schemas.cron import CronRunResponse, CronRunResult, CronStatusResponse
from scheduler.ReembeddingScheduler import ReembeddingScheduler
from store.MonitoringStore import MonitoringStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(require_cron_secret)])


@router.api_route("/reembedding", methods=["GET", "POST"], response_model=CronRunResponse)
async def run_reembedding(scheduler: ReembeddingScheduler = Depends(get_scheduler)):
    logger.info("Cron trigger: re-embedding run requested")
    summary = await scheduler.run_once()

    if summary.status == "error":
        return JSONResponse(status_code=500, content={"success": False, "error": summary.error})

    return CronRunResponse(
        success=True,
        result=CronRunResult(
            success=summary.success,
            messages_processed=summary.messages_processed,
            processing_time=summary.processing_time_ms,
            status=summary.status,
        ),
    )


@router.get("/status", response_model=CronStatusResponse)
async def cron_status(
        scheduler: ReembeddingScheduler = Depends(get_scheduler),
        monitoring: MonitoringStore = Depends(get_monitoring_store),
) -> CronStatusResponse:
    job = await monitoring.get_job_status(scheduler.job_name)
    return CronStatusResponse(scheduler=scheduler.status(), job=job.to_dict())
