# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: cron.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class CronRunResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    messages_processed: int = Field(0, alias="messagesProcessed")
    processing_time: int = Field(0, alias="processingTime")
    status: str


class CronRunResponse(BaseModel):
    success: bool
    result: Optional[CronRunResult] = None
    error: Optional[str] = None


class CronStatusResponse(BaseModel):
    scheduler: Dict[str, Any]
    job: Dict[str, Any]
