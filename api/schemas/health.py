# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Updated: 2026-10-16
# Description: health.py
# -----------------------------------------------------------------------------
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    status: str
    message: str


class CheckSummary(BaseModel):
    total: int
    passed: int
    failed: int


class DeepHealthResponse(BaseModel):
    """Per-check pass/fail plus the persisted re-embedding job health."""
    model_config = ConfigDict(populate_by_name=True)

    status: str  # ok | degraded
    results: Dict[str, bool]
    summary: CheckSummary
    job_health: Optional[str] = Field(None, alias="jobHealth")
    checked_at: str = Field(alias="checkedAt")
