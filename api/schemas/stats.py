# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: stats.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class VectorStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_vector_count: int = Field(alias="totalVectorCount")
    dimension: Optional[int] = None
    name: str = ""


class StatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vector_stats: VectorStats = Field(alias="vectorStats")
    total_records: int = Field(alias="totalRecords")
    pending_records: int = Field(alias="pendingRecords")
    job_status: Dict[str, Any] = Field(alias="jobStatus")
