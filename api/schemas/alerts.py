# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: alerts.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Alert(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    type: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)
    service: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    acknowledged: bool = False
    acknowledged_at: Optional[str] = Field(None, alias="acknowledgedAt")
    acknowledged_by: Optional[str] = Field(None, alias="acknowledgedBy")


class AlertsResponse(BaseModel):
    alerts: List[Alert]


class AcknowledgeRequest(BaseModel):
    acknowledged_by: Optional[str] = None
