# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-13
# Description: alerts.py
# -----------------------------------------------------------------------------
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_monitoring_store
from api.schemas.alerts import AcknowledgeRequest, Alert, AlertsResponse
from store.MonitoringStore import MonitoringStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertsResponse)
async def list_alerts(
        service: Optional[str] = None,
        unacknowledged_only: bool = False,
        limit: int = Query(50, ge=1, le=500),
        store: MonitoringStore = Depends(get_monitoring_store),
) -> AlertsResponse:
    rows = await store.list_alerts(service=service, unacknowledged_only=unacknowledged_only, limit=limit)
    return AlertsResponse(alerts=[Alert.model_validate(r) for r in rows])


@router.post("/{alert_id}/acknowledge", response_model=Alert)
async def acknowledge_alert(
        alert_id: int,
        req: AcknowledgeRequest | None = None,
        store: MonitoringStore = Depends(get_monitoring_store),
) -> Alert:
    row = await store.acknowledge_alert(alert_id, by=req.acknowledged_by if req else None)
    if row is None:
        logger.warning("POST /alerts/%d/acknowledge -> 404", alert_id)
        raise HTTPException(status_code=404, detail=f"alert {alert_id} not found")
    return Alert.model_validate(row)
