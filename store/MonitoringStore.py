# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-08
# Description: MonitoringStore
# -----------------------------------------------------------------------------
import asyncio
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from scheduler.JobHealth import JobStatus
from store.db import Database, utc_now
from store.models import CronStatusRow, SystemAlertRow
from utility.logging_utils import get_class_logger


def _alert_to_dict(row: SystemAlertRow) -> Dict[str, Any]:
    return {
        "id": row.id,
        "type": row.type,
        "message": row.message,
        "details": row.details or {},
        "service": row.service,
        "createdAt": row.created_at.isoformat() if row.created_at else None,
        "acknowledged": row.acknowledged,
        "acknowledgedAt": row.acknowledged_at.isoformat() if row.acknowledged_at else None,
        "acknowledgedBy": row.acknowledged_by,
    }


class MonitoringStore:
    """Persistence for scheduler job status (cron_status) and alerts (system_alerts)."""

    def __init__(self, db: Database, *, logger=None):
        self.db = db
        self.logger = logger or get_class_logger(self.__class__)

    # ---- job status -----------------------------------------------------------

    def _get_status(self, job_name: str) -> JobStatus:
        with self.db.session() as s:
            row = s.get(CronStatusRow, job_name)
            if row is None:
                return JobStatus(job_name=job_name)
            return JobStatus(
                job_name=row.job_name,
                last_run_time=row.last_run_time,
                last_run_status=row.last_run_status,
                consecutive_failures=row.consecutive_failures,
                last_processed_count=row.last_processed_count,
                avg_processing_time=row.avg_processing_time,
                health=row.health,
                updated_at=row.updated_at,
            )

    def _save_status(self, status: JobStatus) -> None:
        with self.db.session() as s:
            s.merge(
                CronStatusRow(
                    job_name=status.job_name,
                    last_run_time=status.last_run_time,
                    last_run_status=status.last_run_status,
                    consecutive_failures=status.consecutive_failures,
                    last_processed_count=status.last_processed_count,
                    avg_processing_time=status.avg_processing_time,
                    health=status.health,
                    updated_at=status.updated_at or utc_now(),
                )
            )

    async def get_job_status(self, job_name: str) -> JobStatus:
        return await asyncio.to_thread(self._get_status, job_name)

    async def save_job_status(self, status: JobStatus) -> None:
        await asyncio.to_thread(self._save_status, status)
        self.logger.debug(
            "Saved job status %s (health=%s, failures=%d)",
            status.job_name,
            status.health,
            status.consecutive_failures,
        )

    # ---- alerts ---------------------------------------------------------------

    def _insert_alert(self, alert_type: str, message: str, details: Dict[str, Any], service: str) -> int:
        with self.db.session() as s:
            row = SystemAlertRow(type=alert_type, message=message, details=details, service=service)
            s.add(row)
            s.flush()
            return row.id

    def _list_alerts(self, service: Optional[str], unacknowledged_only: bool, limit: int) -> List[Dict[str, Any]]:
        stmt = select(SystemAlertRow)
        if service:
            stmt = stmt.where(SystemAlertRow.service == service)
        if unacknowledged_only:
            stmt = stmt.where(SystemAlertRow.acknowledged.is_(False))
        stmt = stmt.order_by(SystemAlertRow.created_at.desc(), SystemAlertRow.id.desc()).limit(limit)
        with self.db.session() as s:
            return [_alert_to_dict(r) for r in s.scalars(stmt).all()]

    def _acknowledge(self, alert_id: int, by: Optional[str]) -> Optional[Dict[str, Any]]:
        with self.db.session() as s:
            row = s.get(SystemAlertRow, alert_id)
            if row is None:
                return None
            if not row.acknowledged:
                row.acknowledged = True
                row.acknowledged_at = utc_now()
                row.acknowledged_by = by
            s.flush()
            return _alert_to_dict(row)

    async def insert_alert(
            self,
            alert_type: str,
            message: str,
            details: Dict[str, Any] | None = None,
            service: str = "re-embedding",
    ) -> int:
        return await asyncio.to_thread(self._insert_alert, alert_type, message, details or {}, service)

    async def list_alerts(
            self,
            *,
            service: Optional[str] = None,
            unacknowledged_only: bool = False,
            limit: int = 50,
    ) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._list_alerts, service, unacknowledged_only, limit)

    async def acknowledge_alert(self, alert_id: int, by: Optional[str] = None) -> Optional[Dict[str, Any]]:
        return await asyncio.to_thread(self._acknowledge, alert_id, by)
