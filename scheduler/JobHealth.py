# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-08
# Description: JobHealth
# -----------------------------------------------------------------------------
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

HEALTHY = "healthy"
WARNING = "warning"
CRITICAL = "critical"

EMA_WEIGHT = 0.2


def compute_health(consecutive_failures: int, critical_after: int = 3) -> str:
    if consecutive_failures >= critical_after:
        return CRITICAL
    if consecutive_failures >= 1:
        return WARNING
    return HEALTHY


def update_average(previous: Optional[float], latest: float, weight: float = EMA_WEIGHT) -> float:
    """Exponential moving average; the first observation seeds it."""
    if previous is None:
        return float(latest)
    return (1 - weight) * previous + weight * float(latest)


@dataclass(frozen=True)
class JobStatus:
    job_name: str
    last_run_time: Optional[datetime] = None
    last_run_status: Optional[str] = None
    consecutive_failures: int = 0
    last_processed_count: int = 0
    avg_processing_time: Optional[float] = None
    health: str = HEALTHY
    updated_at: Optional[datetime] = None

    def after_run(
            self,
            *,
            succeeded: bool,
            processed_count: int,
            processing_time_ms: float,
            at: datetime,
            critical_after: int = 3,
    ) -> "JobStatus":
        failures = 0 if succeeded else self.consecutive_failures + 1
        return replace(
            self,
            last_run_time=at,
            last_run_status="success" if succeeded else "failed",
            consecutive_failures=failures,
            last_processed_count=processed_count,
            avg_processing_time=update_average(self.avg_processing_time, processing_time_ms),
            health=compute_health(failures, critical_after),
            updated_at=at,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobName": self.job_name,
            "lastRunTime": self.last_run_time.isoformat() if self.last_run_time else None,
            "lastRunStatus": self.last_run_status,
            "consecutiveFailures": self.consecutive_failures,
            "lastProcessedCount": self.last_processed_count,
            "avgProcessingTime": self.avg_processing_time,
            "health": self.health,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
