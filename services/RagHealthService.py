# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Updated: 2026-10-16
# Description: RagHealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Optional

from api.schemas.health import CheckSummary, DeepHealthResponse
from health.TestRunner import TestRunner
from store.MonitoringStore import MonitoringStore
from store.db import utc_now


@dataclass
class RagHealthService:
    """
    Wraps TestRunner, which runs smoke tests against the store, vector index,
    embedding provider and chat model. Adds the persisted job health so a
    critical re-embedding job is visible next to the connectivity checks.
    """

    test_runner: TestRunner
    monitoring: Optional[MonitoringStore] = None
    job_name: str = "reembedding"

    async def deep_health(self, run_chat: bool = False) -> DeepHealthResponse:
        results = await self.test_runner.run_all(run_chat=run_chat)

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)

        job_health = None
        if self.monitoring is not None and results.get("store_health"):
            job_health = (await self.monitoring.get_job_status(self.job_name)).health

        return DeepHealthResponse(
            status="ok" if passed == total else "degraded",
            results=results,
            summary=CheckSummary(total=total, passed=passed, failed=total - passed),
            job_health=job_health,
            checked_at=utc_now().isoformat(),
        )
