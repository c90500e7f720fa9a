# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-08
# Updated: 2026-10-15
# Description: ReembeddingScheduler
# -----------------------------------------------------------------------------
"""
Staleness-driven re-embedding job.

    idle -> running -> success | failed -> idle

One run at a time: a run requested while another is active is skipped, not
queued. Run manually with:

    python -m scheduler.ReembeddingScheduler
"""
import asyncio
import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional, Set

from embedding.EmbeddingStatus import EmbeddingStatus
from errors.RagErrors import RagPipelineError, SchedulerRunError
from scheduler.JobHealth import JobStatus
from services.AlertService import AlertService
from services.RecordEmbeddingPipeline import RecordEmbeddingPipeline
from store.MonitoringStore import MonitoringStore
from store.RecordStore import RecordStore
from store.db import utc_now
from utility.logging_utils import get_class_logger, get_logger

JOB_NAME = "reembedding"
ALERT_SERVICE_NAME = "re-embedding"


class SchedulerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class RunSummary:
    success: bool
    status: str  # success | failed | skipped | error
    messages_processed: int = 0
    processing_time_ms: int = 0
    failed_records: Dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    started_at: Optional[datetime] = None

    @classmethod
    def skipped(cls) -> "RunSummary":
        return cls(success=False, status="skipped", error="Previous run still in progress")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "messagesProcessed": self.messages_processed,
            "processingTime": self.processing_time_ms,
            "status": self.status,
            "failedRecords": dict(self.failed_records),
            "error": self.error,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
        }


class ReembeddingScheduler:
    """
    Finds stale records, pushes them through RecordEmbeddingPipeline, then
    records job health and raises alerts.

    A run fails when it raises outright or when every attempted record failed.
    Both count against job health; an exception that is not a RagPipelineError
    is reported with status "error". Partial record failures still count as
    success and raise a warning alert listing the failed records.
    """

    def __init__(
            self,
            *,
            record_store: RecordStore,
            pipeline: RecordEmbeddingPipeline,
            monitoring: MonitoringStore,
            alerts: AlertService,
            interval_seconds: float = 300.0,
            reembed_after_hours: float = 24.0,
            max_processing_time_ms: int = 240_000,
            max_consecutive_failures: int = 3,
            max_records_per_run: Optional[int] = None,
            job_name: str = JOB_NAME,
            logger=None,
    ):
        self.record_store = record_store
        self.pipeline = pipeline
        self.monitoring = monitoring
        self.alerts = alerts
        self.interval_seconds = interval_seconds
        self.reembed_after_hours = reembed_after_hours
        self.max_processing_time_ms = max_processing_time_ms
        self.max_consecutive_failures = max_consecutive_failures
        self.max_records_per_run = max_records_per_run
        self.job_name = job_name
        self.logger = logger or get_class_logger(self.__class__)

        self.state = SchedulerState.IDLE
        self.last_summary: Optional[RunSummary] = None
        self.embedding_status = EmbeddingStatus()

        self._lock = asyncio.Lock()
        self._timer: Optional[asyncio.Task] = None
        self._runs: Set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    # ---- single run -----------------------------------------------------------

    async def run_once(self) -> RunSummary:
        if self._lock.locked():
            self.logger.info("Previous re-embedding run still active, skipping this run")
            return RunSummary.skipped()

        async with self._lock:
            self.state = SchedulerState.RUNNING
            started_at = utc_now()
            start = time.perf_counter()
            self.logger.info("=== Starting re-embedding run (%s) ===", started_at.isoformat())

            try:
                summary = await self._execute(started_at, start)
            except Exception as e:
                # top-level boundary: never let a tick task die silently
                self.logger.exception("Re-embedding run threw an exception")
                await self.alerts.error(
                    "Re-embedding job threw an exception",
                    {"error": str(e), "errorType": type(e).__name__},
                    service=ALERT_SERVICE_NAME,
                )
                summary = RunSummary(
                    success=False,
                    status="error",
                    processing_time_ms=int((time.perf_counter() - start) * 1000),
                    error=str(e),
                    started_at=started_at,
                )

            self.state = SchedulerState.SUCCESS if summary.success else SchedulerState.FAILED
            self.last_summary = summary
            self.logger.info(
                "Re-embedding run finished: status=%s processed=%d time=%dms",
                summary.status,
                summary.messages_processed,
                summary.processing_time_ms,
            )
            self.state = SchedulerState.IDLE
            return summary

    async def _execute(self, started_at: datetime, start: float) -> RunSummary:
        job = await self.monitoring.get_job_status(self.job_name)

        status = EmbeddingStatus()
        self.embedding_status = status

        processed = 0
        failed_records: Dict[str, str] = {}
        error: Optional[str] = None
        unexpected: Optional[BaseException] = None

        try:
            cutoff = started_at - timedelta(hours=self.reembed_after_hours)
            records = await self.record_store.fetch_stale_records(cutoff, limit=self.max_records_per_run)
            self.logger.info("Found %d records needing embedding", len(records))

            result = await self.pipeline.embed_records(records, status)
            processed = len(result.processed_ids)
            failed_records = dict(result.failed)

            if result.all_failed:
                raise SchedulerRunError(
                    f"All {len(failed_records)} attempted records failed", failed_records=failed_records
                )
            status.is_complete = True
        except RagPipelineError as e:
            error = str(e)
            status.fail(e)
            self.logger.error("Re-embedding run failed: %s", e)
        except Exception as e:
            # counts against job health like any other failed run
            error = str(e)
            unexpected = e
            status.fail(e)
            self.logger.exception("Re-embedding run threw an exception")

        elapsed_ms = int((time.perf_counter() - start) * 1000)
        succeeded = error is None

        job = job.after_run(
            succeeded=succeeded,
            processed_count=processed,
            processing_time_ms=elapsed_ms,
            at=utc_now(),
            critical_after=self.max_consecutive_failures,
        )
        await self.monitoring.save_job_status(job)

        summary = RunSummary(
            success=succeeded,
            status="success" if succeeded else ("error" if unexpected is not None else "failed"),
            messages_processed=processed,
            processing_time_ms=elapsed_ms,
            failed_records=failed_records,
            error=error,
            started_at=started_at,
        )
        await self._raise_alerts(job, summary, unexpected)
        return summary

    async def _raise_alerts(
            self,
            job: JobStatus,
            summary: RunSummary,
            unexpected: Optional[BaseException] = None,
    ) -> None:
        if unexpected is not None:
            await self.alerts.error(
                "Re-embedding job threw an exception",
                {
                    "error": summary.error,
                    "errorType": type(unexpected).__name__,
                    "consecutiveFailures": job.consecutive_failures,
                },
                service=ALERT_SERVICE_NAME,
            )
        elif not summary.success:
            await self.alerts.error(
                "Re-embedding job failed",
                {"error": summary.error, "consecutiveFailures": job.consecutive_failures},
                service=ALERT_SERVICE_NAME,
            )
        if not summary.success:
            if job.consecutive_failures >= self.max_consecutive_failures:
                await self.alerts.error(
                    "Re-embedding job has failed multiple times",
                    {"consecutiveFailures": job.consecutive_failures, "lastError": summary.error},
                    service=ALERT_SERVICE_NAME,
                )
        elif summary.failed_records:
            await self.alerts.warning(
                "Re-embedding job completed with record failures",
                {"failedRecords": summary.failed_records, "messagesProcessed": summary.messages_processed},
                service=ALERT_SERVICE_NAME,
            )

        if summary.processing_time_ms > self.max_processing_time_ms:
            await self.alerts.warning(
                "Re-embedding job took longer than expected",
                {
                    "processingTime": summary.processing_time_ms,
                    "maxAllowed": self.max_processing_time_ms,
                    "messagesProcessed": summary.messages_processed,
                },
                service=ALERT_SERVICE_NAME,
            )

    # ---- timer ----------------------------------------------------------------

    def trigger(self) -> Optional[asyncio.Task]:
        """Launch a run in the background unless one is already active."""
        if self.is_running:
            self.logger.info("Tick skipped: re-embedding run already in progress")
            return None
        task = asyncio.create_task(self.run_once(), name=f"{self.job_name}-run")
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    async def _tick_loop(self, run_immediately: bool) -> None:
        if not run_immediately:
            await asyncio.sleep(self.interval_seconds)
        while True:
            self.trigger()
            await asyncio.sleep(self.interval_seconds)

    def start(self, *, run_immediately: bool = True) -> None:
        if self._timer is not None and not self._timer.done():
            return
        self._timer = asyncio.create_task(self._tick_loop(run_immediately), name=f"{self.job_name}-timer")
        self.logger.info("Re-embedding timer started (every %.0fs)", self.interval_seconds)

    async def stop(self, *, wait_for_runs: bool = True) -> None:
        if self._timer is not None:
            self._timer.cancel()
            try:
                await self._timer
            except asyncio.CancelledError:
                pass
            self._timer = None
            self.logger.info("Re-embedding timer stopped")

        if wait_for_runs and self._runs:
            await asyncio.gather(*list(self._runs), return_exceptions=True)

    def status(self) -> Dict[str, Any]:
        return {
            "jobName": self.job_name,
            "state": SchedulerState.RUNNING.value if self.is_running else self.state.value,
            "isRunning": self.is_running,
            "timerActive": self._timer is not None and not self._timer.done(),
            "intervalSeconds": self.interval_seconds,
            "lastRun": self.last_summary.to_dict() if self.last_summary else None,
            "embeddingStatus": self.embedding_status.to_dict(),
        }


async def _main() -> int:
    from api.AppContainer import AppContainer

    logger = get_logger(__name__)
    container = AppContainer.from_config()
    await container.start()
    try:
        summary = await container.scheduler.run_once()
    finally:
        await container.stop()

    print(json.dumps(summary.to_dict(), indent=2))
    logger.info("Finished: success=%s", summary.success)
    return 0 if summary.success else 1


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_main()))
