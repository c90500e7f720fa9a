# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: RagStatsService.py
# -----------------------------------------------------------------------------
import logging
from datetime import timedelta
from typing import Any, Dict

from store.MonitoringStore import MonitoringStore
from store.RecordStore import RecordStore
from store.db import utc_now
from utility.logging_utils import get_class_logger
from vectorstore.VectorSynchronizer import VectorSynchronizer


class RagStatsService:
    """
    Stats service for the /stats endpoint.

    Responsibilities:
      - vector index stats (with warm-up retry via VectorSynchronizer)
      - record counts from the message store, incl. records awaiting embedding
      - persisted re-embedding job status
    """

    def __init__(
        self,
        *,
        synchronizer: VectorSynchronizer,
        record_store: RecordStore,
        monitoring: MonitoringStore,
        reembed_after_hours: float = 24.0,
        job_name: str = "reembedding",
        logger: logging.Logger | None = None,
    ) -> None:
        self.synchronizer = synchronizer
        self.record_store = record_store
        self.monitoring = monitoring
        self.reembed_after_hours = reembed_after_hours
        self.job_name = job_name
        self.logger = logger or get_class_logger(self.__class__)

    async def get_stats(self) -> Dict[str, Any]:
        cutoff = utc_now() - timedelta(hours=self.reembed_after_hours)

        vector_stats = await self.synchronizer.get_stats()
        total = await self.record_store.count_records()
        pending = await self.record_store.count_pending(cutoff)
        job = await self.monitoring.get_job_status(self.job_name)

        self.logger.info(
            "Stats: vectors=%d records=%d pending=%d health=%s",
            vector_stats.total_vector_count,
            total,
            pending,
            job.health,
        )
        return {
            "vectorStats": vector_stats.to_dict(),
            "totalRecords": total,
            "pendingRecords": pending,
            "jobStatus": job.to_dict(),
        }
