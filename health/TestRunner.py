# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: TestRunner
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Dict, Optional

from chat.OpenAIChat import OpenAIChat
from embedding.RagEmbedder import RagEmbedder
from scheduler.JobHealth import CRITICAL
from store.MonitoringStore import MonitoringStore
from store.RecordStore import RecordStore
from utility.logging_utils import get_class_logger
from vectorstore.RagVectorIndex import RagVectorIndex


class TestRunner:
    """
    Orchestrates all smoke tests and reports a consolidated result.

    Tests included:
      - store_health      (message store reachable)
      - vector_health     (vector index collection reachable)
      - embedding_health  (one embedding round-trip, unit norm)
      - chat_health       (chat completion ping, optional)
      - job_health        (re-embedding job not critical)
    """

    def __init__(
            self,
            *,
            record_store: RecordStore,
            index: RagVectorIndex,
            embedder: RagEmbedder,
            chat: OpenAIChat | None = None,
            monitoring: MonitoringStore | None = None,
            job_name: str = "reembedding",
            logger: Optional[logging.Logger] = None,
    ):
        self.record_store = record_store
        self.index = index
        self.embedder = embedder
        self.chat = chat
        self.monitoring = monitoring
        self.job_name = job_name
        self.logger = logger or get_class_logger(self.__class__)

    # -------------------------------------------------------------------------
    async def _check_store(self) -> bool:
        await self.record_store.count_records()
        return True

    async def _check_embedding(self) -> bool:
        vec = await self.embedder.embed_one("health check")
        return vec.size > 0

    async def _check_job(self) -> bool:
        status = await self.monitoring.get_job_status(self.job_name)
        return status.health != CRITICAL

    async def _run_check(self, name: str, check: Callable[[], Awaitable[bool]]) -> bool:
        try:
            ok = bool(await check())
        except Exception as e:
            # a smoke test reports failure, it never takes the endpoint down
            self.logger.exception("%s raised an exception: %s", name, e)
            ok = False
        self._log_result(name, ok)
        return ok

    async def run_all(self, run_chat: bool = False) -> Dict[str, bool]:
        """
        Run all configured smoke tests.

        :param run_chat: If True, also pings the chat completion model.
        :return: Dict mapping test names to True/False.
        """
        self.logger.info("Starting smoke test suite (run_chat=%s)", run_chat)

        results: Dict[str, bool] = {
            "store_health": await self._run_check("store_health", self._check_store),
            "vector_health": await self._run_check("vector_health", self.index.test_connection),
            "embedding_health": await self._run_check("embedding_health", self._check_embedding),
        }

        if run_chat and self.chat is not None:
            results["chat_health"] = await self._run_check("chat_health", self.chat.healthcheck)

        if self.monitoring is not None:
            results["job_health"] = await self._run_check("job_health", self._check_job)

        self._log_summary(results)
        return results

    # -------------------------------------------------------------------------
    def _log_result(self, name: str, ok: bool) -> None:
        if ok:
            self.logger.info("%s: PASS", name)
        else:
            self.logger.error("%s: FAIL", name)

    def _log_summary(self, results: Dict[str, bool]) -> None:
        total = len(results)
        passed = sum(1 for v in results.values() if v)
        failed = total - passed

        self.logger.info("Smoke test summary: %d total, %d passed, %d failed", total, passed, failed)
