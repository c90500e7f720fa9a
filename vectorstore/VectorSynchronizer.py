# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-05
# Updated: 2026-10-14
# Description: VectorSynchronizer
# -----------------------------------------------------------------------------
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from embedding.EmbeddingRecord import EmbeddingRecord
from errors.RagErrors import RagPipelineError, VectorIndexError, VerificationError
from services.AlertService import AlertService
from utility.logging_utils import get_class_logger
from utility.retry import BackoffPolicy, poll_until, retry_async
from vectorstore.RagVectorIndex import IndexEntry, IndexStats, RagVectorIndex, ScoredMatch

ALERT_SERVICE_NAME = "vector-sync"


@dataclass(frozen=True)
class UpsertResult:
    upserted_count: int
    batch_count: int = 0
    verified_ids: List[str] = field(default_factory=list)


def _is_transient(exc: BaseException) -> bool:
    # malformed input will fail the same way on every attempt
    return not isinstance(exc, (RagPipelineError, ValueError, TypeError))


class VectorSynchronizer:
    """
    Commits embedded segments to the vector index and proves they landed.

    upsert():
      1. write in batches of `batch_size` (transient errors retried, then VectorIndexError)
      2. after each batch poll the batch's first id until fetchable (VerificationError otherwise)
      3. sleep `inter_batch_delay` between batches
      4. final pass re-fetches every sample id; anything missing fails the whole call
    A call either returns with every batch verified or raises.
    """

    def __init__(
            self,
            index: RagVectorIndex,
            *,
            batch_size: int = 100,
            write_policy: BackoffPolicy | None = None,
            verify_policy: BackoffPolicy | None = None,
            stats_policy: BackoffPolicy | None = None,
            inter_batch_delay: float = 0.5,
            alert_service: AlertService | None = None,
            logger=None,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")

        self.index = index
        self.batch_size = batch_size
        self.write_policy = write_policy or BackoffPolicy(max_attempts=5, base_delay=1.0, max_delay=30.0)
        self.verify_policy = verify_policy or BackoffPolicy(max_attempts=5, base_delay=2.0, max_delay=30.0)
        # stats warm-up reads back off exactly like write verification
        self.stats_policy = stats_policy or self.verify_policy
        self.inter_batch_delay = inter_batch_delay
        self.alert_service = alert_service
        self.logger = logger or get_class_logger(self.__class__)

    async def upsert(self, records: Sequence[EmbeddingRecord]) -> UpsertResult:
        records = list(records)
        if not records:
            return UpsertResult(upserted_count=0)

        ids = [r.segment_id for r in records]
        if len(set(ids)) != len(ids):
            raise ValueError("Duplicate segment ids in a single upsert")

        batches = [records[i:i + self.batch_size] for i in range(0, len(records), self.batch_size)]
        sample_ids: List[str] = []

        self.logger.info("Upserting %d vectors in %d batches", len(records), len(batches))

        for n, batch in enumerate(batches, start=1):
            await self._write_batch(batch, n)

            sample_id = batch[0].segment_id
            await self._verify_sample(sample_id, n)
            sample_ids.append(sample_id)

            self.logger.debug("Batch %d/%d verified (%d vectors)", n, len(batches), len(batch))
            if n < len(batches) and self.inter_batch_delay > 0:
                await asyncio.sleep(self.inter_batch_delay)

        await self._final_verification(sample_ids)

        self.logger.info("Upsert complete: %d vectors, %d batches verified", len(records), len(batches))
        return UpsertResult(upserted_count=len(records), batch_count=len(batches), verified_ids=sample_ids)

    async def _write_batch(self, batch: List[EmbeddingRecord], n: int) -> None:
        try:
            await retry_async(
                self.index.upsert,
                batch,
                policy=self.write_policy,
                retry_if=_is_transient,
                logger=self.logger,
            )
        except (ValueError, TypeError):
            raise
        except Exception as e:
            self.logger.error("Vector index write failed for batch %d: %s", n, e)
            raise VectorIndexError(f"Failed to upsert batch {n} ({len(batch)} vectors): {e}") from e

    async def _fetch_or_raise(self, ids: Sequence[str]) -> Dict[str, IndexEntry]:
        try:
            return await self.index.fetch(ids)
        except Exception as e:
            raise VectorIndexError(f"Failed to fetch {len(ids)} ids from the vector index: {e}") from e

    async def _verify_sample(self, sample_id: str, n: int) -> None:
        found = await poll_until(
            self._fetch_or_raise,
            [sample_id],
            policy=self.verify_policy,
            is_done=lambda entries: sample_id in entries,
            logger=self.logger,
        )
        if sample_id not in found:
            await self._verification_failed(
                f"Vector for batch {n} not visible after {self.verify_policy.max_attempts} attempts",
                [sample_id],
            )

    async def _final_verification(self, sample_ids: List[str]) -> None:
        found = await self._fetch_or_raise(sample_ids)
        missing = [i for i in sample_ids if i not in found]
        if missing:
            await self._verification_failed("Final verification failed", missing)

    async def _verification_failed(self, message: str, missing_ids: List[str]) -> None:
        self.logger.error("%s: %s", message, missing_ids)
        if self.alert_service is not None:
            await self.alert_service.error(
                "Vector upsert verification failed",
                {"error": message, "missingIds": missing_ids},
                service=ALERT_SERVICE_NAME,
            )
        raise VerificationError(message, missing_ids=missing_ids)

    async def fetch(self, ids: Sequence[str]) -> Dict[str, Optional[IndexEntry]]:
        """Every requested id is a key; unknown ids map to None."""
        found = await self._fetch_or_raise(list(ids))
        return {i: found.get(i) for i in ids}

    async def query(
            self,
            vector: Sequence[float],
            top_k: int,
            where: Dict[str, Any] | None = None,
    ) -> List[ScoredMatch]:
        try:
            return await self.index.query(vector, top_k, where)
        except Exception as e:
            raise VectorIndexError(f"Vector index query failed: {e}") from e

    async def get_stats(self) -> IndexStats:
        """Index stats; a zero count is re-read with backoff (fresh indexes report 0 for a while)."""
        try:
            return await poll_until(
                self.index.describe_stats,
                policy=self.stats_policy,
                is_done=lambda stats: stats.total_vector_count > 0,
                logger=self.logger,
            )
        except Exception as e:
            raise VectorIndexError(f"Failed to read vector index stats: {e}") from e

    async def prune_record(self, record_id: str, keep_ids: Sequence[str]) -> int:
        """Delete index entries of `record_id` that the chunker no longer produces."""
        keep = set(keep_ids)
        try:
            existing = await self.index.ids_for_record(record_id)
            stale = [i for i in existing if i not in keep]
            if not stale:
                return 0
            deleted = await self.index.delete(stale)
        except Exception as e:
            raise VectorIndexError(f"Failed to prune stale segments of {record_id}: {e}") from e

        self.logger.info("Pruned %d stale segments of record %s", deleted, record_id)
        return deleted
