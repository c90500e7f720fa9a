# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-08
# Updated: 2026-10-14
# Description: RecordEmbeddingPipeline
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from chunking.RecordChunker import RecordChunker
from embedding.EmbeddingRecord import pair_segments
from embedding.EmbeddingStatus import EmbeddingStatus
from embedding.RagEmbedder import RagEmbedder
from errors.RagErrors import RagPipelineError
from record.RagRecord import RagRecord
from store.RecordStore import RecordStore
from utility.logging_utils import get_class_logger
from vectorstore.VectorSynchronizer import VectorSynchronizer


@dataclass
class PipelineResult:
    processed_ids: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    segment_count: int = 0

    @property
    def attempted(self) -> int:
        return len(self.processed_ids) + len(self.failed)

    @property
    def all_failed(self) -> bool:
        return bool(self.failed) and not self.processed_ids


class RecordEmbeddingPipeline:
    """
    Record -> segments -> vectors -> verified index entries -> last_embedded_at.

    Records are handled one at a time. A RagPipelineError or a store error on a
    record leaves its last_embedded_at untouched, is collected in
    PipelineResult.failed, and the next record is processed. Anything else
    propagates.
    """

    def __init__(
            self,
            *,
            chunker: RecordChunker,
            embedder: RagEmbedder,
            synchronizer: VectorSynchronizer,
            record_store: RecordStore,
            logger=None,
    ):
        self.chunker = chunker
        self.embedder = embedder
        self.synchronizer = synchronizer
        self.record_store = record_store
        self.logger = logger or get_class_logger(self.__class__)

    async def embed_record(self, record: RagRecord, status: EmbeddingStatus | None = None) -> int:
        """Embed and commit one record. Returns the number of segments written."""
        segments = self.chunker.chunk(record)
        vectors = await self.embedder.embed([s.content for s in segments], status)
        await self.synchronizer.upsert(pair_segments(segments, vectors))

        # older, longer versions of the record may have left extra chunk ids behind
        await self.synchronizer.prune_record(record.id, [s.id for s in segments])

        await self.record_store.mark_embedded([record.id])
        self.logger.debug("Embedded record %s (%d segments): %s", record.id, len(segments), record.short_preview())
        return len(segments)

    async def embed_records(
            self,
            records: Sequence[RagRecord],
            status: EmbeddingStatus | None = None,
    ) -> PipelineResult:
        result = PipelineResult()

        for record in records:
            try:
                result.segment_count += await self.embed_record(record, status)
                result.processed_ids.append(record.id)
            except RagPipelineError as e:
                self.logger.warning("Record %s failed to embed: %s", record.id, e)
                result.failed[record.id] = str(e)
            except SQLAlchemyError as e:
                self.logger.error("Record %s embedded but could not be marked: %s", record.id, e)
                result.failed[record.id] = f"{type(e).__name__}: {e}"

        self.logger.info(
            "Embedded %d/%d records (%d segments, %d failed)",
            len(result.processed_ids),
            result.attempted,
            result.segment_count,
            len(result.failed),
        )
        return result
