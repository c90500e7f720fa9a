# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Updated: 2026-10-15
# Description: AppContainer.py
# -----------------------------------------------------------------------------
import asyncio
from typing import Optional

import settings
from chat.OpenAIChat import OpenAIChat
from chunking.DocumentPacker import DocumentPacker
from chunking.LangDetectDetector import LangDetectDetector
from chunking.RecordChunker import RecordChunker
from config.Config import Config
from embedding.RagEmbedder import RagEmbedder
from extractor.PdfTextExtractor import PdfTextExtractor
from health.TestRunner import TestRunner
from importer.DocumentImporter import DocumentImporter
from scheduler.ReembeddingScheduler import ReembeddingScheduler
from services.AlertService import AlertService
from services.RagChatService import RagChatService
from services.RagHealthService import RagHealthService
from services.RagPromptBuilder import RagPromptBuilder
from services.RagQueryService import RagQueryService
from services.RagStatsService import RagStatsService
from services.RecordEmbeddingPipeline import RecordEmbeddingPipeline
from store.MonitoringStore import MonitoringStore
from store.RecordStore import RecordStore
from store.db import Database
from utility.logging_utils import get_class_logger
from utility.retry import BackoffPolicy
from vectorstore.ChromaRagVectorIndex import ChromaRagVectorIndex
from vectorstore.RagVectorIndex import RagVectorIndex
from vectorstore.VectorSynchronizer import VectorSynchronizer


def default_backoff() -> BackoffPolicy:
    return BackoffPolicy(
        max_attempts=settings.RETRY_MAX_ATTEMPTS,
        base_delay=settings.RETRY_BASE_DELAY,
        max_delay=settings.RETRY_MAX_DELAY,
        jitter=settings.RETRY_JITTER,
    )


class AppContainer:
    """
    Owns object instantiation and application wiring.

    Construction does no I/O. `await start()` creates tables and connects the
    vector index before anything is served; `await stop()` releases them.
    Infrastructure (database, index, embedder, chat) can be injected, which is
    how tests swap in fakes.
    """

    def __init__(
            self,
            *,
            cfg: Config,
            db: Database,
            index: RagVectorIndex,
            embedder: RagEmbedder,
            chat: OpenAIChat,
            synchronizer: VectorSynchronizer | None = None,
            documents_dir: Optional[str] = None,
            import_batch_delay: float = settings.IMPORT_BATCH_DELAY,
            import_document_delay: float = settings.IMPORT_DOCUMENT_DELAY,
            scheduler_enabled: bool = settings.SCHEDULER_ENABLED,
    ) -> None:
        self.logger = get_class_logger(self.__class__)
        self.cfg = cfg
        self.db = db
        self.index = index
        self.embedder = embedder
        self.openai_chat = chat
        self.scheduler_enabled = scheduler_enabled
        self._started = False

        # Stores
        self.record_store = RecordStore(db)
        self.monitoring_store = MonitoringStore(db)
        self.alert_service = AlertService(self.monitoring_store)

        # Core pipeline
        self.chunker = RecordChunker(
            threshold=settings.CHUNK_THRESHOLD,
            chunk_size=settings.CHUNK_SIZE,
            overlap=settings.CHUNK_OVERLAP,
        )
        self.synchronizer = synchronizer or VectorSynchronizer(
            index,
            batch_size=settings.UPSERT_BATCH_SIZE,
            write_policy=default_backoff(),
            verify_policy=BackoffPolicy(
                max_attempts=settings.VERIFY_MAX_ATTEMPTS,
                base_delay=settings.VERIFY_BASE_DELAY,
                max_delay=settings.RETRY_MAX_DELAY,
            ),
            inter_batch_delay=settings.INTER_BATCH_DELAY,
        )
        if self.synchronizer.alert_service is None:
            self.synchronizer.alert_service = self.alert_service

        self.pipeline = RecordEmbeddingPipeline(
            chunker=self.chunker,
            embedder=embedder,
            synchronizer=self.synchronizer,
            record_store=self.record_store,
        )

        # Query + chat
        self.query_service = RagQueryService(
            embedder=embedder,
            synchronizer=self.synchronizer,
            default_top_k=settings.DEFAULT_TOP_K,
        )
        self.prompt_builder = RagPromptBuilder()
        self.chat_service = RagChatService(
            self.query_service,
            chat,
            self.prompt_builder,
            max_context_chars=settings.MAX_CONTEXT_CHARS,
            temperature=settings.CHAT_TEMPERATURE,
            max_tokens=settings.CHAT_MAX_TOKENS,
        )

        # Scheduler
        self.scheduler = ReembeddingScheduler(
            record_store=self.record_store,
            pipeline=self.pipeline,
            monitoring=self.monitoring_store,
            alerts=self.alert_service,
            interval_seconds=settings.SCHEDULER_INTERVAL_SECONDS,
            reembed_after_hours=settings.REEMBED_AFTER_HOURS,
            max_processing_time_ms=settings.MAX_PROCESSING_TIME_MS,
            max_consecutive_failures=settings.MAX_CONSECUTIVE_FAILURES,
        )

        # Document import
        self.importer = DocumentImporter(
            record_store=self.record_store,
            pipeline=self.pipeline,
            documents_dir=documents_dir or settings.DOCUMENTS_DIR,
            channel_id=settings.DEFAULT_CHANNEL_ID,
            packer=DocumentPacker(max_chars=settings.DOCUMENT_MAX_CHUNK),
            extractor=PdfTextExtractor(),
            lang_detector=LangDetectDetector(),
            batch_size=settings.IMPORT_BATCH_SIZE,
            batch_delay=import_batch_delay,
            document_delay=import_document_delay,
        )

        # Stats + health
        self.stats_service = RagStatsService(
            synchronizer=self.synchronizer,
            record_store=self.record_store,
            monitoring=self.monitoring_store,
            reembed_after_hours=settings.REEMBED_AFTER_HOURS,
        )
        self.test_runner = TestRunner(
            record_store=self.record_store,
            index=index,
            embedder=embedder,
            chat=chat,
            monitoring=self.monitoring_store,
        )
        self.health_service = RagHealthService(test_runner=self.test_runner, monitoring=self.monitoring_store)

    @classmethod
    def from_config(cls, cfg: Config | None = None, **overrides) -> "AppContainer":
        cfg = cfg or Config.from_env()
        return cls(
            cfg=cfg,
            db=Database(cfg.database_url),
            index=ChromaRagVectorIndex(cfg),
            embedder=RagEmbedder(
                cfg,
                batch_size=settings.EMBED_BATCH_SIZE,
                dimensions=settings.EMBED_DIMENSIONS,
                backoff=default_backoff(),
            ),
            chat=OpenAIChat(cfg=cfg),
            **overrides,
        )

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        if self._started:
            return
        self.logger.info("Starting application container: %s", self.cfg.summary())
        await asyncio.to_thread(self.db.create_all)
        await self.index.connect()
        self._started = True

        if self.scheduler_enabled:
            self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()
        self.db.dispose()
        self._started = False
        self.logger.info("Application container stopped")
