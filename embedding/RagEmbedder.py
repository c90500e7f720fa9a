# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-04
# Updated: 2026-10-12
# Description: RagEmbedder
# -----------------------------------------------------------------------------
from typing import Any, List, Optional, Sequence

import numpy as np
import openai
from openai import AsyncAzureOpenAI, AsyncOpenAI

from config.Config import Config
from embedding.EmbeddingStatus import EmbeddingStatus
from errors.RagErrors import DataError, EmbeddingError
from utility.logging_utils import get_class_logger
from utility.retry import BackoffPolicy, retry_async

RETRYABLE_STATUS_CODES = frozenset({408, 409, 429})
NORM_TOLERANCE = 0.01


def classify_provider_error(exc: BaseException) -> EmbeddingError:
    """Map an OpenAI SDK exception to an EmbeddingError with retryability."""
    if isinstance(exc, (openai.RateLimitError, openai.APIConnectionError, openai.InternalServerError)):
        status = getattr(exc, "status_code", None)
        return EmbeddingError(f"Embedding provider unavailable: {exc}", retryable=True, status_code=status)

    if isinstance(exc, openai.APIStatusError):
        status = exc.status_code
        retryable = status in RETRYABLE_STATUS_CODES or status >= 500
        return EmbeddingError(f"Embedding request rejected ({status}): {exc}", retryable=retryable, status_code=status)

    return EmbeddingError(f"Embedding request failed: {exc}", retryable=False)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, EmbeddingError) and exc.retryable


class RagEmbedder:
    """
    Converts text into fixed-dimension unit vectors via the OpenAI embeddings API.

    - batches of up to `batch_size` texts per provider call
    - newlines replaced by spaces before sending
    - every vector must already be unit length (1 +/- 0.01); anything else is a
      DataError and is never renormalised here
    - retryable provider errors are retried with exponential backoff, then raised
    """

    def __init__(
            self,
            cfg: Config | None = None,
            *,
            client: Any = None,
            model: Optional[str] = None,
            batch_size: int = 512,
            dimensions: Optional[int] = None,
            backoff: BackoffPolicy | None = None,
            logger=None,
    ):
        if cfg is None and client is None:
            raise ValueError("RagEmbedder needs either a Config or an explicit client")

        self.cfg = cfg
        self.batch_size = batch_size
        self.dimensions = dimensions
        self.backoff = backoff or BackoffPolicy()
        self.logger = logger or get_class_logger(self.__class__)

        self.model = model or (cfg.embed_model if cfg is not None else "text-embedding-3-large")
        self.client = client or self._build_client(cfg)

        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")

        self.logger.info(
            "RagEmbedder initialised (model=%s, batch_size=%d, dimensions=%s)",
            self.model,
            self.batch_size,
            self.dimensions,
        )

    @staticmethod
    def _build_client(cfg: Config) -> Any:
        if cfg.uses_azure_embeddings:
            return AsyncAzureOpenAI(
                api_key=cfg.openai_azure_api_key,
                azure_endpoint=cfg.openai_azure_endpoint,
                api_version="2024-10-21",
            )
        return AsyncOpenAI(
            api_key=cfg.openai_api_key,
            base_url=cfg.openai_base_url or None,
        )

    async def embed(
            self,
            texts: Sequence[str],
            status: EmbeddingStatus | None = None,
    ) -> np.ndarray:
        """
        Embed texts in provider-sized batches.
        Returns an (n, dim) float32 array, row i belongs to texts[i].
        """
        items = [self._prepare(t) for t in texts]
        if status is not None:
            status.add_total(len(items))

        if not items:
            if status is not None:
                status.is_complete = True
            return np.empty((0, self.dimensions or 0), dtype=np.float32)

        self.logger.debug("Embedding %d texts (batch=%d)", len(items), self.batch_size)

        batches: List[np.ndarray] = []
        for i in range(0, len(items), self.batch_size):
            batch = items[i:i + self.batch_size]
            try:
                arr = await retry_async(
                    self._embed_batch,
                    batch,
                    policy=self.backoff,
                    retry_if=_is_retryable,
                    logger=self.logger,
                )
            except (EmbeddingError, DataError) as e:
                self.logger.error("Embedding batch at offset %d failed: %s", i, e)
                if status is not None:
                    status.fail(e)
                raise

            batches.append(arr)
            if status is not None:
                status.advance(len(batch))

        out = np.vstack(batches)
        self._check_dimensions(out)
        return out

    async def embed_one(self, text: str) -> np.ndarray:
        return (await self.embed([text]))[0]

    @staticmethod
    def _prepare(text: str) -> str:
        if not isinstance(text, str):
            raise TypeError(f"texts must be str, got {type(text).__name__}")
        return text.replace("\r\n", " ").replace("\n", " ")

    async def _embed_batch(self, texts: List[str]) -> np.ndarray:
        params = {"model": self.model, "input": texts}
        if self.dimensions is not None and not self.model.startswith("text-embedding-ada"):
            params["dimensions"] = self.dimensions

        try:
            resp = await self.client.embeddings.create(**params)
        except openai.OpenAIError as e:
            raise classify_provider_error(e) from e

        data = sorted(resp.data, key=lambda d: getattr(d, "index", 0))
        if len(data) != len(texts):
            raise DataError(f"Provider returned {len(data)} embeddings for {len(texts)} inputs")

        arr = np.asarray([d.embedding for d in data], dtype=np.float32)
        self._check_norms(arr)
        return arr

    @staticmethod
    def _check_norms(arr: np.ndarray) -> None:
        norms = np.linalg.norm(arr, axis=1)
        bad = np.flatnonzero(np.abs(norms - 1.0) > NORM_TOLERANCE)
        if bad.size:
            raise DataError(
                f"Embedding magnitude outside 1 +/- {NORM_TOLERANCE} for rows {bad.tolist()} "
                f"(norms={[round(float(norms[i]), 4) for i in bad]})"
            )

    def _check_dimensions(self, arr: np.ndarray) -> None:
        if self.dimensions is not None and arr.shape[1] != self.dimensions:
            raise DataError(f"Expected {self.dimensions}-dim embeddings, got {arr.shape[1]}")
