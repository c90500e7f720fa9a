# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-03
# Description: RagErrors
# -----------------------------------------------------------------------------
from typing import Any, Dict, Iterable, List, Optional


class RagPipelineError(Exception):
    """Base class for every failure raised by the RAG pipeline."""


class EmbeddingError(RagPipelineError):
    """
    Embedding provider failure.

    `retryable` is True for rate limiting, timeouts, connection drops and 5xx
    responses; False for rejected input (oversized, malformed) and auth errors.
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class DataError(RagPipelineError):
    """Provider returned data that breaks a pipeline contract (vector norm, score range)."""


class VectorIndexError(RagPipelineError):
    """Vector index write/read failed after retries."""


class VerificationError(RagPipelineError):
    """Upserted vectors could not be fetched back from the index."""

    def __init__(self, message: str, *, missing_ids: Iterable[str] = ()) -> None:
        self.missing_ids: List[str] = list(missing_ids)
        if self.missing_ids:
            message = f"{message} (missing ids: {', '.join(self.missing_ids)})"
        super().__init__(message)


class InvalidQueryError(RagPipelineError, ValueError):
    """Search query is empty or blank."""


class MissingContextError(RagPipelineError, ValueError):
    """Prompt requested without any retrieved context."""


class MissingQueryError(RagPipelineError, ValueError):
    """Prompt requested without a question."""


class DocumentImportError(RagPipelineError):
    """A single document could not be converted; the importer quarantines it and moves on."""

    def __init__(self, message: str, *, file_name: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.file_name = file_name
        self.details = details or {}


class SchedulerRunError(RagPipelineError):
    """A re-embedding run failed as a whole."""

    def __init__(self, message: str, *, failed_records: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.failed_records = dict(failed_records or {})
