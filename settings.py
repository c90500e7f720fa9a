# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-02
# Updated: 2026-10-14
# Description: settings.py
# -----------------------------------------------------------------------------
import os


def _env(name: str, default: str = "") -> str:
    """Read env var safely and strip whitespace."""
    return (os.getenv(name) or default).strip()


def _env_int(name: str, default: int) -> int:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be an int, got {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name, "")
    if v == "":
        return default
    try:
        return float(v)
    except ValueError as e:
        raise RuntimeError(f"Env var {name} must be a float, got {v!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name, "")
    if v == "":
        return default
    v = v.lower()
    if v in ("1", "true", "t", "yes", "y", "on"):
        return True
    if v in ("0", "false", "f", "no", "n", "off"):
        return False
    raise RuntimeError(f"Env var {name} must be a boolean, got {v!r}")


# -----------------------------------------------------------------------------
# Chunking
# -----------------------------------------------------------------------------
CHUNK_THRESHOLD = _env_int("RAG_CHUNK_THRESHOLD", 1000)
CHUNK_SIZE = _env_int("RAG_CHUNK_SIZE", 1000)
CHUNK_OVERLAP = _env_int("RAG_CHUNK_OVERLAP", 200)

# Greedy sentence packer used for imported documents
DOCUMENT_MAX_CHUNK = _env_int("RAG_DOCUMENT_MAX_CHUNK", 4000)


# -----------------------------------------------------------------------------
# Embeddings
# -----------------------------------------------------------------------------
EMBED_BATCH_SIZE = _env_int("RAG_EMBED_BATCH_SIZE", 512)

# text-embedding-3-large -> 3072, text-embedding-3-small -> 1536
EMBED_DIMENSIONS = _env_int("RAG_EMBED_DIMENSIONS", 3072)


# -----------------------------------------------------------------------------
# Retry / backoff (shared by embedder + vector synchronizer)
# -----------------------------------------------------------------------------
RETRY_MAX_ATTEMPTS = _env_int("RAG_RETRY_MAX_ATTEMPTS", 5)
RETRY_BASE_DELAY = _env_float("RAG_RETRY_BASE_DELAY", 1.0)
RETRY_MAX_DELAY = _env_float("RAG_RETRY_MAX_DELAY", 30.0)
RETRY_JITTER = _env_float("RAG_RETRY_JITTER", 0.5)


# -----------------------------------------------------------------------------
# Vector synchronisation
# -----------------------------------------------------------------------------
UPSERT_BATCH_SIZE = _env_int("RAG_UPSERT_BATCH_SIZE", 100)
VERIFY_BASE_DELAY = _env_float("RAG_VERIFY_BASE_DELAY", 2.0)
VERIFY_MAX_ATTEMPTS = _env_int("RAG_VERIFY_MAX_ATTEMPTS", 5)
INTER_BATCH_DELAY = _env_float("RAG_INTER_BATCH_DELAY", 0.5)


# -----------------------------------------------------------------------------
# Re-embedding scheduler
# -----------------------------------------------------------------------------
SCHEDULER_ENABLED = _env_bool("RAG_SCHEDULER_ENABLED", False)
SCHEDULER_INTERVAL_SECONDS = _env_float("RAG_SCHEDULER_INTERVAL_SECONDS", 300.0)
REEMBED_AFTER_HOURS = _env_float("RAG_REEMBED_AFTER_HOURS", 24.0)

# Kept below the 5 minute interval so a slow run is flagged before the next tick
MAX_PROCESSING_TIME_MS = _env_int("RAG_MAX_PROCESSING_TIME_MS", 240_000)
MAX_CONSECUTIVE_FAILURES = _env_int("RAG_MAX_CONSECUTIVE_FAILURES", 3)


# -----------------------------------------------------------------------------
# Query / chat defaults
# -----------------------------------------------------------------------------
DEFAULT_TOP_K = _env_int("RAG_DEFAULT_TOP_K", 5)
MAX_CONTEXT_CHARS = _env_int("RAG_MAX_CONTEXT_CHARS", 12000)
CHAT_TEMPERATURE = _env_float("RAG_CHAT_TEMPERATURE", 0.7)
CHAT_MAX_TOKENS = _env_int("RAG_CHAT_MAX_TOKENS", 500)


# -----------------------------------------------------------------------------
# Document import
# -----------------------------------------------------------------------------
DOCUMENTS_DIR = _env("RAG_DOCUMENTS_DIR", "./data/documents")
DEFAULT_CHANNEL_ID = _env("RAG_DEFAULT_CHANNEL_ID", "general")
IMPORT_BATCH_SIZE = _env_int("RAG_IMPORT_BATCH_SIZE", 5)
IMPORT_BATCH_DELAY = _env_float("RAG_IMPORT_BATCH_DELAY", 0.5)
IMPORT_DOCUMENT_DELAY = _env_float("RAG_IMPORT_DOCUMENT_DELAY", 1.0)


# -----------------------------------------------------------------------------
# Sanity checks (tunable)
# -----------------------------------------------------------------------------
if CHUNK_OVERLAP >= CHUNK_SIZE:
    raise RuntimeError(
        f"RAG_CHUNK_OVERLAP ({CHUNK_OVERLAP}) must be < RAG_CHUNK_SIZE ({CHUNK_SIZE})"
    )

if MAX_PROCESSING_TIME_MS >= SCHEDULER_INTERVAL_SECONDS * 1000:
    raise RuntimeError("RAG_MAX_PROCESSING_TIME_MS must be below the scheduler interval")
