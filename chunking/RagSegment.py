# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-03
# Description: RagSegment
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class RagSegment:
    """
    A bounded fragment of a record's content, independently embeddable.
    Segments are regenerated whenever the record changes, never patched.
    """

    id: str
    content: str
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # freeze a private copy so callers cannot mutate shared metadata
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def chunk_index(self) -> int:
        return int(self.metadata.get("chunk_index", 0))

    @property
    def total_chunks(self) -> int:
        return int(self.metadata.get("total_chunks", 1))

    @property
    def original_record_id(self) -> str:
        return str(self.metadata.get("original_record_id", self.id))

    def to_metadata(self) -> Dict[str, Any]:
        """Plain dict copy suitable for vector index metadata or JSON."""
        return dict(self.metadata)

    def short_preview(self, n: int = 120) -> str:
        """Return a compact text preview for logging/debugging."""
        clean = " ".join(self.content.split())
        preview = (clean[:n] + "...") if len(clean) > n else clean
        return f"[{self.id} | {self.chunk_index + 1}/{self.total_chunks}] {preview}"
