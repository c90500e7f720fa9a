# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-05
# Description: RagVectorIndex
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable

from embedding.EmbeddingRecord import EmbeddingRecord


@dataclass(frozen=True)
class IndexEntry:
    id: str
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoredMatch:
    """Nearest-neighbour hit; score = 1 - cosine distance (higher is closer)."""
    id: str
    score: float
    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class IndexStats:
    total_vector_count: int
    dimension: Optional[int] = None
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalVectorCount": self.total_vector_count,
            "dimension": self.dimension,
            "name": self.name,
        }


@runtime_checkable
class RagVectorIndex(Protocol):
    """
    Raw access to the external vector index. No retries or verification here,
    VectorSynchronizer layers those on top.
    """

    async def connect(self) -> None:
        ...

    async def test_connection(self) -> bool:
        ...

    async def upsert(self, records: Sequence[EmbeddingRecord]) -> None:
        ...

    async def fetch(self, ids: Sequence[str]) -> Dict[str, IndexEntry]:
        ...

    async def query(
            self,
            vector: Sequence[float],
            top_k: int,
            where: Dict[str, Any] | None = None,
    ) -> List[ScoredMatch]:
        ...

    async def describe_stats(self) -> IndexStats:
        ...

    async def delete(self, ids: Sequence[str]) -> int:
        ...

    async def ids_for_record(self, record_id: str) -> List[str]:
        ...
