# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-09
# Description: RagQueryService
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from embedding.RagEmbedder import RagEmbedder
from errors.RagErrors import DataError, InvalidQueryError
from utility.logging_utils import get_class_logger
from vectorstore.RagVectorIndex import ScoredMatch
from vectorstore.VectorSynchronizer import VectorSynchronizer

# cosine distance from the index carries a little float noise around 0 and 2
SCORE_TOLERANCE = 1e-4


def checked_score(raw: float, match_id: str) -> float:
    if -SCORE_TOLERANCE <= raw < 0.0:
        return 0.0
    if 1.0 < raw <= 1.0 + SCORE_TOLERANCE:
        return 1.0
    if not 0.0 <= raw <= 1.0:
        raise DataError(f"Similarity score {raw!r} for {match_id} is outside [0, 1]")
    return raw


@dataclass(frozen=True)
class SearchResult:
    results: List[ScoredMatch] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.results


@dataclass
class RagQueryService:
    """Query text -> query vector -> nearest index entries, best first."""
    embedder: RagEmbedder
    synchronizer: VectorSynchronizer
    default_top_k: int = 5
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

    async def search(
            self,
            query: str,
            top_k: Optional[int] = None,
            where: Optional[Dict[str, Any]] = None,
    ) -> SearchResult:
        if not isinstance(query, str) or not query.strip():
            raise InvalidQueryError("Query is required and must be a non-empty string")

        top_k = top_k or self.default_top_k
        if top_k < 1:
            raise InvalidQueryError(f"top_k must be >= 1, got {top_k}")

        self.logger.info("Searching for %r (top_k=%d, where=%s)", query[:120], top_k, where)

        vector = await self.embedder.embed_one(query)
        matches = await self.synchronizer.query(vector.tolist(), top_k, where)

        results = [
            ScoredMatch(id=m.id, score=checked_score(m.score, m.id), content=m.content, metadata=m.metadata)
            for m in matches
        ]
        results.sort(key=lambda m: m.score, reverse=True)

        self.logger.info("Search returned %d results", len(results))
        return SearchResult(results=results[:top_k])

    @staticmethod
    def to_hits(result: SearchResult, include_text: bool = True, include_metadata: bool = True) -> List[Dict[str, Any]]:
        """Flatten a SearchResult into API-friendly dicts."""
        hits: List[Dict[str, Any]] = []
        for m in result.results:
            hit: Dict[str, Any] = {
                "id": m.id,
                "score": m.score,
                "record_id": m.metadata.get("original_record_id", m.id),
            }
            if include_text:
                hit["content"] = m.content
            if include_metadata:
                hit["metadata"] = dict(m.metadata)
            hits.append(hit)
        return hits
