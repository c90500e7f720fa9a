# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-04
# Description: EmbeddingRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Dict, Any, List, Sequence

import numpy as np

from chunking.RagSegment import RagSegment


@dataclass
class EmbeddingRecord:
    """Embedded segment: vector + original text + searchable metadata. Lives only until upserted."""
    segment_id: str
    vector: np.ndarray
    content: str
    metadata: Dict[str, Any]

    @classmethod
    def from_segment(cls, segment: RagSegment, vector: np.ndarray) -> "EmbeddingRecord":
        return cls(
            segment_id=segment.id,
            vector=vector,
            content=segment.content,
            metadata=segment.to_metadata(),
        )

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.vector))

    def vector_list(self) -> List[float]:
        return self.vector.astype(float).tolist()


def pair_segments(segments: Sequence[RagSegment], vectors: np.ndarray) -> List[EmbeddingRecord]:
    if len(segments) != len(vectors):
        raise ValueError(f"segments ({len(segments)}) and vectors ({len(vectors)}) length mismatch")
    return [EmbeddingRecord.from_segment(s, v) for s, v in zip(segments, vectors)]
