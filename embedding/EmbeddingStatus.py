# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-04
# Description: EmbeddingStatus
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class EmbeddingStatus:
    """
    Progress of one embedding job. Created by the caller for each job and passed
    into RagEmbedder.embed(); never shared across requests.
    """
    is_complete: bool = False
    processed_count: int = 0
    total_count: int = 0
    last_error: Optional[str] = None

    def reset(self, total_count: int = 0) -> None:
        self.is_complete = False
        self.processed_count = 0
        self.total_count = total_count
        self.last_error = None

    def add_total(self, count: int) -> None:
        self.is_complete = False
        self.total_count += count

    def advance(self, count: int) -> None:
        self.processed_count += count
        if self.processed_count >= self.total_count:
            self.is_complete = True

    def fail(self, error: BaseException | str) -> None:
        self.last_error = str(error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isComplete": self.is_complete,
            "processedCount": self.processed_count,
            "totalCount": self.total_count,
            "lastError": self.last_error,
        }
