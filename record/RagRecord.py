# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-03
# Description: RagRecord
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class RagRecord:
    """
    A unit of retrievable text (chat message or imported document part).
    Owned by the source-of-truth store; the pipeline only writes back last_embedded_at.
    """
    id: str
    content: str
    source_metadata: Dict[str, Any] = field(default_factory=dict)
    last_embedded_at: Optional[datetime] = None

    @property
    def record_type(self) -> Optional[str]:
        return self.source_metadata.get("type")

    def is_stale(self, cutoff: datetime) -> bool:
        return self.last_embedded_at is None or self.last_embedded_at < cutoff

    def short_preview(self, n: int = 80) -> str:
        """Return a compact text preview for logging/debugging."""
        clean = " ".join(self.content.split())
        return (clean[:n] + "...") if len(clean) > n else clean
