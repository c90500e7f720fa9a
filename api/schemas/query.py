# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: query.py
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1)
    top_k: int = Field(5, ge=1, le=50)
    where: Optional[Dict[str, Any]] = None
    include_text: bool = True
    include_metadata: bool = True


class QueryHit(BaseModel):
    id: str
    record_id: Optional[str] = None
    score: float
    content: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class QueryResponse(BaseModel):
    query: str
    top_k: int
    results: List[QueryHit]
