# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: api/schemas/chat.py
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from api.schemas.query import QueryHit


class ChatRequest(BaseModel):
    question: str = Field(..., min_length=1)

    # Retrieval controls (mirror /query)
    top_k: int = Field(5, ge=1, le=50)


class ChatResponse(BaseModel):
    question: str
    answer: str
    sources: List[QueryHit] = Field(default_factory=list)

    # helpful for debugging / telemetry
    model: Optional[str] = None
    usage: Optional[Dict[str, Any]] = None
