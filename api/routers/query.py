# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: query router
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_query_service
from api.schemas.query import QueryHit, QueryRequest, QueryResponse
from services.RagQueryService import RagQueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/query", tags=["query"])


@router.post("", response_model=QueryResponse)
async def post_query(
    req: QueryRequest,
    svc: RagQueryService = Depends(get_query_service),
) -> QueryResponse:
    # blank / whitespace queries surface as InvalidQueryError -> 400
    result = await svc.search(req.query, top_k=req.top_k, where=req.where)

    hits = [
        QueryHit(**h)
        for h in svc.to_hits(result, include_text=req.include_text, include_metadata=req.include_metadata)
    ]
    logger.info("POST /query returned %d hits", len(hits))

    return QueryResponse(query=req.query, top_k=req.top_k, results=hits)
