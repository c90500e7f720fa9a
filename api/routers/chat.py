# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-12
# Description: chat.py
# -----------------------------------------------------------------------------
import logging

from fastapi import APIRouter, Depends

from api.dependencies import get_chat_service
from api.schemas.chat import ChatRequest, ChatResponse
from api.schemas.query import QueryHit
from services.RagChatService import RagChatService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("", response_model=ChatResponse)
async def post_chat(
        req: ChatRequest,
        svc: RagChatService = Depends(get_chat_service),
) -> ChatResponse:
    logger.info("POST /chat (start) question_len=%d top_k=%d", len(req.question), req.top_k)

    out = await svc.ask(req.question, top_k=req.top_k)

    logger.info("POST /chat (done) answer_len=%d sources=%d", len(out["answer"]), len(out["sources"]))
    return ChatResponse(
        question=out["question"],
        answer=out["answer"],
        sources=[QueryHit(**s) for s in out["sources"]],
        model=out.get("model"),
        usage=out.get("usage"),
    )
