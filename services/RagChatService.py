# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-10
# Description: RagChatService.py
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, List, Optional, Sequence

from chat.OpenAIChat import Message, OpenAIChat
from errors.RagErrors import InvalidQueryError
from services.RagPromptBuilder import RagPromptBuilder
from services.RagQueryService import RagQueryService
from utility.logging_utils import get_class_logger
from vectorstore.RagVectorIndex import ScoredMatch


def _usage_dict(usage: Any) -> Optional[Dict[str, Any]]:
    if usage is None:
        return None
    if hasattr(usage, "model_dump"):
        return usage.model_dump()
    return dict(usage) if isinstance(usage, dict) else {"raw": str(usage)}


class RagChatService:
    """
    Chat Service:
        - retrieves relevant chunks using RagQueryService
        - builds a grounded chat prompt with RagPromptBuilder
        - calls OpenAIChat to generate the answer
        - answers from the model alone when nothing relevant was retrieved
    """

    def __init__(
            self,
            query_service: RagQueryService,
            chat_client: OpenAIChat,
            prompt_builder: RagPromptBuilder | None = None,
            *,
            max_context_chars: int = 12_000,
            temperature: float = 0.7,
            max_tokens: int = 500,
            logger: logging.Logger | None = None,
    ):
        self.query_service = query_service
        self.chat_client = chat_client
        self.prompt_builder = prompt_builder or RagPromptBuilder()
        self.max_context_chars = max_context_chars
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.logger = logger or get_class_logger(self.__class__)

    def _cap_context(self, matches: Sequence[ScoredMatch]) -> List[ScoredMatch]:
        kept: List[ScoredMatch] = []
        total = 0
        for m in matches:
            if kept and total + len(m.content) > self.max_context_chars:
                self.logger.warning(
                    "Truncating context at %d chars (limit=%d, dropped=%d)",
                    total,
                    self.max_context_chars,
                    len(matches) - len(kept),
                )
                break
            kept.append(m)
            total += len(m.content)
        return kept

    async def ask(self, question: str, top_k: Optional[int] = None) -> Dict[str, Any]:
        q = (question or "").strip()
        if not q:
            raise InvalidQueryError("question must not be empty")

        self.logger.info("ask: question=%r top_k=%s (start)", q[:120], top_k)

        result = await self.query_service.search(q, top_k=top_k)
        context = self._cap_context(result.results)

        if context:
            messages: List[Message] = self.prompt_builder.build_chat(context, q)
        else:
            self.logger.info("ask: no relevant context, answering from model knowledge")
            messages = [
                {"role": "system", "content": self.prompt_builder.persona},
                {"role": "user", "content": q},
            ]

        resp = await self.chat_client.chat(messages, temperature=self.temperature, max_tokens=self.max_tokens)
        answer = self.chat_client.answer_text(resp)

        self.logger.info("ask: answer_chars=%d sources=%d (done)", len(answer), len(context))
        return {
            "question": q,
            "answer": answer,
            "sources": self.query_service.to_hits(type(result)(results=context)),
            "model": getattr(resp, "model", None),
            "usage": _usage_dict(getattr(resp, "usage", None)),
        }
