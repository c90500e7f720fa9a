# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-09
# Description: RagPromptBuilder
# -----------------------------------------------------------------------------
from typing import Any, Dict, List, Mapping, Sequence, Union

from errors.RagErrors import MissingContextError, MissingQueryError
from vectorstore.RagVectorIndex import ScoredMatch

CONTEXT_HEADER = "Context from previous messages:"
INSTRUCTION = (
    "Using the context above where it is relevant, answer the following question. "
    "If the context does not contain the answer, say so."
)
SYSTEM_PERSONA = (
    "You are a helpful AI assistant for a team chat workspace. "
    "Answer the user's question clearly and concisely, grounding your answer in the "
    "provided message history."
)

Chunk = Union[ScoredMatch, Mapping[str, Any]]


def _unpack(chunk: Chunk) -> tuple[str, Mapping[str, Any]]:
    if isinstance(chunk, ScoredMatch):
        return chunk.content, chunk.metadata
    return str(chunk.get("content") or ""), chunk.get("metadata") or {}


class RagPromptBuilder:
    """
    Turns retrieved chunks + a question into a grounded prompt.

    Plain form:
        Context from previous messages:
        [alice at 2026-10-01T09:00:00]
        The capital of France is Paris.

        <instruction>
        <query>
    """

    def __init__(self, header: str = CONTEXT_HEADER, instruction: str = INSTRUCTION, persona: str = SYSTEM_PERSONA):
        self.header = header
        self.instruction = instruction
        self.persona = persona

    @staticmethod
    def _validate(chunks: Sequence[Chunk], query: str) -> None:
        if not chunks:
            raise MissingContextError("At least one context chunk is required to build a prompt")
        if not isinstance(query, str) or not query.strip():
            raise MissingQueryError("A non-empty query is required to build a prompt")

    def context_block(self, chunks: Sequence[Chunk]) -> str:
        lines: List[str] = [self.header]
        for chunk in chunks:
            content, meta = _unpack(chunk)
            sender = meta.get("sender") or meta.get("sender_username") or "unknown"
            timestamp = meta.get("created_at") or "unknown"
            lines.append(f"[{sender} at {timestamp}]")
            lines.append(content)
        return "\n".join(lines)

    def build(self, chunks: Sequence[Chunk], query: str) -> str:
        self._validate(chunks, query)
        return f"{self.context_block(chunks)}\n\n{self.instruction}\n{query}"

    def build_chat(self, chunks: Sequence[Chunk], query: str) -> List[Dict[str, str]]:
        self._validate(chunks, query)
        return [
            {"role": "system", "content": self.persona},
            {"role": "user", "content": f"{self.context_block(chunks)}\n\nQuestion: {query}"},
        ]
