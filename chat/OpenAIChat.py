# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-10-10
# Description: OpenAIChat
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from utility.logging_utils import get_class_logger

Message = Dict[str, str]  # {"role": "system"|"user"|"assistant", "content": "..."}


@dataclass
class OpenAIChat:
    """
        Async OpenAI chat completions wrapper.

        Expected Config fields:
          cfg.openai_api_key: str
          cfg.openai_base_url: str (optional)
          cfg.openai_chat_model: str  (e.g. "gpt-4o-mini")
    """

    cfg: Any = None
    client: Any = None
    model: Optional[str] = None
    logger: Any = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)

        self.model = self.model or getattr(self.cfg, "openai_chat_model", None)
        if not self.model:
            raise ValueError("Config missing openai_chat_model for chat completions.")

        if self.client is None:
            if not getattr(self.cfg, "openai_api_key", None):
                raise ValueError("Config is missing openai_api_key")
            self.client = AsyncOpenAI(
                api_key=self.cfg.openai_api_key,
                base_url=getattr(self.cfg, "openai_base_url", "") or None,
            )

        self.logger.info("OpenAIChat initialised (model=%s)", self.model)

    async def chat(
            self,
            messages: List[Message],
            temperature: float = 0.7,
            max_tokens: int = 500,
            extra_params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not messages:
            raise ValueError("messages must be non-empty.")

        params: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if extra_params:
            params.update(extra_params)

        self.logger.debug(
            "Chat request: model=%s temp=%s max_tokens=%s messages=%d",
            self.model, temperature, max_tokens, len(messages)
        )

        resp = await self.client.chat.completions.create(**params)
        self.logger.debug("Raw ChatCompletion response: %r", resp)

        # full response object, callers pick content/usage
        return resp

    @staticmethod
    def answer_text(resp: Any) -> str:
        try:
            return resp.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as e:
            raise RuntimeError(f"Unexpected chat response format: {e}") from e

    async def simple_chat(
            self,
            user_text: str,
            system_text: Optional[str] = None,
            **kwargs: Any,
    ) -> dict:
        messages: List[Message] = []
        if system_text:
            messages.append({"role": "system", "content": system_text})
        messages.append({"role": "user", "content": user_text})

        resp = await self.chat(messages, **kwargs)
        content = self.answer_text(resp)

        self.logger.info("Chat answer generated (model=%s)", getattr(resp, "model", None))
        return {
            "answer": content,
            "usage": getattr(resp, "usage", None),
            "model": getattr(resp, "model", None),
        }

    async def healthcheck(self) -> bool:
        try:
            await self.simple_chat("ping", max_tokens=5, temperature=0.0)
            return True
        except (openai.OpenAIError, RuntimeError) as e:
            self.logger.warning("Chat healthcheck failed: %s", e)
            return False
