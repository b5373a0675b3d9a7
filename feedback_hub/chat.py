"""Free-form questions about the feedback corpus."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .config import ChatConfig
from .errors import ChatAdapterError, InvalidInput
from .llm import Message, TextGenerator, extract_text
from .schemas import ChatTurn


logger = logging.getLogger(__name__)

NO_RESPONSE = "No response received"


class ChatAdapter:
    """Wraps a question with the analyst instruction and asks the model.

    Model failures come back as an apologetic answer rather than an exception,
    so a conversation is never interrupted by a provider outage.
    """

    def __init__(self, generator: TextGenerator, config: ChatConfig, max_tokens: int = 256):
        self.generator = generator
        self.config = config
        self.max_tokens = max_tokens

    def build_messages(self, question: str) -> List[Message]:
        return [
            {"role": "system", "content": self.config.system_prompt},
            {"role": "user", "content": question},
        ]

    async def ask(self, question: str) -> str:
        if not isinstance(question, str) or not question.strip():
            raise InvalidInput("message required")

        try:
            raw = await asyncio.to_thread(self.generator.generate, self.build_messages(question), self.max_tokens)
        except Exception as exc:
            failure = ChatAdapterError(str(exc) or exc.__class__.__name__)
            logger.warning("Chat model call failed: %s", failure)
            return f"Error connecting to AI: {failure}"
        return extract_text(raw)


class ChatSession:
    """Caller-held conversation history. Never persisted."""

    def __init__(self, adapter: ChatAdapter):
        self.adapter = adapter
        self.turns: List[ChatTurn] = []

    async def send(self, text: str) -> Optional[ChatTurn]:
        if not text or not text.strip():
            return None
        self.turns.append(ChatTurn(role="user", content=text))
        answer = await self.adapter.ask(text)
        reply = ChatTurn(role="assistant", content=answer or NO_RESPONSE)
        self.turns.append(reply)
        return reply
