"""AI summarization of a single feedback item."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from .config import EnrichmentConfig
from .errors import EnrichmentError, TextGenerationError
from .llm import Message, TextGenerator, extract_text


logger = logging.getLogger(__name__)


def build_messages(system_prompt: str, product: str, source: str, message: str) -> List[Message]:
    """Deterministic prompt for one feedback item."""
    user = (
        f"Product: {product}\n"
        f"Source: {source}\n\n"
        f"Feedback:\n{message}\n\n"
        "Provide a concise 2-3 sentence summary."
    )
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user},
    ]


class Enricher:
    """Summarizes feedback; fails hard instead of inventing a summary."""

    def __init__(self, generator: TextGenerator, config: EnrichmentConfig, max_tokens: int = 256):
        self.generator = generator
        self.config = config
        self.max_tokens = max_tokens

    async def enrich(self, product: str, source: str, message: str) -> str:
        messages = build_messages(self.config.system_prompt, product, source, message)
        try:
            raw = await asyncio.to_thread(self.generator.generate, messages, self.max_tokens)
        except TextGenerationError as exc:
            raise EnrichmentError(f"summarization failed: {exc}") from exc
        except Exception as exc:
            raise EnrichmentError(f"summarization failed: {exc!r}") from exc

        summary = extract_text(raw, strict=True)
        if not summary:
            raise EnrichmentError("summarization returned an empty result")
        logger.debug("Summarized %d chars of %s feedback into %d chars", len(message), product, len(summary))
        return summary
