"""Orchestration layer for intake, enrichment, persistence, and queries."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

from .chat import ChatAdapter
from .config import AppConfig
from .enrichment import Enricher
from .llm import TextGenerator, build_text_generator
from .query import aggregate, filter_by_product
from .runs import RunQueue
from .schemas import FeedbackRecord, FeedbackSubmission, RunHandle, RunState, RunStatus
from .storage import SQLiteFeedbackStore
from .validation import validate


class FeedbackPipeline:
    """Validate -> enrich -> persist, strictly in order, for one submission."""

    def __init__(self, enricher: Enricher, store: SQLiteFeedbackStore):
        self.enricher = enricher
        self.store = store

    async def run(self, submission: FeedbackSubmission, state: RunState) -> FeedbackRecord:
        state.advance(RunStatus.VALIDATING)
        validated = validate(submission)

        state.advance(RunStatus.ENRICHING)
        summary = await self.enricher.enrich(validated.product, validated.source, validated.message)

        state.advance(RunStatus.PERSISTING)
        return await asyncio.to_thread(
            self.store.insert_feedback,
            validated.message,
            validated.source,
            validated.product,
            summary,
        )


class FeedbackHub:
    """High-level facade composed of small single-purpose modules."""

    def __init__(
        self,
        config: AppConfig,
        generator: Optional[TextGenerator] = None,
        store: Optional[SQLiteFeedbackStore] = None,
    ):
        self.config = config
        Path(config.paths.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

        self.generator = generator or build_text_generator(config.model, google_api_key=config.google_api_key)
        self.store = store or SQLiteFeedbackStore(config.paths.sqlite_path)
        self.enricher = Enricher(self.generator, config.enrichment, max_tokens=config.model.max_tokens)
        self.chat = ChatAdapter(self.generator, config.chat, max_tokens=config.model.max_tokens)
        self.pipeline = FeedbackPipeline(self.enricher, self.store)
        self.runs = RunQueue(self.pipeline.run, config.runs)

    def start(self) -> None:
        """Start background run workers. Needs a running event loop."""
        self.runs.start()

    async def shutdown(self) -> None:
        await self.runs.shutdown()

    async def submit_feedback(
        self,
        message: Optional[str],
        source: Optional[str] = None,
        product: Optional[str] = None,
    ) -> RunHandle:
        """Accept a submission and return its run handle without waiting."""
        return await self.runs.submit(FeedbackSubmission(message=message, source=source, product=product))

    def run_status(self, run_id: str) -> Optional[RunState]:
        return self.runs.get(run_id)

    async def wait_for_run(self, run_id: str, timeout: Optional[float] = None) -> RunState:
        return await self.runs.wait(run_id, timeout=timeout)

    def list_feedback(self, product: Optional[str] = None) -> List[FeedbackRecord]:
        return self.store.list_feedback(product)

    def dashboard(self, product: Optional[str] = None, items: Optional[List[Any]] = None) -> Dict[str, Any]:
        """Filtered items plus aggregates; persisted records unless ``items`` is given."""
        rows = filter_by_product(items, product) if items is not None else self.list_feedback(product)
        return {"items": rows, "aggregates": aggregate(rows)}

    async def ask_chat(self, question: str) -> str:
        return await self.chat.ask(question)

    def close(self) -> None:
        self.store.close()
