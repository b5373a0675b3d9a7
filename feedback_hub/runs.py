"""Accept-and-enqueue run queue for the feedback pipeline.

Callers get a run handle back immediately; worker tasks execute the pipeline
out of band and record progress in an in-memory registry keyed by run id.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional

from .config import RunsConfig
from .errors import FeedbackHubError
from .schemas import FeedbackRecord, FeedbackSubmission, RunHandle, RunState, RunStatus
from .validation import validate


logger = logging.getLogger(__name__)

Runner = Callable[[FeedbackSubmission, RunState], Awaitable[FeedbackRecord]]


@dataclass
class _QueueItem:
    run_id: str
    submission: FeedbackSubmission


class RunQueue:
    """Executes pipeline runs on a fixed pool of asyncio workers."""

    def __init__(self, runner: Runner, config: Optional[RunsConfig] = None):
        self.runner = runner
        self.config = config or RunsConfig()
        self._queue: asyncio.Queue[_QueueItem] = asyncio.Queue()
        self._runs: "OrderedDict[str, RunState]" = OrderedDict()
        self._done: Dict[str, asyncio.Event] = {}
        self._worker_tasks: List[asyncio.Task] = []

    async def submit(self, submission: FeedbackSubmission) -> RunHandle:
        """Validate at the boundary, enqueue, and return without waiting."""
        validate(submission)
        run_id = str(uuid.uuid4())
        self._runs[run_id] = RunState(run_id=run_id)
        self._done[run_id] = asyncio.Event()
        await self._queue.put(_QueueItem(run_id=run_id, submission=submission))
        logger.info("Queued run %s (queue_depth=%d)", run_id, self._queue.qsize())
        self._evict_finished()
        return RunHandle(run_id=run_id)

    def get(self, run_id: str) -> Optional[RunState]:
        return self._runs.get(run_id)

    @property
    def queue_depth(self) -> int:
        return self._queue.qsize()

    async def wait(self, run_id: str, timeout: Optional[float] = None) -> RunState:
        """Block until the run reaches a terminal state."""
        state = self._runs.get(run_id)
        if state is None:
            raise KeyError(run_id)
        event = self._done.get(run_id)
        if event is not None and not state.finished:
            await asyncio.wait_for(event.wait(), timeout=timeout)
        return state

    async def join(self) -> None:
        await self._queue.join()

    async def _execute(self, item: _QueueItem) -> None:
        state = self._runs[item.run_id]
        max_attempts = max(1, self.config.max_attempts)
        while True:
            state.attempts += 1
            try:
                record = await self.runner(item.submission, state)
            except FeedbackHubError as exc:
                stage = state.status.value
                if exc.retryable and state.attempts < max_attempts:
                    logger.warning(
                        "Run %s failed while %s (attempt %d/%d), retrying: %s",
                        item.run_id, stage, state.attempts, max_attempts, exc,
                    )
                    state.advance(RunStatus.PENDING)
                    await asyncio.sleep(self.config.retry_delay_seconds)
                    continue
                logger.warning("Run %s failed while %s: %s", item.run_id, stage, exc)
                state.fail(stage, str(exc))
                return
            except asyncio.CancelledError:
                logger.warning("Run %s cancelled while %s", item.run_id, state.status.value)
                state.fail(state.status.value, "cancelled")
                raise
            except Exception as exc:
                logger.exception("Run %s crashed while %s", item.run_id, state.status.value)
                state.fail(state.status.value, repr(exc))
                return
            state.complete(record.id)
            logger.info("Completed run %s -> feedback %s", item.run_id, record.id)
            return

    async def worker_loop(self) -> None:
        logger.info("Feedback run worker started")
        while True:
            item = await self._queue.get()
            try:
                await self._execute(item)
            finally:
                event = self._done.get(item.run_id)
                if event is not None:
                    event.set()
                self._queue.task_done()
                await asyncio.sleep(0)

    def _evict_finished(self) -> None:
        excess = len(self._runs) - max(1, self.config.history_limit)
        if excess <= 0:
            return
        for run_id in [rid for rid, st in self._runs.items() if st.finished][:excess]:
            self._runs.pop(run_id, None)
            self._done.pop(run_id, None)

    def start(self) -> List[asyncio.Task]:
        """Start worker tasks up to the configured concurrency."""
        self._worker_tasks = [t for t in self._worker_tasks if not t.done()]
        while len(self._worker_tasks) < max(1, self.config.workers):
            self._worker_tasks.append(asyncio.create_task(self.worker_loop()))
        return self._worker_tasks

    async def shutdown(self) -> None:
        """Cancel all worker tasks and fail every run that has not finished."""
        for task in self._worker_tasks:
            task.cancel()
        for task in self._worker_tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._worker_tasks = []
        for run_id, state in self._runs.items():
            if state.finished:
                continue
            state.fail(state.status.value, "cancelled")
            event = self._done.get(run_id)
            if event is not None:
                event.set()
