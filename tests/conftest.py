"""Shared fixtures: scripted text generator and temp-file stores."""

from __future__ import annotations

import threading
from typing import Any, List

import pytest

from feedback_hub.config import AppConfig
from feedback_hub.llm import TextGenerator
from feedback_hub.pipeline import FeedbackHub
from feedback_hub.storage import SQLiteFeedbackStore


class FakeGenerator(TextGenerator):
    """Returns scripted responses in order; the last one repeats.

    An Exception instance in the script is raised instead of returned.
    """

    model = "fake-model"

    def __init__(self, *responses: Any):
        self.responses = list(responses) or [{"response": "Routing is down for many customers."}]
        self.calls: List[dict] = []
        self._lock = threading.Lock()

    def generate(self, messages, max_tokens):
        with self._lock:
            self.calls.append({"messages": messages, "max_tokens": max_tokens})
            idx = min(len(self.calls) - 1, len(self.responses) - 1)
            response = self.responses[idx]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def store(tmp_path):
    s = SQLiteFeedbackStore(str(tmp_path / "feedback.db"))
    yield s
    s.close()


@pytest.fixture
def config(tmp_path):
    return AppConfig.from_dict(
        {
            "paths": {"sqlite_path": str(tmp_path / "feedback.db")},
            "runs": {"workers": 2, "max_attempts": 1, "retry_delay_seconds": 0},
        }
    )


@pytest.fixture
def make_hub(config):
    hubs: List[FeedbackHub] = []

    def _make(*responses: Any, **run_overrides: Any) -> FeedbackHub:
        for key, value in run_overrides.items():
            setattr(config.runs, key, value)
        hub = FeedbackHub(config, generator=FakeGenerator(*responses))
        hubs.append(hub)
        return hub

    yield _make
    for hub in hubs:
        hub.close()
