"""Bulk intake of feedback submissions from local files."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List

from .schemas import FeedbackSubmission


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".txt", ".md", ".json", ".jsonl"}
MESSAGE_KEYS = ("message", "content", "text")


def _normalize_text(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _submission_from_obj(item: object) -> FeedbackSubmission:
    if isinstance(item, str):
        return FeedbackSubmission(message=item)
    if not isinstance(item, dict):
        return FeedbackSubmission(message=None)
    message = next((item[key] for key in MESSAGE_KEYS if item.get(key)), None)
    return FeedbackSubmission(message=message, source=item.get("source"), product=item.get("product"))


class FeedbackFileLoader:
    """Loads text/JSON feedback exports into submissions.

    Items are returned unvalidated; the run queue rejects the bad ones.
    """

    def __init__(self, default_source: str = "file"):
        self.default_source = default_source

    def load_paths(self, inputs: Iterable[str]) -> List[FeedbackSubmission]:
        submissions: List[FeedbackSubmission] = []
        for raw in inputs:
            path = Path(raw)
            if path.is_dir():
                for child in sorted(path.rglob("*")):
                    if child.is_file() and child.suffix.lower() in SUPPORTED_EXTENSIONS:
                        submissions.extend(self._load_file(child))
            elif path.is_file():
                submissions.extend(self._load_file(path))
            else:
                logger.warning("Skipping missing input %s", path)
        return submissions

    def _load_file(self, path: Path) -> List[FeedbackSubmission]:
        suffix = path.suffix.lower()
        if suffix in {".txt", ".md"}:
            return self._load_plaintext(path)
        if suffix == ".json":
            return self._load_json(path)
        if suffix == ".jsonl":
            return self._load_jsonl(path)
        return []

    def _with_default_source(self, submission: FeedbackSubmission) -> FeedbackSubmission:
        if submission.source is None:
            submission.source = self.default_source
        return submission

    def _load_plaintext(self, path: Path) -> List[FeedbackSubmission]:
        text = _normalize_text(path.read_text(encoding="utf-8", errors="ignore"))
        return [
            FeedbackSubmission(message=block.strip(), source=self.default_source)
            for block in text.split("\n\n")
            if block.strip()
        ]

    def _load_json(self, path: Path) -> List[FeedbackSubmission]:
        raw = path.read_text(encoding="utf-8", errors="ignore")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Skipping %s: not valid JSON", path)
            return []
        items = data if isinstance(data, list) else [data]
        return [self._with_default_source(_submission_from_obj(item)) for item in items]

    def _load_jsonl(self, path: Path) -> List[FeedbackSubmission]:
        submissions: List[FeedbackSubmission] = []
        for lineno, line in enumerate(path.read_text(encoding="utf-8", errors="ignore").splitlines(), start=1):
            if not line.strip():
                continue
            try:
                item = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping %s:%d: not valid JSON", path, lineno)
                continue
            submissions.append(self._with_default_source(_submission_from_obj(item)))
        return submissions
