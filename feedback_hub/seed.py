"""Demo dashboard items loaded from YAML. Fixture data only."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import List, Optional

import yaml
from dateutil import parser as dt_parser

from .schemas import SENTIMENTS, UNKNOWN, URGENCIES, DashboardFeedbackItem


def _parse_optional_timestamp(value: object) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return dt_parser.parse(str(value))
    except (ValueError, OverflowError):
        return None


def _one_of(value: object, allowed: List[str], field_name: str) -> str:
    text = str(value).lower()
    if text not in allowed:
        raise ValueError(f"{field_name} must be one of {allowed}, got {value!r}")
    return text


def load_seed_items(path: str) -> List[DashboardFeedbackItem]:
    """Load classified demo feedback from a YAML list (or ``{items: [...]}``)."""
    with Path(path).open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or []
    if isinstance(data, dict):
        data = data.get("items", [])

    items: List[DashboardFeedbackItem] = []
    for idx, raw in enumerate(data):
        items.append(
            DashboardFeedbackItem(
                id=str(raw.get("id", idx + 1)),
                source=str(raw.get("source") or UNKNOWN),
                product=str(raw.get("product") or UNKNOWN),
                content=str(raw.get("content") or raw.get("message") or ""),
                sentiment=_one_of(raw.get("sentiment", "neutral"), SENTIMENTS, "sentiment"),
                urgency=_one_of(raw.get("urgency", "medium"), URGENCIES, "urgency"),
                theme=str(raw.get("theme") or UNKNOWN),
                region=str(raw.get("region") or UNKNOWN),
                timestamp=_parse_optional_timestamp(raw.get("timestamp")),
            )
        )
    return items
