"""Read-side filtering and frequency aggregation for the dashboard."""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .schemas import ALL_PRODUCTS, SENTIMENTS, UNKNOWN, URGENCIES


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _key(item: Any, name: str) -> str:
    value = _field(item, name)
    if value is None or value == "":
        return UNKNOWN
    return str(value)


def filter_by_product(items: Iterable[Any], product: Optional[str] = None) -> List[Any]:
    """Return items whose product equals ``product`` exactly, in input order.

    ``None`` or ``"all"`` returns every item. The input is never modified.
    """
    if product is None or product == ALL_PRODUCTS:
        return list(items)
    return [item for item in items if _field(item, "product") == product]


@dataclass
class FeedbackAggregates:
    """Frequency counts per grouping dimension."""

    total: int = 0
    count_by_source: Dict[str, int] = field(default_factory=dict)
    count_by_sentiment: Dict[str, int] = field(default_factory=dict)
    count_by_urgency: Dict[str, int] = field(default_factory=dict)
    count_by_theme: Dict[str, int] = field(default_factory=dict)
    count_by_region: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "countBySource": dict(self.count_by_source),
            "countBySentiment": dict(self.count_by_sentiment),
            "countByUrgency": dict(self.count_by_urgency),
            "countByTheme": dict(self.count_by_theme),
            "countByRegion": dict(self.count_by_region),
        }


def _count(items: Sequence[Any], name: str, known: Sequence[str] = ()) -> Dict[str, int]:
    counts = Counter(_key(item, name) for item in items)
    out = {key: 0 for key in known}
    for key, n in counts.most_common():
        out[key] = out.get(key, 0) + n
    return out


def aggregate(items: Iterable[Any]) -> FeedbackAggregates:
    """Group items by source, sentiment, urgency, theme and region.

    Items missing a dimension count under "unknown", so each dimension sums to
    the number of items. Sentiment and urgency always list every level.
    """
    rows = list(items)
    return FeedbackAggregates(
        total=len(rows),
        count_by_source=_count(rows, "source"),
        count_by_sentiment=_count(rows, "sentiment", SENTIMENTS),
        count_by_urgency=_count(rows, "urgency", URGENCIES),
        count_by_theme=_count(rows, "theme"),
        count_by_region=_count(rows, "region"),
    )
