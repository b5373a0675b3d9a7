from pathlib import Path

import pytest

from feedback_hub.query import aggregate, filter_by_product
from feedback_hub.schemas import FeedbackRecord
from feedback_hub.seed import load_seed_items

SEED_PATH = Path(__file__).resolve().parents[1] / "data" / "seed_feedback.yaml"


@pytest.fixture
def seed():
    return load_seed_items(str(SEED_PATH))


def test_all_returns_everything_in_order(seed):
    assert filter_by_product(seed, "all") == seed
    assert filter_by_product(seed) == seed


def test_product_filter_is_exact_subset(seed):
    argo = filter_by_product(seed, "Argo Smart Routing")
    assert len(argo) == 6
    assert all(item.product == "Argo Smart Routing" for item in argo)
    assert all(item in seed for item in argo)
    assert filter_by_product(seed, "argo smart routing") == []


def test_filter_is_repeatable_and_non_mutating(seed):
    before = list(seed)
    first = filter_by_product(seed, "Workers")
    second = filter_by_product(seed, "Workers")
    assert first == second
    assert seed == before


def test_filter_accepts_mappings():
    rows = [{"product": "Workers"}, {"product": "Dashboard"}]
    assert filter_by_product(rows, "Dashboard") == [{"product": "Dashboard"}]


def test_aggregate_empty_is_all_zero():
    agg = aggregate([])
    assert agg.total == 0
    assert agg.count_by_sentiment == {"negative": 0, "neutral": 0, "positive": 0}
    assert agg.count_by_urgency == {"critical": 0, "high": 0, "medium": 0, "low": 0}
    assert agg.count_by_source == {}
    assert agg.count_by_theme == {}


def test_aggregate_seed_counts(seed):
    agg = aggregate(seed)
    assert agg.total == 8
    assert agg.count_by_source["GitHub"] == 2
    assert agg.count_by_source["Support Tickets"] == 2
    assert agg.count_by_sentiment == {"negative": 7, "neutral": 1, "positive": 0}
    assert agg.count_by_urgency == {"critical": 3, "high": 4, "medium": 1, "low": 0}
    assert agg.count_by_theme["outage_impact"] == 3
    assert agg.count_by_region["Global"] == 4


def test_every_dimension_sums_to_item_count(seed):
    agg = aggregate(seed)
    for counts in (
        agg.count_by_source,
        agg.count_by_sentiment,
        agg.count_by_urgency,
        agg.count_by_theme,
        agg.count_by_region,
    ):
        assert sum(counts.values()) == len(seed)


def test_records_without_classification_count_as_unknown(store):
    store.insert_feedback("m1", "GitHub", "Workers", "s")
    store.insert_feedback("m2", "Email", "Workers", "s")
    records = store.list_feedback()
    assert all(isinstance(r, FeedbackRecord) for r in records)

    agg = aggregate(records)
    assert agg.count_by_sentiment["unknown"] == 2
    assert agg.count_by_urgency["unknown"] == 2
    assert agg.count_by_source == {"GitHub": 1, "Email": 1}


def test_aggregate_to_dict_keys(seed):
    assert set(aggregate(seed).to_dict()) == {
        "total",
        "countBySource",
        "countBySentiment",
        "countByUrgency",
        "countByTheme",
        "countByRegion",
    }


def test_empty_product_is_an_exact_match(seed):
    assert filter_by_product(seed, "") == []
    assert filter_by_product([{"product": ""}, {"product": "Workers"}], "") == [{"product": ""}]
