"""End-to-end demo: seed dashboard -> submit -> enrich/persist -> list -> chat."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from feedback_hub.config import AppConfig  # noqa: E402
from feedback_hub.pipeline import FeedbackHub  # noqa: E402
from feedback_hub.seed import load_seed_items  # noqa: E402


def _print_counts(title: str, counts: dict) -> None:
    print(f"  {title}:")
    for key, value in counts.items():
        print(f"    {key}: {value}")


async def run(config: AppConfig) -> None:
    hub = FeedbackHub(config)
    hub.start()
    try:
        seed = load_seed_items(config.paths.seed_path)
        for product in ("all", "Argo Smart Routing"):
            view = hub.dashboard(product, items=seed)
            agg = view["aggregates"]
            print(f"== Seed dashboard ({product}): {agg.total} items ==")
            _print_counts("by source", agg.count_by_source)
            _print_counts("by sentiment", agg.count_by_sentiment)
            _print_counts("by urgency", agg.count_by_urgency)
            _print_counts("by theme", agg.count_by_theme)

        handle = await hub.submit_feedback(
            "Argo routing down",
            source="GitHub",
            product="Argo Smart Routing",
        )
        print(f"\n== Submitted run {handle.run_id} ==")
        state = await hub.wait_for_run(handle.run_id, timeout=120)
        print(f"status={state.status.value} attempts={state.attempts} reason={state.reason}")

        print("\n== Persisted feedback (newest first) ==")
        for record in hub.list_feedback("Argo Smart Routing")[:5]:
            print(f"- [{record.created_at_iso()}] {record.source}: {record.message}\n  summary: {record.summary}")

        print("\n== Chat ==")
        answer = await hub.ask_chat("Which product was hit hardest by the outage?")
        print(answer)
    finally:
        await hub.shutdown()
        hub.close()


def main() -> None:
    config = AppConfig.from_yaml(str(PROJECT_ROOT / "config.yaml"))
    logging.basicConfig(level=config.logging.level.upper())
    asyncio.run(run(config))


if __name__ == "__main__":
    main()
