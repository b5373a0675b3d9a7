"""CLI entrypoint for bulk-submitting feedback from local files."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections import Counter
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from feedback_hub.config import AppConfig  # noqa: E402
from feedback_hub.errors import ValidationError  # noqa: E402
from feedback_hub.intake import FeedbackFileLoader  # noqa: E402
from feedback_hub.pipeline import FeedbackHub  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Submit feedback files through the enrichment pipeline.")
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config.yaml"),
        help="Path to YAML config.",
    )
    parser.add_argument(
        "--input",
        action="append",
        required=True,
        help="File or directory to ingest (repeatable).",
    )
    parser.add_argument("--source", default="file", help="Source tag for items that carry none.")
    return parser.parse_args()


async def ingest(config: AppConfig, inputs: list[str], source: str) -> Counter:
    hub = FeedbackHub(config)
    hub.start()
    stats: Counter = Counter()
    handles = []
    try:
        for submission in FeedbackFileLoader(default_source=source).load_paths(inputs):
            stats["loaded"] += 1
            try:
                handles.append(await hub.runs.submit(submission))
            except ValidationError:
                stats["rejected"] += 1
        for handle in handles:
            state = await hub.wait_for_run(handle.run_id)
            stats[state.status.value] += 1
        stats["stored_total"] = hub.store.count()
    finally:
        await hub.shutdown()
        hub.close()
    return stats


def main() -> None:
    args = parse_args()
    config = AppConfig.from_yaml(args.config)
    logging.basicConfig(level=config.logging.level.upper())
    stats = asyncio.run(ingest(config, args.input, args.source))

    print("Ingestion complete.")
    for key, value in stats.items():
        print(f"{key}: {value}")


if __name__ == "__main__":
    main()
