"""Serve the Feedback Hub HTTP API."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from feedback_hub.api import create_app  # noqa: E402
from feedback_hub.config import AppConfig  # noqa: E402
from feedback_hub.pipeline import FeedbackHub  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Feedback Hub API server.")
    parser.add_argument(
        "--config",
        type=str,
        default=str(PROJECT_ROOT / "config.yaml"),
        help="Path to YAML config.",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8787)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = AppConfig.from_yaml(args.config)
    logging.basicConfig(
        level=config.logging.level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(FeedbackHub(config))
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
