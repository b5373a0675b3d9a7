"""Configuration loading for the Feedback Hub."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_MODEL = "@cf/meta/llama-3-8b-instruct"


def _resolve_path(raw_path: str, base_dir: Path) -> str:
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


@dataclass
class PathsConfig:
    """Filesystem locations used by the hub."""

    sqlite_path: str = "data/feedback.db"
    seed_path: str = "data/seed_feedback.yaml"


@dataclass
class ModelConfig:
    """Text-generation provider settings."""

    provider: str = "workers_ai"
    model: str = DEFAULT_MODEL
    max_tokens: int = 256
    temperature: float = 0.2
    timeout_seconds: float = 30.0
    cloudflare_account_id: Optional[str] = None
    cloudflare_api_token: Optional[str] = None


@dataclass
class EnrichmentConfig:
    """Summarization prompt settings."""

    system_prompt: str = "You analyze Cloudflare customer feedback and summarize key issues."


@dataclass
class ChatConfig:
    """Chat prompt settings."""

    system_prompt: str = "You analyze Cloudflare outage feedback and answer user questions."


@dataclass
class RunsConfig:
    """Background run queue settings."""

    workers: int = 2
    max_attempts: int = 1
    retry_delay_seconds: float = 1.0
    history_limit: int = 1000


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    """Top-level app configuration."""

    paths: PathsConfig = field(default_factory=PathsConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    enrichment: EnrichmentConfig = field(default_factory=EnrichmentConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    runs: RunsConfig = field(default_factory=RunsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    google_api_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_dir: Optional[Path] = None) -> "AppConfig":
        """Build config from a dictionary."""
        base = Path.cwd() if base_dir is None else base_dir

        paths_data = data.get("paths", {})
        paths = PathsConfig(
            sqlite_path=_resolve_path(paths_data.get("sqlite_path", "data/feedback.db"), base),
            seed_path=_resolve_path(paths_data.get("seed_path", "data/seed_feedback.yaml"), base),
        )

        model = ModelConfig(**data.get("model", {}))
        model.cloudflare_account_id = model.cloudflare_account_id or os.getenv("CLOUDFLARE_ACCOUNT_ID")
        model.cloudflare_api_token = model.cloudflare_api_token or os.getenv("CLOUDFLARE_API_TOKEN")

        return cls(
            paths=paths,
            model=model,
            enrichment=EnrichmentConfig(**data.get("enrichment", {})),
            chat=ChatConfig(**data.get("chat", {})),
            runs=RunsConfig(**data.get("runs", {})),
            logging=LoggingConfig(**data.get("logging", {})),
            google_api_key=data.get("google_api_key") or os.getenv("GEMINI_API_KEY"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "AppConfig":
        """Load config from YAML."""
        config_path = Path(path).resolve()
        with config_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        return cls.from_dict(data, base_dir=config_path.parent)
