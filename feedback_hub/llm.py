"""Text-generation collaborators and normalization of their responses."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import requests
from google import genai
from google.genai import types as genai_types

from .config import ModelConfig
from .errors import TextGenerationError


WORKERS_AI_URL = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"

Message = Dict[str, str]


def extract_text(raw: Any, strict: bool = False) -> str:
    """Normalize a model response to plain text.

    Providers answer either with a wrapper carrying the generated text in a
    ``response`` field (possibly inside a ``result`` envelope) or with the text
    itself. Anything else is coerced to text as a whole, unless ``strict`` is
    set, in which case a response without generated text yields "".
    """
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw.strip()
    if isinstance(raw, Mapping):
        response = raw.get("response")
        if isinstance(response, str) or (response is not None and not strict):
            return str(response).strip()
        if isinstance(raw.get("result"), (Mapping, str)):
            return extract_text(raw["result"], strict=strict)
        if strict:
            return ""
        return json.dumps(dict(raw), ensure_ascii=False, default=str)
    text = getattr(raw, "text", None)
    if isinstance(text, str):
        return text.strip()
    if strict:
        return ""
    return str(raw).strip()


class TextGenerator:
    """Blocking chat-style completion against an external model."""

    model: str = ""

    def generate(self, messages: List[Message], max_tokens: int) -> Any:
        raise NotImplementedError


class WorkersAITextGenerator(TextGenerator):
    """Cloudflare Workers AI over its REST API."""

    def __init__(self, config: ModelConfig, session: Optional[requests.Session] = None):
        if not config.cloudflare_account_id or not config.cloudflare_api_token:
            raise ValueError("Workers AI needs cloudflare_account_id and cloudflare_api_token")
        self.model = config.model
        self.timeout = config.timeout_seconds
        self.url = WORKERS_AI_URL.format(account_id=config.cloudflare_account_id, model=config.model)
        self.session = session or requests.Session()
        self.session.headers["Authorization"] = f"Bearer {config.cloudflare_api_token}"

    def generate(self, messages: List[Message], max_tokens: int) -> Any:
        try:
            resp = self.session.post(
                self.url,
                json={"messages": messages, "max_tokens": max_tokens},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.RequestException as exc:
            raise TextGenerationError(f"Workers AI request failed: {exc}") from exc
        except ValueError as exc:
            raise TextGenerationError("Workers AI returned a non-JSON body") from exc

        if isinstance(body, dict) and body.get("success") is False:
            errors = body.get("errors") or []
            raise TextGenerationError(f"Workers AI reported failure: {errors}")
        if isinstance(body, dict) and "result" in body:
            return body["result"]
        return body


class GeminiTextGenerator(TextGenerator):
    """Google Gemini through the google-genai client."""

    def __init__(self, config: ModelConfig, google_api_key: Optional[str] = None):
        if not google_api_key:
            raise ValueError("Gemini needs google_api_key or GEMINI_API_KEY")
        self.model = config.model
        self.temperature = config.temperature
        self.client = genai.Client(api_key=google_api_key)

    def generate(self, messages: List[Message], max_tokens: int) -> Any:
        system = "\n".join(m["content"] for m in messages if m["role"] == "system")
        contents = "\n\n".join(m["content"] for m in messages if m["role"] != "system")
        try:
            return self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=genai_types.GenerateContentConfig(
                    system_instruction=system or None,
                    max_output_tokens=max_tokens,
                    temperature=self.temperature,
                ),
            )
        except Exception as exc:
            raise TextGenerationError(f"Gemini request failed: {exc}") from exc


def build_text_generator(config: ModelConfig, google_api_key: Optional[str] = None) -> TextGenerator:
    provider = config.provider.lower()
    if provider == "workers_ai":
        return WorkersAITextGenerator(config)
    if provider == "google":
        return GeminiTextGenerator(config, google_api_key=google_api_key)
    raise ValueError(f"Unknown text-generation provider: {config.provider}")
