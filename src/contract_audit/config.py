"""
AI analysis configuration.

The analysis core only needs a synchronous read/write capability; where the
values live is up to the caller:
- EnvConfigStore reads the process environment (.env loaded by the CLI)
- JsonConfigStore persists to a JSON file and repairs unknown saved values
"""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

INFERENCE_BASE_URL = "https://api.neversight.dev/v1"


@dataclass(frozen=True)
class ModelInfo:
    id: str
    name: str
    description: str = ""


SUPPORTED_MODELS: List[ModelInfo] = [
    ModelInfo("anthropic/claude-4.5-opus", "Claude 4.5 Opus", "Anthropic Claude 4.5 Opus"),
    ModelInfo("anthropic/claude-4.5-opus-max", "Claude 4.5 Opus Max", "Anthropic Claude 4.5 Opus Max"),
    ModelInfo("google/gemini-3-pro", "Gemini 3 Pro", "Google Gemini 3 Pro"),
    ModelInfo("google/gemini-3-flash", "Gemini 3 Flash", "Google Gemini 3 Flash"),
    ModelInfo("openai/gpt-5.2", "GPT-5.2", "OpenAI GPT-5.2"),
    ModelInfo("openai/gpt-5.2-high", "GPT-5.2 High", "OpenAI GPT-5.2 High"),
]

DEFAULT_MODEL = SUPPORTED_MODELS[0].id
DEFAULT_LANGUAGE = "english"


def get_model_by_id(model_id: Optional[str]) -> Optional[ModelInfo]:
    return next((m for m in SUPPORTED_MODELS if m.id == model_id), None)


class AIConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_key: str = ""
    selected_model: str = DEFAULT_MODEL
    language: str = DEFAULT_LANGUAGE
    super_prompt: bool = True


def model_slug(config: AIConfig) -> str:
    """Filename-safe model name, e.g. "openai/gpt-5.2" -> "openai-gpt-5.2"."""
    slug = (config.selected_model or "model").lower()
    slug = re.sub(r"[^a-z0-9._-]+", "-", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")
    return slug or "model"


class ConfigStore(Protocol):
    def read(self) -> AIConfig: ...

    def write(self, config: AIConfig) -> None: ...


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


class EnvConfigStore:
    """Reads NEVERSIGHT_API_KEY / AI_MODEL / AI_LANGUAGE / AI_SUPER_PROMPT."""

    def __init__(self):
        self._override: Optional[AIConfig] = None

    def read(self) -> AIConfig:
        if self._override is not None:
            return self._override
        return AIConfig(
            api_key=os.getenv("NEVERSIGHT_API_KEY", ""),
            selected_model=os.getenv("AI_MODEL") or DEFAULT_MODEL,
            language=os.getenv("AI_LANGUAGE") or DEFAULT_LANGUAGE,
            super_prompt=_get_bool("AI_SUPER_PROMPT", True),
        )

    def write(self, config: AIConfig) -> None:
        # The environment is not written back; keep the value for this process
        self._override = config


class JsonConfigStore:
    """AI configuration persisted as a JSON document."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> AIConfig:
        """
        Load the saved configuration merged over defaults.

        Returns:
            AIConfig; defaults when the file is missing or unreadable. Fields of
            the wrong type keep their default, and an unknown saved model id is
            replaced by the default model.
        """
        default = AIConfig()
        if not self.path.exists():
            return default

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable AI config {self.path}: {e}")
            return default

        if not isinstance(raw, dict):
            return default

        merged: Dict[str, Any] = default.model_dump()
        for key, expected in (("api_key", str), ("selected_model", str), ("language", str), ("super_prompt", bool)):
            if isinstance(raw.get(key), expected):
                merged[key] = raw[key]

        if get_model_by_id(merged["selected_model"]) is None:
            logger.warning(f"Unknown saved model {merged['selected_model']!r}, using {DEFAULT_MODEL}")
            merged["selected_model"] = DEFAULT_MODEL

        return AIConfig(**merged)

    def write(self, config: AIConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(config.model_dump(), indent=2), encoding="utf-8")
