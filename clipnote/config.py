"""Configuration management for clipnote."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field


class LLMConfig(BaseModel):
    provider: str = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    api_key_env: str = "ANTHROPIC_API_KEY"
    max_tokens: int = 2048


class SettingsConfig(BaseModel):
    poll_interval_seconds: float = 1.0
    default_icon: str = "📓"
    default_color: str = "blue"


class ClipnoteConfig(BaseModel):
    llm: LLMConfig = Field(default_factory=LLMConfig)
    settings: SettingsConfig = Field(default_factory=SettingsConfig)


def _config_dir() -> Path:
    override = os.environ.get("CLIPNOTE_HOME")
    if override:
        return Path(override)
    return Path.home() / ".clipnote"


def _config_path() -> Path:
    return _config_dir() / "config.json"


def data_dir() -> Path:
    """Return the directory holding the persisted collections."""
    return _config_dir() / "data"


def ensure_dirs() -> None:
    """Create required clipnote directories."""
    _config_dir().mkdir(parents=True, exist_ok=True)
    data_dir().mkdir(exist_ok=True)


def load_config() -> ClipnoteConfig:
    """Load config from ~/.clipnote/config.json, returning defaults if missing."""
    path = _config_path()
    if not path.exists():
        return ClipnoteConfig()
    return ClipnoteConfig.model_validate_json(path.read_text())


def save_config(config: ClipnoteConfig) -> None:
    ensure_dirs()
    _config_path().write_text(json.dumps(config.model_dump(), indent=2) + "\n")
