"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from jd_tailor.clients.llm_client import DEFAULT_MODELS


@dataclass(frozen=True)
class LLMConfig:
    provider: str = "anthropic"
    model: str = ""  # empty: the provider default
    max_tokens: int = 1024
    temperature: float = 0.5
    timeout: int = 60

    def __post_init__(self):
        if self.provider not in DEFAULT_MODELS:
            raise ValueError(
                f"llm.provider must be anthropic, openai or simulate, got {self.provider!r}"
            )
        if not self.model:
            object.__setattr__(self, "model", DEFAULT_MODELS[self.provider])
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("llm.temperature must be between 0 and 2")
        if self.timeout < 1:
            raise ValueError("llm.timeout must be at least 1 second")


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    initial_delay_ms: int = 1000
    max_delay_ms: int = 30_000

    def __post_init__(self):
        if not 1 <= self.max_attempts <= 10:
            raise ValueError("retry.max_attempts must be between 1 and 10")
        if self.initial_delay_ms < 0 or self.max_delay_ms < self.initial_delay_ms:
            raise ValueError("retry.initial_delay_ms must be >= 0 and <= max_delay_ms")


@dataclass(frozen=True)
class PipelineConfig:
    warning_threshold: float = 0.5
    connectivity_probe: bool = True

    def __post_init__(self):
        if not 0.0 <= self.warning_threshold <= 1.0:
            raise ValueError("pipeline.warning_threshold must be between 0 and 1")


@dataclass(frozen=True)
class StorageConfig:
    db_path: str = "~/.jd-tailor/versions.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


CONFIG_ENV = "JD_TAILOR_CONFIG"
_SECTIONS = {"llm": LLMConfig, "retry": RetryConfig, "pipeline": PipelineConfig, "storage": StorageConfig}


def _find_config() -> Path | None:
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path)
    for candidate in (Path.cwd() / "config.yaml", Path.home() / ".jd-tailor" / "config.yaml"):
        if candidate.exists():
            return candidate
    return None


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config.yaml, falling back to defaults.

    Without an explicit path: $JD_TAILOR_CONFIG, then ./config.yaml, then
    ~/.jd-tailor/config.yaml.
    """
    config_path = Path(path) if path is not None else _find_config()
    if config_path is None or not config_path.exists():
        return AppConfig()

    raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    unknown = sorted(set(raw) - set(_SECTIONS))
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(unknown)}")
    return AppConfig(**{name: cls(**(raw.get(name) or {})) for name, cls in _SECTIONS.items()})
