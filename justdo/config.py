"""
Central configuration for justdo.
Uses Pydantic BaseSettings for type-safe configuration from environment variables.
"""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to this file (justdo/config.py → project root)
_ENV_FILE = Path(__file__).parent.parent / ".env"


def _load_env_file() -> None:
    """
    Load .env into os.environ, but only for keys that are currently unset
    or set to empty strings. This ensures .env values win over blank shell
    env vars (e.g. ANTHROPIC_API_KEY='') while still allowing explicit
    non-empty shell overrides.
    """
    if not _ENV_FILE.exists():
        return
    from dotenv import dotenv_values
    for key, value in dotenv_values(_ENV_FILE).items():
        if value and not os.environ.get(key):
            os.environ[key] = value


# Run at import time so Settings() sees the correct values
_load_env_file()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Anthropic
    anthropic_api_key: str = ""
    model_classification: str = "claude-haiku-4-5-20251001"
    model_guardrail: str = "claude-haiku-4-5-20251001"
    model_intent_analysis: str = "claude-haiku-4-5-20251001"
    model_action_extraction: str = "claude-haiku-4-5-20251001"

    # ── Timeouts (seconds) ──────────────────────────────────────────────────────
    classification_timeout: float = 30.0
    guardrail_timeout: float = 8.0
    intent_analysis_timeout: float = 8.0
    action_extraction_timeout: float = 12.0

    # ── Classification ──────────────────────────────────────────────────────────
    classification_max_tokens: int = 1000
    classification_temperature: float = 0.3
    confidence_threshold: float = 0.6
    timezone: str = "UTC"

    # ── Guardrail / resolution ──────────────────────────────────────────────────
    guardrail_enabled: bool = True
    guardrail_context_turns: int = 6
    resolution_message_window: int = 3
    resolution_search_limit: int = 5

    # ── Offline capture queue ───────────────────────────────────────────────────
    offline_queue_enabled: bool = True
    offline_queue_max_attempts: int = 6
    offline_queue_retry_base: float = 30.0
    offline_queue_dedupe_ttl_hours: int = 24

    # Environment
    data_dir: str = "./data"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    @field_validator("confidence_threshold")
    @classmethod
    def check_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("confidence_threshold must be between 0 and 1")
        return value

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, value: str) -> str:
        if not value or value.upper() == "UTC":
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value

    @property
    def logs_dir(self) -> str:
        return os.path.join(self.data_dir, "logs")

    @property
    def queue_db_path(self) -> str:
        return os.path.join(self.data_dir, "offline_queue.db")


def get_settings() -> "Settings":
    """Return the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings
    _settings = None


_settings: Settings | None = None


class _SettingsProxy:
    """Lazy proxy so `from justdo.config import settings` works without eager init."""
    def __getattr__(self, name):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
