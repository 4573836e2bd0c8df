"""Configuration management for locator-healer using pydantic-settings.

Settings are read from environment variables prefixed with
``LOCATOR_HEALER_`` and from an optional ``.env`` file.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class HealerSettings(BaseSettings):
    """Main configuration settings for locator-healer."""

    # Model access
    llm_mode: Literal["disabled", "local", "remote"] = Field(
        "disabled", description="How the healing model is reached"
    )
    remote_provider: Literal["google", "openai", "anthropic"] = Field(
        "google", description="Provider used in remote mode"
    )
    api_key: str | None = Field(None, description="API key for the remote provider")
    base_url: str | None = Field(None, description="Optional base URL override for the remote API")
    local_model_name: str = Field("llama3.1", description="Ollama model name for local mode")
    local_base_url: str = Field("http://localhost:11434", description="Ollama API base URL")
    model_id: str = Field("gemini-2.5-flash", description="Model used for healing requests")
    model_timeout_ms: int = Field(15000, gt=0, description="Timeout for one model request")

    # Driver defaults
    find_timeout_seconds: float = Field(
        5.0, gt=0, description="Default wait used by the healing driver wrappers"
    )

    # Audit
    results_file: Path = Field(
        Path("logs/resolved-elements.json"), description="JSON file receiving audit records"
    )
    audit_enabled: bool = Field(True, description="Persist an audit record per resolved locator")

    # Logging
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field("INFO", description="Log level")
    log_file: Path | None = Field(None, description="Optional log file")
    structured_logging: bool = Field(True, description="Render logs as JSON")

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_prefix = "LOCATOR_HEALER_"
        case_sensitive = False
        extra = "ignore"


# Singleton instance
_settings: HealerSettings | None = None


def get_settings() -> HealerSettings:
    """Get the singleton settings instance.

    Returns:
        HealerSettings instance
    """
    global _settings

    if _settings is None:
        _settings = HealerSettings()

    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None
