"""Configuration for self-healing behavior.

Provides configuration options for model access, model selection and
audit output.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ..audit import DEFAULT_RESULTS_FILE

if TYPE_CHECKING:
    from ..config import HealerSettings
    from .model_client import ModelClient


class LLMMode(Enum):
    """How the healing model is accessed."""

    DISABLED = "disabled"
    """No model access; healing ends with the original failure."""

    LOCAL = "local"
    """Local model via Ollama."""

    REMOTE = "remote"
    """Remote provider API (Google, OpenAI, Anthropic)."""


VALID_PROVIDERS = {"google", "openai", "anthropic"}


class HealingConfigurationError(Exception):
    """Error in healing configuration."""

    pass


@dataclass
class HealingConfig:
    """Configuration for self-healing behavior.

    Default is DISABLED - no remote access, fully offline.

    Attributes:
        llm_mode: How the model is accessed (disabled, local, remote).
        remote_provider: Provider for REMOTE mode (google, openai, anthropic).
        api_key: API key for REMOTE mode. Required if using remote.
        base_url: Optional base URL override for the remote API.
        local_model_name: Ollama model name for LOCAL mode.
        local_base_url: Base URL for Ollama API.
        model_id: Model used for REMOTE mode requests.
        model_timeout_ms: Timeout for a single model request.
        find_timeout_seconds: Default wait for the driver wrappers.
        results_file: JSON file receiving audit records.
        audit_enabled: Whether resolved locators are audited.
    """

    llm_mode: LLMMode = LLMMode.DISABLED

    remote_provider: str = "google"
    api_key: str | None = None
    """API key. Never logged or stored."""

    base_url: str | None = None

    local_model_name: str = "llama3.1"
    """Ollama model name. Popular options: llama3.1, qwen2.5, mistral"""

    local_base_url: str = "http://localhost:11434"

    model_id: str = "gemini-2.5-flash"

    model_timeout_ms: int = 15000
    find_timeout_seconds: float = 5.0

    results_file: Path = DEFAULT_RESULTS_FILE
    audit_enabled: bool = True

    # Internal - created client
    _client: "ModelClient | None" = field(default=None, repr=False)

    @property
    def effective_model_id(self) -> str:
        """Model id sent with each request (the Ollama model in LOCAL mode)."""
        if self.llm_mode == LLMMode.LOCAL:
            return self.local_model_name
        return self.model_id

    def validate(self) -> None:
        """Validate configuration.

        Raises:
            HealingConfigurationError: If configuration is invalid.
        """
        if self.llm_mode == LLMMode.REMOTE:
            if not self.api_key:
                raise HealingConfigurationError(
                    "api_key is required when llm_mode is REMOTE. "
                    "Remote model access must be explicitly enabled with an API key."
                )

            if self.remote_provider not in VALID_PROVIDERS:
                raise HealingConfigurationError(
                    f"remote_provider must be one of {sorted(VALID_PROVIDERS)}, "
                    f"got '{self.remote_provider}'"
                )

        if not self.effective_model_id:
            raise HealingConfigurationError("model_id must not be empty")

        if self.model_timeout_ms <= 0:
            raise HealingConfigurationError("model_timeout_ms must be positive")

        if self.find_timeout_seconds <= 0:
            raise HealingConfigurationError("find_timeout_seconds must be positive")

    def create_client(self) -> "ModelClient":
        """Create the model client for this configuration.

        Returns:
            Configured ModelClient instance.

        Raises:
            HealingConfigurationError: If configuration is invalid.
        """
        # Import here to avoid circular imports
        from .model_client import DisabledModelClient, LocalModelClient, RemoteModelClient

        self.validate()

        if self.llm_mode == LLMMode.DISABLED:
            return DisabledModelClient()

        elif self.llm_mode == LLMMode.LOCAL:
            return LocalModelClient(base_url=self.local_base_url)

        elif self.llm_mode == LLMMode.REMOTE:
            # API key is validated in validate()
            assert self.api_key is not None
            return RemoteModelClient(
                provider=self.remote_provider,
                api_key=self.api_key,
                base_url=self.base_url,
            )

        else:
            raise HealingConfigurationError(f"Unknown LLM mode: {self.llm_mode}")

    def get_client(self) -> "ModelClient":
        """Get or create the model client.

        Caches the client instance for reuse.
        """
        if self._client is None:
            self._client = self.create_client()
        return self._client

    @classmethod
    def disabled(cls) -> "HealingConfig":
        """Create a disabled configuration (default)."""
        return cls(llm_mode=LLMMode.DISABLED)

    @classmethod
    def with_gemini(cls, api_key: str, model: str = "gemini-2.5-flash") -> "HealingConfig":
        """Create configuration for the Google Gemini API.

        Args:
            api_key: Gemini API key.
            model: Model name.

        Returns:
            HealingConfig for Gemini.
        """
        return cls(
            llm_mode=LLMMode.REMOTE,
            remote_provider="google",
            api_key=api_key,
            model_id=model,
        )

    @classmethod
    def with_openai(cls, api_key: str, model: str = "gpt-4o-mini") -> "HealingConfig":
        """Create configuration for the OpenAI API.

        Args:
            api_key: OpenAI API key.
            model: Model name.

        Returns:
            HealingConfig for OpenAI.
        """
        return cls(
            llm_mode=LLMMode.REMOTE,
            remote_provider="openai",
            api_key=api_key,
            model_id=model,
        )

    @classmethod
    def with_anthropic(
        cls,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
    ) -> "HealingConfig":
        """Create configuration for the Anthropic API.

        Args:
            api_key: Anthropic API key.
            model: Model name.

        Returns:
            HealingConfig for Anthropic.
        """
        return cls(
            llm_mode=LLMMode.REMOTE,
            remote_provider="anthropic",
            api_key=api_key,
            model_id=model,
        )

    @classmethod
    def with_ollama(
        cls,
        model_name: str = "llama3.1",
        base_url: str = "http://localhost:11434",
    ) -> "HealingConfig":
        """Create configuration for a local Ollama model.

        Args:
            model_name: Ollama model name.
            base_url: Ollama API URL.

        Returns:
            HealingConfig for local model.
        """
        return cls(
            llm_mode=LLMMode.LOCAL,
            local_model_name=model_name,
            local_base_url=base_url,
        )

    @classmethod
    def from_settings(cls, settings: "HealerSettings | None" = None) -> "HealingConfig":
        """Build a configuration from environment settings.

        Args:
            settings: Settings to read. Defaults to the global settings.

        Returns:
            HealingConfig mirroring the settings.
        """
        if settings is None:
            from ..config import get_settings

            settings = get_settings()

        return cls(
            llm_mode=LLMMode(settings.llm_mode),
            remote_provider=settings.remote_provider,
            api_key=settings.api_key,
            base_url=settings.base_url,
            local_model_name=settings.local_model_name,
            local_base_url=settings.local_base_url,
            model_id=settings.model_id,
            model_timeout_ms=settings.model_timeout_ms,
            find_timeout_seconds=settings.find_timeout_seconds,
            results_file=Path(settings.results_file),
            audit_enabled=settings.audit_enabled,
        )
