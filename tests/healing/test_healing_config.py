"""Tests for HealingConfig."""

import sys
from pathlib import Path

import pytest

# Add src to path for direct import
src_path = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(src_path))

from locator_healer.config import HealerSettings
from locator_healer.healing.healing_config import (
    HealingConfig,
    HealingConfigurationError,
    LLMMode,
)
from locator_healer.healing.model_client import (
    DisabledModelClient,
    LocalModelClient,
    RemoteModelClient,
)


class TestHealingConfig:
    """Tests for HealingConfig class."""

    def test_disabled_by_default(self):
        """Test that model access is disabled by default."""
        config = HealingConfig()

        assert config.llm_mode == LLMMode.DISABLED
        assert config.api_key is None

    def test_defaults(self):
        """Test documented default values."""
        config = HealingConfig()

        assert config.model_id == "gemini-2.5-flash"
        assert config.model_timeout_ms == 15000
        assert config.find_timeout_seconds == 5.0
        assert config.results_file == Path("logs") / "resolved-elements.json"
        assert config.audit_enabled

    def test_with_gemini(self):
        """Test Gemini configuration."""
        config = HealingConfig.with_gemini(api_key="g-key", model="gemini-2.5-pro")

        assert config.llm_mode == LLMMode.REMOTE
        assert config.remote_provider == "google"
        assert config.api_key == "g-key"
        assert config.model_id == "gemini-2.5-pro"

    def test_with_openai(self):
        """Test OpenAI configuration."""
        config = HealingConfig.with_openai(api_key="sk-test-key")

        assert config.llm_mode == LLMMode.REMOTE
        assert config.remote_provider == "openai"
        assert config.api_key == "sk-test-key"

    def test_with_anthropic(self):
        """Test Anthropic configuration."""
        config = HealingConfig.with_anthropic(api_key="sk-ant-test")

        assert config.llm_mode == LLMMode.REMOTE
        assert config.remote_provider == "anthropic"

    def test_with_ollama(self):
        """Test Ollama configuration uses the local model as model id."""
        config = HealingConfig.with_ollama(model_name="qwen2.5")

        assert config.llm_mode == LLMMode.LOCAL
        assert config.local_model_name == "qwen2.5"
        assert config.effective_model_id == "qwen2.5"

    def test_repr_hides_client(self):
        """The cached client is not part of repr."""
        assert "_client" not in repr(HealingConfig())


class TestValidation:
    """Tests for validate()."""

    def test_remote_requires_api_key(self):
        """Remote mode without a key is rejected."""
        config = HealingConfig(llm_mode=LLMMode.REMOTE)

        with pytest.raises(HealingConfigurationError, match="api_key"):
            config.validate()

    def test_remote_provider_must_be_known(self):
        """Unknown providers are rejected."""
        config = HealingConfig(llm_mode=LLMMode.REMOTE, api_key="k", remote_provider="acme")

        with pytest.raises(HealingConfigurationError, match="remote_provider"):
            config.validate()

    def test_timeout_must_be_positive(self):
        """Zero timeouts are rejected."""
        with pytest.raises(HealingConfigurationError):
            HealingConfig(model_timeout_ms=0).validate()

    def test_find_timeout_must_be_positive(self):
        """Negative waits are rejected."""
        with pytest.raises(HealingConfigurationError):
            HealingConfig(find_timeout_seconds=-1).validate()

    def test_disabled_is_valid(self):
        """The default config validates."""
        HealingConfig.disabled().validate()


class TestCreateClient:
    """Tests for client creation."""

    def test_disabled_client(self):
        """Disabled mode creates the disabled client."""
        assert isinstance(HealingConfig.disabled().create_client(), DisabledModelClient)

    def test_local_client(self):
        """Local mode creates an Ollama client."""
        client = HealingConfig.with_ollama(base_url="http://gpu-box:11434").create_client()

        assert isinstance(client, LocalModelClient)
        assert client.base_url == "http://gpu-box:11434"

    def test_remote_client(self):
        """Remote mode creates a provider client."""
        client = HealingConfig.with_gemini(api_key="g-key").create_client()

        assert isinstance(client, RemoteModelClient)
        assert client.provider == "google"
        assert client.api_key == "g-key"

    def test_invalid_config_raises(self):
        """Invalid configs do not create clients."""
        with pytest.raises(HealingConfigurationError):
            HealingConfig(llm_mode=LLMMode.REMOTE).create_client()

    def test_get_client_is_cached(self):
        """get_client reuses the instance."""
        config = HealingConfig.disabled()

        assert config.get_client() is config.get_client()


class TestFromSettings:
    """Tests for building a config from settings."""

    def test_copies_settings(self, tmp_path):
        """Every knob is taken from the settings."""
        settings = HealerSettings(
            llm_mode="remote",
            remote_provider="openai",
            api_key="sk-x",
            model_id="gpt-4o-mini",
            model_timeout_ms=3000,
            find_timeout_seconds=2.0,
            results_file=tmp_path / "out.json",
            audit_enabled=False,
        )

        config = HealingConfig.from_settings(settings)

        assert config.llm_mode == LLMMode.REMOTE
        assert config.remote_provider == "openai"
        assert config.api_key == "sk-x"
        assert config.model_id == "gpt-4o-mini"
        assert config.model_timeout_ms == 3000
        assert config.find_timeout_seconds == 2.0
        assert config.results_file == tmp_path / "out.json"
        assert config.audit_enabled is False

    def test_reads_environment(self, monkeypatch):
        """Without settings the environment is used."""
        monkeypatch.setenv("LOCATOR_HEALER_LLM_MODE", "local")
        monkeypatch.setenv("LOCATOR_HEALER_LOCAL_MODEL_NAME", "mistral")

        config = HealingConfig.from_settings()

        assert config.llm_mode == LLMMode.LOCAL
        assert config.effective_model_id == "mistral"
