"""Model client interface and implementations for locator healing.

Provides abstract interface and concrete implementations for:
- Disabled (default): No model, every request is declined as unavailable
- Local: Ollama for local inference
- Remote: Google Gemini, OpenAI, Anthropic for cloud inference

Every call is bounded by the caller-supplied timeout. Timeouts, transport
errors and unexpected response shapes all raise ModelUnavailable.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..healing_exceptions import ModelUnavailable

logger = logging.getLogger(__name__)


class ModelClient(ABC):
    """Abstract interface for text generation models.

    Implementations must provide generate(), which sends a prompt and
    returns the raw text answer.
    """

    @abstractmethod
    def generate(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        """Send a prompt to the model and return its raw text answer.

        Args:
            model_id: Model identifier.
            prompt: Prompt text.
            timeout_ms: Timeout in milliseconds, applied by httpx to each
                phase of the request (connect, write, read, pool) rather
                than as a total deadline.

        Returns:
            Raw model text (may be empty).

        Raises:
            ModelUnavailable: On timeout, transport failure or unusable response.
        """
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if the client is configured and ready."""
        pass

    def _post(
        self,
        provider: str,
        url: str,
        payload: dict[str, Any],
        timeout_ms: int,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST a JSON payload and return the decoded JSON body."""
        try:
            with httpx.Client(timeout=timeout_ms / 1000) as client:
                response = client.post(url, headers=headers, params=params, json=payload)
                response.raise_for_status()
                return response.json()
        except httpx.TimeoutException as e:
            logger.error(f"{provider} request timed out after {timeout_ms}ms")
            raise ModelUnavailable(
                f"{provider} request timed out after {timeout_ms}ms",
                context={"provider": provider, "timeout_ms": timeout_ms},
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"{provider} API error: {e}")
            raise ModelUnavailable(
                f"{provider} API error: {e}", context={"provider": provider}
            ) from e
        except ValueError as e:
            logger.error(f"{provider} returned a non-JSON body: {e}")
            raise ModelUnavailable(
                f"{provider} returned a non-JSON body", context={"provider": provider}
            ) from e


class DisabledModelClient(ModelClient):
    """Default client when model healing is disabled.

    Always raises ModelUnavailable, so healing ends with the original
    action failure and nothing leaves the machine.
    """

    def generate(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        logger.debug("Model healing disabled, declining request")
        raise ModelUnavailable("Model healing is disabled")

    @property
    def is_available(self) -> bool:
        """Disabled client is always 'available' (does nothing)."""
        return True


class LocalModelClient(ModelClient):
    """Local model via Ollama.

    Requires Ollama to be running locally with the model pulled.

    Example:
        # ollama pull llama3.1
        client = LocalModelClient()
        text = client.generate("llama3.1", prompt, timeout_ms=15000)
    """

    def __init__(self, base_url: str = "http://localhost:11434") -> None:
        """Initialize local Ollama client.

        Args:
            base_url: Ollama API base URL.
        """
        self.base_url = base_url.rstrip("/")

    def generate(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        payload = {
            "model": model_id,
            "prompt": prompt,
            "stream": False,
        }
        data = self._post("Ollama", f"{self.base_url}/api/generate", payload, timeout_ms)

        response_text = data.get("response", "")
        logger.debug(f"Ollama response: {response_text[:200]}")
        return response_text

    @property
    def is_available(self) -> bool:
        """Check if Ollama is running."""
        try:
            with httpx.Client(timeout=5.0) as client:
                response = client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError as e:
            logger.debug(f"Ollama not available: {e}")
            return False


class RemoteModelClient(ModelClient):
    """Remote model via cloud APIs.

    Supports Google (Gemini), OpenAI and Anthropic.

    Example:
        client = RemoteModelClient(
            provider="google",
            api_key=os.environ["GEMINI_API_KEY"],
        )
        text = client.generate("gemini-2.5-flash", prompt, timeout_ms=15000)
    """

    DEFAULT_BASE_URLS = {
        "google": "https://generativelanguage.googleapis.com/v1beta",
        "openai": "https://api.openai.com/v1",
        "anthropic": "https://api.anthropic.com/v1",
    }

    def __init__(
        self,
        provider: str,
        api_key: str,
        base_url: str | None = None,
        max_output_tokens: int = 1024,
    ) -> None:
        """Initialize remote API client.

        Args:
            provider: Provider name (google, openai, anthropic).
            api_key: API key for the provider.
            base_url: Optional base URL override.
            max_output_tokens: Upper bound on generated tokens.
        """
        self.provider = provider.lower()
        if self.provider not in self.DEFAULT_BASE_URLS:
            raise ValueError(f"Unknown provider: {provider}")

        self.api_key = api_key
        self.base_url = (base_url or self.DEFAULT_BASE_URLS[self.provider]).rstrip("/")
        self.max_output_tokens = max_output_tokens

    def generate(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        if self.provider == "google":
            return self._call_google(model_id, prompt, timeout_ms)
        elif self.provider == "openai":
            return self._call_openai(model_id, prompt, timeout_ms)
        else:
            return self._call_anthropic(model_id, prompt, timeout_ms)

    def _call_google(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        """Call Google Gemini generateContent API."""
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": self.max_output_tokens},
        }
        data = self._post(
            "Google",
            f"{self.base_url}/models/{model_id}:generateContent",
            payload,
            timeout_ms,
            headers={"x-goog-api-key": self.api_key},
        )

        try:
            parts = data["candidates"][0]["content"]["parts"]
            response_text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected Google response format: {e}")
            raise ModelUnavailable("Unexpected Google response format") from e

        logger.debug(f"Google response: {response_text[:200]}")
        return response_text

    def _call_openai(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        """Call OpenAI chat completions API."""
        payload = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_output_tokens,
        }
        data = self._post(
            "OpenAI",
            f"{self.base_url}/chat/completions",
            payload,
            timeout_ms,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )

        try:
            response_text = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected OpenAI response format: {e}")
            raise ModelUnavailable("Unexpected OpenAI response format") from e

        logger.debug(f"OpenAI response: {response_text[:200]}")
        return response_text

    def _call_anthropic(self, model_id: str, prompt: str, timeout_ms: int) -> str:
        """Call Anthropic messages API."""
        payload = {
            "model": model_id,
            "max_tokens": self.max_output_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        data = self._post(
            "Anthropic",
            f"{self.base_url}/messages",
            payload,
            timeout_ms,
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
                "Content-Type": "application/json",
            },
        )

        try:
            response_text = "".join(
                block.get("text", "") for block in data["content"] if block.get("type") == "text"
            )
        except (KeyError, TypeError, AttributeError) as e:
            logger.error(f"Unexpected Anthropic response format: {e}")
            raise ModelUnavailable("Unexpected Anthropic response format") from e

        logger.debug(f"Anthropic response: {response_text[:200]}")
        return response_text

    @property
    def is_available(self) -> bool:
        """Check if API key is configured (doesn't verify it works)."""
        return bool(self.api_key)
