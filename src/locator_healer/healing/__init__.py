"""Self-healing for broken UI locators.

When an action fails because its locator no longer matches, the
orchestrator retries with a cached replacement and, failing that, asks a
generative model for a new locator. By default model access is DISABLED;
it must be enabled explicitly.

Key Features:
- Per-locator cache of healed replacements, shared across threads
- One model request per failing call, never an unbounded retry loop
- Local (Ollama) or remote (Google, OpenAI, Anthropic) models
- Best-effort JSON audit trail of resolved locators

Default Behavior (model disabled):
    >>> from locator_healer.healing import create_orchestrator, HealingConfig, Platform
    >>>
    >>> orchestrator = create_orchestrator(HealingConfig.disabled())
    >>> orchestrator.perform_with_healing(
    ...     lambda loc: driver.find_element(*loc.as_tuple()).click(),
    ...     "id=login_btn",
    ...     platform=Platform.WEB,
    ...     page_source=lambda: driver.page_source,
    ... )

Enable Gemini (requires API key):
    >>> config = HealingConfig.with_gemini(api_key=os.environ["GEMINI_API_KEY"])
    >>> orchestrator = create_orchestrator(config)

Enable Local Model (Ollama):
    >>> config = HealingConfig.with_ollama(model_name="llama3.1")
"""

from .codec import DecodeResult, DecodeStatus, LocatorCodec, decode, extract_payload
from .healing_config import HealingConfig, HealingConfigurationError, LLMMode
from .healing_types import (
    ActionFailed,
    ActionSucceeded,
    FailureContext,
    HealingResult,
    HealingStrategy,
    HealingSuggestion,
    HealOutcome,
    Platform,
)
from .model_client import (
    DisabledModelClient,
    LocalModelClient,
    ModelClient,
    RemoteModelClient,
)
from .orchestrator import HealingOrchestrator, create_orchestrator
from .prompts import (
    AndroidPromptBuilder,
    IOSPromptBuilder,
    PromptBuilder,
    WebPromptBuilder,
    get_prompt_builder,
)
from .requester import HealingRequester

__all__ = [
    # Main classes
    "HealingOrchestrator",
    "HealingRequester",
    "HealingConfig",
    "create_orchestrator",
    # Codec
    "LocatorCodec",
    "DecodeResult",
    "DecodeStatus",
    "decode",
    "extract_payload",
    # Types
    "Platform",
    "FailureContext",
    "HealingSuggestion",
    "HealOutcome",
    "HealingResult",
    "HealingStrategy",
    "ActionSucceeded",
    "ActionFailed",
    "LLMMode",
    # Model clients
    "ModelClient",
    "DisabledModelClient",
    "LocalModelClient",
    "RemoteModelClient",
    # Prompts
    "PromptBuilder",
    "AndroidPromptBuilder",
    "IOSPromptBuilder",
    "WebPromptBuilder",
    "get_prompt_builder",
    # Errors
    "HealingConfigurationError",
]
