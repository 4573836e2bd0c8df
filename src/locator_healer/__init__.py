"""locator-healer: self-healing UI locators for Android, iOS and Web tests.

When a locator stops matching, the failing action is retried with a cached
replacement or with a fresh locator suggested by a generative model, and
the fix is remembered for the rest of the run.

Example:
    >>> from locator_healer import HealingConfig, WebHealingDriver, create_orchestrator
    >>>
    >>> orchestrator = create_orchestrator(HealingConfig.with_gemini(api_key))
    >>> healer = WebHealingDriver(driver, orchestrator)
    >>> healer.click_on("id=login_btn", ui_label="Log in")
"""

__version__ = "0.1.0"

from .audit import AuditRecord, JsonFileResultsSink, ResultsSink
from .base_exceptions import HealerException
from .cache import CacheStats, HealedLocatorCache
from .driver import (
    AndroidHealingDriver,
    Driver,
    HealingDriver,
    IOSHealingDriver,
    WebHealingDriver,
)
from .healing import (
    FailureContext,
    HealingConfig,
    HealingConfigurationError,
    HealingOrchestrator,
    HealingRequester,
    HealingResult,
    HealingStrategy,
    LLMMode,
    LocatorCodec,
    ModelClient,
    Platform,
    create_orchestrator,
)
from .healing_exceptions import (
    ActionFailure,
    AuditWriteError,
    CacheStale,
    DecodeError,
    HealingError,
    LocatorDecodeError,
    ModelUnavailable,
    NoLocatorFound,
    SchemaError,
    UnsupportedStrategy,
)
from .locators import LocatorDescriptor, LocatorStrategy, resolve_strategy

__all__ = [
    "__version__",
    # Locators
    "LocatorDescriptor",
    "LocatorStrategy",
    "resolve_strategy",
    # Healing
    "HealingOrchestrator",
    "HealingRequester",
    "HealingConfig",
    "HealingResult",
    "HealingStrategy",
    "FailureContext",
    "LLMMode",
    "LocatorCodec",
    "ModelClient",
    "Platform",
    "create_orchestrator",
    # Cache
    "HealedLocatorCache",
    "CacheStats",
    # Audit
    "AuditRecord",
    "ResultsSink",
    "JsonFileResultsSink",
    # Drivers
    "Driver",
    "HealingDriver",
    "AndroidHealingDriver",
    "IOSHealingDriver",
    "WebHealingDriver",
    # Errors
    "HealerException",
    "ActionFailure",
    "LocatorDecodeError",
    "DecodeError",
    "SchemaError",
    "UnsupportedStrategy",
    "NoLocatorFound",
    "ModelUnavailable",
    "CacheStale",
    "AuditWriteError",
    "HealingError",
    "HealingConfigurationError",
]
