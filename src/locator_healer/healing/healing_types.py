"""Type definitions for the healing system.

Defines the failure context handed to the model, the decoded model
suggestion, and the outcome types passed between requester, orchestrator
and caller.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from ..healing_exceptions import (
    ActionFailure,
    HealingError,
    ModelUnavailable,
    NoLocatorFound,
)
from ..locators import LocatorDescriptor

T = TypeVar("T")


class Platform(Enum):
    """UI platform a locator belongs to."""

    ANDROID = "android"
    IOS = "ios"
    WEB = "web"


class HealingStrategy(Enum):
    """How a healing call obtained its result."""

    ORIGINAL = "original"
    """Original locator worked, nothing to heal."""

    CACHE_HIT = "cache_hit"
    """A previously healed locator from the cache worked."""

    MODEL_HEAL = "model_heal"
    """A fresh locator suggested by the model worked."""

    FAILED = "failed"
    """Healing could not recover the action."""


@dataclass(frozen=True)
class FailureContext:
    """Everything the model needs to propose a replacement locator.

    Created fresh for each healing attempt.
    """

    platform: Platform
    model_id: str
    original_locator: LocatorDescriptor
    error_message: str
    ui_label: str
    page_source: str


@dataclass(frozen=True)
class HealingSuggestion:
    """Decoded model answer.

    ``suggested_type`` and ``suggested_value`` are either both set or both
    None; both None means the model found no locator.
    """

    failed_element: str
    suggested_type: str | None
    suggested_value: str | None
    reason: str
    improvement_suggestion: str
    payload: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if (self.suggested_type is None) != (self.suggested_value is None):
            raise ValueError("suggested_type and suggested_value must both be set or both be None")

    @property
    def has_locator(self) -> bool:
        return self.suggested_type is not None


@dataclass(frozen=True)
class ActionSucceeded(Generic[T]):
    """An action run that returned normally."""

    locator: LocatorDescriptor
    value: T


@dataclass(frozen=True)
class ActionFailed:
    """An action run that raised."""

    failure: ActionFailure

    @property
    def locator(self) -> LocatorDescriptor:
        return self.failure.locator


ActionOutcome = ActionSucceeded[Any] | ActionFailed


@dataclass(frozen=True)
class HealOutcome:
    """Result of asking the model for a replacement locator."""

    locator: LocatorDescriptor | None = None
    suggestion: HealingSuggestion | None = None
    error: NoLocatorFound | ModelUnavailable | None = None

    @property
    def healed(self) -> bool:
        return self.locator is not None


@dataclass
class HealingResult(Generic[T]):
    """Result of a perform-with-healing call."""

    success: bool
    """Whether the action eventually succeeded."""

    strategy: HealingStrategy
    """How the result was obtained (or FAILED)."""

    value: T | None = None
    """Value returned by the action if successful."""

    locator: LocatorDescriptor | None = None
    """Locator that worked, or the last one tried on failure."""

    error: HealingError | None = None
    """Terminal error if not successful."""

    attempts: list[tuple[LocatorDescriptor, str | None]] = field(default_factory=list)
    """(locator, error message or None) for each physical action attempt."""

    duration_ms: float = 0.0
    """Time spent in the call in milliseconds."""

    def unwrap(self) -> T:
        """Return the action value, or raise the terminal HealingError."""
        if not self.success:
            assert self.error is not None
            raise self.error
        return self.value  # type: ignore[return-value]
