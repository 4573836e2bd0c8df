"""Exceptions raised along the healing path.

The hierarchy mirrors the stages of a healing call:

- ActionFailure: the wrapped driver action failed.
- LocatorDecodeError (DecodeError, SchemaError, UnsupportedStrategy): the
  model answer could not be turned into a locator.
- NoLocatorFound / ModelUnavailable: the model could not help.
- CacheStale: a cached replacement stopped working (internal only).
- HealingError: terminal error handed back to the caller.
"""

from typing import TYPE_CHECKING, Any

from .base_exceptions import HealerException

if TYPE_CHECKING:
    from .locators import LocatorDescriptor


class ActionFailure(HealerException):
    """A driver action failed for a specific locator."""

    def __init__(self, locator: "LocatorDescriptor", cause: BaseException) -> None:
        super().__init__(
            f"Action failed on {locator}: {cause}",
            error_code="ACTION_FAILURE",
            context={"locator": str(locator)},
        )
        self.locator = locator
        self.cause = cause

    @property
    def cause_message(self) -> str:
        """Message of the underlying driver error."""
        return str(self.cause) or type(self.cause).__name__


class LocatorDecodeError(HealerException):
    """Base class for model answers that do not yield a usable locator."""

    pass


class DecodeError(LocatorDecodeError):
    """The model answer is not valid JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(message, error_code="DECODE_ERROR")


class SchemaError(LocatorDecodeError):
    """The model answer is JSON but not in the expected shape."""

    def __init__(self, message: str, missing_keys: list[str] | None = None) -> None:
        super().__init__(
            message,
            error_code="SCHEMA_ERROR",
            context={"missing_keys": missing_keys or []},
        )
        self.missing_keys = missing_keys or []


class UnsupportedStrategy(LocatorDecodeError):
    """A locator strategy name that has no known mapping."""

    def __init__(self, strategy: str) -> None:
        super().__init__(
            f"Locator strategy not supported: {strategy!r}",
            error_code="UNSUPPORTED_STRATEGY",
            context={"strategy": strategy},
        )
        self.strategy = strategy


class NoLocatorFound(HealerException):
    """The model declined, or its answer could not be used."""

    def __init__(self, reason: str, cause: BaseException | None = None) -> None:
        super().__init__(reason, error_code="NO_LOCATOR_FOUND")
        self.reason = reason
        self.cause = cause


class ModelUnavailable(HealerException):
    """Transport failure or timeout while talking to the model."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message, error_code="MODEL_UNAVAILABLE", context=context)


class CacheStale(HealerException):
    """A cached replacement locator failed verification."""

    def __init__(
        self,
        original: "LocatorDescriptor",
        cached: "LocatorDescriptor",
        failure: ActionFailure,
    ) -> None:
        super().__init__(
            f"Cached locator {cached} for {original} is stale: {failure.cause_message}",
            error_code="CACHE_STALE",
        )
        self.original = original
        self.cached = cached
        self.failure = failure


class AuditWriteError(HealerException):
    """An audit record could not be persisted."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, error_code="AUDIT_WRITE_ERROR", context={"path": path})


class HealingError(HealerException):
    """Terminal failure of a healing call.

    Attributes:
        original_locator: Locator the caller asked for.
        last_locator: Last locator that was actually tried.
        original_failure: Failure of the first attempt.
        cause: What ended the healing path (NoLocatorFound, ModelUnavailable,
            the ActionFailure of the final retry, or another error).
    """

    def __init__(
        self,
        original_locator: "LocatorDescriptor",
        last_locator: "LocatorDescriptor",
        original_failure: ActionFailure,
        cause: BaseException,
    ) -> None:
        message = (
            f"Self-healing failed for {original_locator} "
            f"(last attempted locator: {last_locator}). "
            f"Original error: {original_failure.cause_message}. "
            f"Healing ended with {type(cause).__name__}: {_describe(cause)}"
        )
        super().__init__(
            message,
            error_code="HEALING_FAILED",
            context={
                "original_locator": str(original_locator),
                "last_locator": str(last_locator),
            },
        )
        self.original_locator = original_locator
        self.last_locator = last_locator
        self.original_failure = original_failure
        self.cause = cause


def _describe(error: BaseException) -> str:
    if isinstance(error, ActionFailure):
        return error.cause_message
    if isinstance(error, HealerException):
        return error.message
    return str(error) or type(error).__name__
