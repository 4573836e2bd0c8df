"""Retry/cache/heal protocol around a locator-based action.

For one call the orchestrator tries, in order:
1. The original locator
2. The cached replacement for it, if any (invalidated when it fails)
3. One fresh replacement requested from the model (cached when it works)

Action outcomes are modelled as ActionSucceeded / ActionFailed values; the
only exceptions caught are the ones raised by the action itself.
"""

import threading
import time
from collections.abc import Callable
from typing import Any

from ..audit import JsonFileResultsSink, ResultsSink
from ..cache import HealedLocatorCache
from ..healing_exceptions import ActionFailure, CacheStale, HealingError, NoLocatorFound
from ..locators import LocatorDescriptor, as_descriptor
from ..logging import get_logger
from ..reporting.events import EventType, emit_event
from .healing_config import HealingConfig
from .healing_types import (
    ActionFailed,
    ActionOutcome,
    ActionSucceeded,
    FailureContext,
    HealingResult,
    HealingStrategy,
    Platform,
    T,
)
from .requester import HealingRequester

logger = get_logger(__name__)

PageSource = str | Callable[[], str]


class HealingOrchestrator:
    """Runs actions with locator self-healing.

    One instance is meant to be shared by every test worker; the cache is
    the only shared mutable state and is internally synchronized.

    Attributes:
        requester: Asks the model for replacement locators.
        cache: Healed locators, keyed by original locator.
        config: Model id and timeout defaults.
    """

    def __init__(
        self,
        requester: HealingRequester,
        cache: HealedLocatorCache | None = None,
        config: HealingConfig | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            requester: Healing requester.
            cache: Cache to share. A private cache is created if omitted.
            config: Healing configuration. Defaults to disabled.
        """
        self.requester = requester
        self.cache = cache if cache is not None else HealedLocatorCache()
        self.config = config or HealingConfig.disabled()

        self._stats_lock = threading.Lock()
        self._total_calls = 0
        self._first_try_successes = 0
        self._cache_hits = 0
        self._stale_invalidations = 0
        self._model_requests = 0
        self._successful_heals = 0
        self._failures = 0

    def perform_with_healing(
        self,
        action: Callable[[LocatorDescriptor], T],
        locator: LocatorDescriptor | str,
        *,
        platform: Platform,
        page_source: PageSource,
        ui_label: str = "",
        model_id: str | None = None,
        timeout_ms: int | None = None,
    ) -> T:
        """Run ``action`` with healing and return its value.

        Same parameters as execute().

        Raises:
            HealingError: If no locator could be made to work.
        """
        return self.execute(
            action,
            locator,
            platform=platform,
            page_source=page_source,
            ui_label=ui_label,
            model_id=model_id,
            timeout_ms=timeout_ms,
        ).unwrap()

    def execute(
        self,
        action: Callable[[LocatorDescriptor], T],
        locator: LocatorDescriptor | str,
        *,
        platform: Platform,
        page_source: PageSource,
        ui_label: str = "",
        model_id: str | None = None,
        timeout_ms: int | None = None,
    ) -> HealingResult[T]:
        """Run ``action`` with healing and describe what happened.

        Args:
            action: Retryable callable taking the locator to use.
            locator: Original locator, as descriptor or "<strategy>=<value>".
            platform: Platform, selects the prompt.
            page_source: Page source string, or a callable returning it. A
                callable is only invoked when the model is about to be asked.
            ui_label: Text expected on the element, passed to the model.
            model_id: Model override for this call.
            timeout_ms: Model timeout override for this call.

        Returns:
            HealingResult. Healing failures are reported in ``error``, never
            raised.
        """
        start_time = time.time()
        original = as_descriptor(locator)
        attempts: list[tuple[LocatorDescriptor, str | None]] = []
        self._increment("_total_calls")

        outcome = self._attempt(action, original, attempts)
        if isinstance(outcome, ActionSucceeded):
            self._increment("_first_try_successes")
            return self._succeeded(outcome, HealingStrategy.ORIGINAL, attempts, start_time)

        assert isinstance(outcome, ActionFailed)
        original_failure = outcome.failure
        logger.info(
            "action_failed",
            locator=str(original),
            platform=platform.value,
            error=original_failure.cause_message,
        )
        self._emit(
            EventType.HEALING_STARTED,
            original=str(original),
            platform=platform.value,
            error=original_failure.cause_message,
        )

        failed_locators = {original}
        last_locator = original

        # Cached replacement
        cached = self.cache.get(original)
        if cached is not None and cached not in failed_locators:
            logger.info("cache_hit", locator=str(original), cached=str(cached))
            self._emit(EventType.CACHE_HIT, original=str(original), cached=str(cached))

            outcome = self._attempt(action, cached, attempts)
            last_locator = cached
            if isinstance(outcome, ActionSucceeded):
                self._increment("_cache_hits")
                return self._succeeded(outcome, HealingStrategy.CACHE_HIT, attempts, start_time)

            assert isinstance(outcome, ActionFailed)
            stale = CacheStale(original, cached, outcome.failure)
            logger.warning("cache_stale", locator=str(original), cached=str(cached), error=stale.message)
            self.cache.invalidate(original)
            self._increment("_stale_invalidations")
            self._emit(EventType.CACHE_INVALIDATED, original=str(original), cached=str(cached))
            failed_locators.add(cached)
        elif cached is not None:
            self.cache.invalidate(original)

        # Fresh heal, at most once per call
        try:
            source = page_source() if callable(page_source) else page_source
        except Exception as e:
            logger.warning("page_source_failed", locator=str(original), error=str(e))
            return self._failed(original, last_locator, original_failure, e, attempts, start_time)

        context = FailureContext(
            platform=platform,
            model_id=model_id or self.config.effective_model_id,
            original_locator=original,
            error_message=original_failure.cause_message,
            ui_label=ui_label,
            page_source=source,
        )

        self._increment("_model_requests")
        self._emit(EventType.MODEL_REQUESTED, original=str(original), model_id=context.model_id)
        try:
            heal = self.requester.request_heal(
                context, timeout_ms=timeout_ms or self.config.model_timeout_ms
            )
        except Exception as e:
            logger.error("heal_request_crashed", locator=str(original), error=str(e), exc_info=True)
            return self._failed(original, last_locator, original_failure, e, attempts, start_time)

        if not heal.healed:
            assert heal.error is not None
            return self._failed(
                original, last_locator, original_failure, heal.error, attempts, start_time
            )

        fresh = heal.locator
        assert fresh is not None
        if fresh in failed_locators:
            cause = NoLocatorFound(f"Model suggested {fresh}, which already failed in this call")
            return self._failed(original, last_locator, original_failure, cause, attempts, start_time)

        outcome = self._attempt(action, fresh, attempts)
        if isinstance(outcome, ActionSucceeded):
            self.cache.put(original, fresh)
            self._increment("_successful_heals")
            return self._succeeded(outcome, HealingStrategy.MODEL_HEAL, attempts, start_time)

        assert isinstance(outcome, ActionFailed)
        return self._failed(original, fresh, original_failure, outcome.failure, attempts, start_time)

    def get_stats(self) -> dict[str, int | float]:
        """Get healing statistics.

        Returns:
            Dictionary with statistics.
        """
        with self._stats_lock:
            healed = self._cache_hits + self._successful_heals
            attempted = healed + self._failures
            return {
                "total_calls": self._total_calls,
                "first_try_successes": self._first_try_successes,
                "cache_hits": self._cache_hits,
                "stale_invalidations": self._stale_invalidations,
                "model_requests": self._model_requests,
                "successful_heals": self._successful_heals,
                "failures": self._failures,
                "success_rate": healed / attempted * 100 if attempted > 0 else 0.0,
            }

    def _attempt(
        self,
        action: Callable[[LocatorDescriptor], Any],
        locator: LocatorDescriptor,
        attempts: list[tuple[LocatorDescriptor, str | None]],
    ) -> ActionOutcome:
        """Run the action once and turn the result into an outcome value."""
        try:
            value = action(locator)
        except Exception as e:
            failure = ActionFailure(locator, e)
            attempts.append((locator, failure.cause_message))
            return ActionFailed(failure)

        attempts.append((locator, None))
        return ActionSucceeded(locator, value)

    def _succeeded(
        self,
        outcome: ActionSucceeded[T],
        strategy: HealingStrategy,
        attempts: list[tuple[LocatorDescriptor, str | None]],
        start_time: float,
    ) -> HealingResult[T]:
        duration_ms = (time.time() - start_time) * 1000
        if strategy is not HealingStrategy.ORIGINAL:
            original = attempts[0][0]
            logger.info(
                "healing_succeeded",
                locator=str(original),
                healed=str(outcome.locator),
                strategy=strategy.value,
                duration_ms=round(duration_ms, 1),
            )
            self._emit(
                EventType.HEALING_SUCCEEDED,
                original=str(original),
                healed=str(outcome.locator),
                strategy=strategy.value,
                duration_ms=duration_ms,
            )
        return HealingResult(
            success=True,
            strategy=strategy,
            value=outcome.value,
            locator=outcome.locator,
            attempts=attempts,
            duration_ms=duration_ms,
        )

    def _failed(
        self,
        original: LocatorDescriptor,
        last_locator: LocatorDescriptor,
        original_failure: ActionFailure,
        cause: BaseException,
        attempts: list[tuple[LocatorDescriptor, str | None]],
        start_time: float,
    ) -> HealingResult[Any]:
        duration_ms = (time.time() - start_time) * 1000
        self._increment("_failures")

        error = HealingError(original, last_locator, original_failure, cause)
        error.__cause__ = original_failure.cause

        logger.warning(
            "healing_failed",
            locator=str(original),
            last_locator=str(last_locator),
            cause=type(cause).__name__,
            error=error.message,
        )
        self._emit(
            EventType.HEALING_FAILED,
            original=str(original),
            last_locator=str(last_locator),
            cause=type(cause).__name__,
            message=error.message,
        )
        return HealingResult(
            success=False,
            strategy=HealingStrategy.FAILED,
            locator=last_locator,
            error=error,
            attempts=attempts,
            duration_ms=duration_ms,
        )

    def _increment(self, counter: str) -> None:
        with self._stats_lock:
            setattr(self, counter, getattr(self, counter) + 1)

    def _emit(self, event_type: EventType, **data: Any) -> None:
        """Emit a reporting event; failures are logged and dropped."""
        try:
            emit_event(event_type, data=data)
        except Exception as e:
            logger.debug("event_emit_failed", event=event_type.value, error=str(e))


def create_orchestrator(
    config: HealingConfig | None = None,
    cache: HealedLocatorCache | None = None,
    results_sink: ResultsSink | None = None,
) -> HealingOrchestrator:
    """Wire an orchestrator from a configuration.

    Args:
        config: Healing configuration. Defaults to the environment settings.
        cache: Cache to share between orchestrators.
        results_sink: Audit sink. Defaults to a JSON file sink on
            ``config.results_file`` when auditing is enabled.

    Returns:
        Ready-to-use HealingOrchestrator.

    Raises:
        HealingConfigurationError: If the configuration is invalid.
    """
    config = config or HealingConfig.from_settings()
    if results_sink is None and config.audit_enabled:
        results_sink = JsonFileResultsSink(config.results_file)

    requester = HealingRequester(
        config.get_client(),
        results_sink=results_sink,
        default_timeout_ms=config.model_timeout_ms,
    )
    return HealingOrchestrator(requester, cache=cache, config=config)
