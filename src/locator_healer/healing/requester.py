"""Asks the model for a replacement locator.

The requester builds the platform prompt, calls the model client, decodes
the answer and, when a locator was resolved, writes an audit record.
Model problems are returned as values so the orchestrator can decide
what to surface; audit problems are logged and dropped.
"""

import json

from ..audit import AuditRecord, ResultsSink, utc_timestamp
from ..healing_exceptions import ModelUnavailable, NoLocatorFound
from ..logging import get_logger
from .codec import DecodeStatus, LocatorCodec
from .healing_types import FailureContext, HealingSuggestion, HealOutcome, Platform
from .model_client import ModelClient
from .prompts import PromptBuilder, get_prompt_builder

logger = get_logger(__name__)


class HealingRequester:
    """Turns a FailureContext into a replacement locator.

    Stateless apart from its collaborators, so one instance can be shared
    by every orchestrator and thread.

    Example:
        requester = HealingRequester(RemoteModelClient("google", api_key))
        outcome = requester.request_heal(context)
        if outcome.healed:
            retry(outcome.locator)
    """

    def __init__(
        self,
        model_client: ModelClient,
        results_sink: ResultsSink | None = None,
        codec: LocatorCodec | None = None,
        prompt_builders: dict[Platform, PromptBuilder] | None = None,
        default_timeout_ms: int = 15000,
    ) -> None:
        """Initialize the requester.

        Args:
            model_client: Client used to query the model.
            results_sink: Where audit records go. None disables auditing.
            codec: Decoder for model answers.
            prompt_builders: Per-platform prompt builders overriding the defaults.
            default_timeout_ms: Model timeout when the caller gives none.
        """
        self.model_client = model_client
        self.results_sink = results_sink
        self.codec = codec or LocatorCodec()
        self.prompt_builders = prompt_builders or {}
        self.default_timeout_ms = default_timeout_ms

    def build_prompt(self, ctx: FailureContext) -> str:
        """Build the prompt for a failure context."""
        builder = self.prompt_builders.get(ctx.platform) or get_prompt_builder(ctx.platform)
        return builder.build_prompt(
            page_source=ctx.page_source,
            failed_locator=str(ctx.original_locator),
            error_message=ctx.error_message,
            ui_label=ctx.ui_label,
        )

    def request_heal(self, ctx: FailureContext, timeout_ms: int | None = None) -> HealOutcome:
        """Request one replacement locator from the model.

        Args:
            ctx: Failure context for the locator that broke.
            timeout_ms: Model timeout; defaults to ``default_timeout_ms``.

        Returns:
            HealOutcome with ``locator`` set on success, or ``error`` set to
            ModelUnavailable (transport/timeout) or NoLocatorFound (model
            declined or answered something unusable).
        """
        timeout = timeout_ms or self.default_timeout_ms
        prompt = self.build_prompt(ctx)

        logger.info(
            "heal_requested",
            platform=ctx.platform.value,
            model_id=ctx.model_id,
            locator=str(ctx.original_locator),
            timeout_ms=timeout,
        )

        try:
            raw_text = self.model_client.generate(ctx.model_id, prompt, timeout)
        except ModelUnavailable as e:
            logger.warning("model_unavailable", locator=str(ctx.original_locator), error=e.message)
            return HealOutcome(error=e)
        except Exception as e:
            # Clients outside this package may raise raw transport errors
            unavailable = ModelUnavailable(
                f"Model request failed: {e}",
                context={"error_type": type(e).__name__},
            )
            unavailable.__cause__ = e
            logger.warning(
                "model_unavailable",
                locator=str(ctx.original_locator),
                error=unavailable.message,
            )
            return HealOutcome(error=unavailable)

        result = self.codec.decode(raw_text)

        if result.status is DecodeStatus.NO_SUGGESTION:
            suggestion = result.suggestion
            reason = (suggestion.reason if suggestion else "") or "model returned no locator"
            logger.info("heal_declined", locator=str(ctx.original_locator), reason=reason)
            return HealOutcome(
                suggestion=suggestion,
                error=NoLocatorFound(f"Model found no locator: {reason}"),
            )

        if result.status is DecodeStatus.FAILED:
            assert result.error is not None
            logger.warning(
                "model_response_unusable",
                locator=str(ctx.original_locator),
                error=result.error.message,
            )
            return HealOutcome(
                error=NoLocatorFound(
                    f"Model response could not be used: {result.error.message}",
                    cause=result.error,
                )
            )

        assert result.descriptor is not None and result.suggestion is not None
        logger.info(
            "heal_succeeded",
            locator=str(ctx.original_locator),
            healed=str(result.descriptor),
            reason=result.suggestion.reason,
        )

        self._audit(ctx, str(result.descriptor), result.suggestion)
        return HealOutcome(locator=result.descriptor, suggestion=result.suggestion)

    def _audit(self, ctx: FailureContext, resolved: str, suggestion: HealingSuggestion) -> None:
        """Write the audit record; failures never reach the caller."""
        if self.results_sink is None:
            return

        try:
            record = AuditRecord(
                executed_at=utc_timestamp(),
                error_element_locator=str(ctx.original_locator),
                resolved_element_locator=resolved,
                detail_model_response=json.dumps(suggestion.payload),
            )
            self.results_sink.append(record)
        except Exception as e:
            logger.warning(
                "audit_write_failed",
                locator=str(ctx.original_locator),
                error=str(e),
                error_type=type(e).__name__,
            )
