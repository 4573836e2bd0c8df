"""Tests for HealingRequester."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add src to path for direct import
src_path = Path(__file__).parent.parent.parent / "src"
sys.path.insert(0, str(src_path))

from locator_healer.audit import JsonFileResultsSink, ResultsSink
from locator_healer.healing.healing_types import FailureContext, Platform
from locator_healer.healing.prompts import PromptBuilder
from locator_healer.healing.requester import HealingRequester
from locator_healer.healing_exceptions import (
    AuditWriteError,
    ModelUnavailable,
    NoLocatorFound,
    UnsupportedStrategy,
)
from locator_healer.locators import LocatorDescriptor, LocatorStrategy


@pytest.fixture
def context() -> FailureContext:
    return FailureContext(
        platform=Platform.ANDROID,
        model_id="gemini-2.5-flash",
        original_locator=LocatorDescriptor(LocatorStrategy.ID, "old_login"),
        error_message="NoSuchElementException: id=old_login",
        ui_label="Log in",
        page_source="<hierarchy><node resource-id='login_btn' text='Log in'/></hierarchy>",
    )


@pytest.fixture
def sink() -> MagicMock:
    return MagicMock(spec=ResultsSink)


# ============================================================================
# Prompt and Model Call
# ============================================================================


class TestModelCall:
    """Tests for how the model is called."""

    def test_passes_model_id_prompt_and_timeout(self, model_client, context):
        """The model gets the context's model id, the platform prompt and the timeout."""
        requester = HealingRequester(model_client)

        requester.request_heal(context, timeout_ms=2500)

        model_id, prompt, timeout = model_client.generate.call_args.args
        assert model_id == "gemini-2.5-flash"
        assert timeout == 2500
        assert "id=old_login" in prompt
        assert "NoSuchElementException" in prompt
        assert "Log in" in prompt
        assert "resource-id='login_btn'" in prompt
        assert "UiAutomator2" in prompt

    def test_default_timeout(self, model_client, context):
        """Without a timeout the requester default is used."""
        requester = HealingRequester(model_client, default_timeout_ms=7000)

        requester.request_heal(context)

        assert model_client.generate.call_args.args[2] == 7000

    def test_custom_prompt_builder(self, model_client, context):
        """Per-platform builders override the defaults."""
        builder = MagicMock(spec=PromptBuilder)
        builder.build_prompt.return_value = "custom prompt"
        requester = HealingRequester(model_client, prompt_builders={Platform.ANDROID: builder})

        requester.request_heal(context)

        builder.build_prompt.assert_called_once_with(
            page_source=context.page_source,
            failed_locator="id=old_login",
            error_message=context.error_message,
            ui_label="Log in",
        )
        assert model_client.generate.call_args.args[1] == "custom prompt"


# ============================================================================
# Outcomes
# ============================================================================


class TestOutcomes:
    """Tests for request_heal outcomes."""

    def test_resolved(self, model_client, context):
        """A usable answer yields the locator."""
        outcome = HealingRequester(model_client).request_heal(context)

        assert outcome.healed
        assert outcome.locator == LocatorDescriptor(LocatorStrategy.ID, "login_btn")
        assert outcome.suggestion.reason == "found by test"
        assert outcome.error is None

    def test_model_unavailable_is_returned(self, model_client, context):
        """Transport failures come back as a value, not an exception."""
        model_client.generate.side_effect = ModelUnavailable("timed out")

        outcome = HealingRequester(model_client).request_heal(context)

        assert not outcome.healed
        assert isinstance(outcome.error, ModelUnavailable)

    @pytest.mark.parametrize(
        "error", [TimeoutError("timed out"), ConnectionError("connection reset")]
    )
    def test_raw_transport_error_becomes_model_unavailable(self, model_client, context, error):
        """Errors from clients that do not wrap them are still returned as ModelUnavailable."""
        model_client.generate.side_effect = error

        outcome = HealingRequester(model_client).request_heal(context)

        assert not outcome.healed
        assert isinstance(outcome.error, ModelUnavailable)
        assert outcome.error.__cause__ is error
        assert str(error) in outcome.error.message

    def test_no_suggestion_is_no_locator_found(self, model_client, context, answer):
        """An explicit decline becomes NoLocatorFound with the model's reason."""
        model_client.generate.return_value = answer(None, None, reason="element gone")

        outcome = HealingRequester(model_client).request_heal(context)

        assert not outcome.healed
        assert isinstance(outcome.error, NoLocatorFound)
        assert "element gone" in outcome.error.reason
        assert outcome.suggestion is not None

    def test_decode_failure_is_no_locator_found(self, model_client, context, answer):
        """Unusable answers become NoLocatorFound with the decode error as cause."""
        model_client.generate.return_value = answer("telepathy", "login")

        outcome = HealingRequester(model_client).request_heal(context)

        assert isinstance(outcome.error, NoLocatorFound)
        assert isinstance(outcome.error.cause, UnsupportedStrategy)

    def test_garbage_answer(self, model_client, context):
        """Non-JSON answers become NoLocatorFound."""
        model_client.generate.return_value = "I could not find it, sorry."

        outcome = HealingRequester(model_client).request_heal(context)

        assert isinstance(outcome.error, NoLocatorFound)


# ============================================================================
# Audit
# ============================================================================


class TestAudit:
    """Tests for audit records."""

    def test_record_written_on_resolution(self, model_client, context, sink):
        """One record per resolution with both locators and the JSON answer."""
        HealingRequester(model_client, results_sink=sink).request_heal(context)

        sink.append.assert_called_once()
        record = sink.append.call_args.args[0]
        assert record.error_element_locator == "id=old_login"
        assert record.resolved_element_locator == "id=login_btn"
        assert json.loads(record.detail_model_response)["newValidElement"] == "login_btn"
        assert record.executed_at.endswith("Z")

    @pytest.mark.parametrize(
        "raw", ["not json", '{"newValidElementType": null, "newValidElement": null}']
    )
    def test_no_record_without_resolution(self, model_client, context, sink, raw):
        """Declines and failures are not audited."""
        model_client.generate.return_value = raw

        HealingRequester(model_client, results_sink=sink).request_heal(context)

        sink.append.assert_not_called()

    def test_no_record_when_model_unavailable(self, model_client, context, sink):
        """Transport failures are not audited."""
        model_client.generate.side_effect = ModelUnavailable("down")

        HealingRequester(model_client, results_sink=sink).request_heal(context)

        sink.append.assert_not_called()

    def test_sink_failure_is_swallowed(self, model_client, context, sink):
        """A failing sink never fails the heal."""
        sink.append.side_effect = AuditWriteError("disk full")

        outcome = HealingRequester(model_client, results_sink=sink).request_heal(context)

        assert outcome.healed

    def test_clock_failure_skips_record(self, model_client, context, sink):
        """Without a timestamp no record is written and the heal still succeeds."""
        with patch(
            "locator_healer.healing.requester.utc_timestamp", side_effect=OSError("no clock")
        ):
            outcome = HealingRequester(model_client, results_sink=sink).request_heal(context)

        assert outcome.healed
        sink.append.assert_not_called()

    def test_writes_json_file(self, model_client, context, tmp_path):
        """End to end with the JSON file sink."""
        path = tmp_path / "logs" / "resolved-elements.json"
        requester = HealingRequester(model_client, results_sink=JsonFileResultsSink(path))

        requester.request_heal(context)
        requester.request_heal(context)

        records = json.loads(path.read_text(encoding="utf-8"))
        assert len(records) == 2
        assert set(records[0]) == {
            "executedAt",
            "errorElementLocator",
            "resolvedElementLocator",
            "detailAIResponse",
        }
