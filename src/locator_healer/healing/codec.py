"""Decoding of model answers into typed locators.

The model is asked to answer with a single JSON object, optionally wrapped
in a fenced code block:

    ```json
    {
      "failedElement": "id=login_old",
      "newValidElementType": "accessibility id",
      "newValidElement": "login",
      "reason": "...",
      "suggestion": "..."
    }
    ```

Decoding is pure: no I/O and no shared state, so it is safe to call from
any thread.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..healing_exceptions import DecodeError, LocatorDecodeError, SchemaError
from ..locators import LocatorDescriptor, resolve_strategy
from .healing_types import HealingSuggestion

TYPE_KEY = "newValidElementType"
VALUE_KEY = "newValidElement"
REQUIRED_KEYS = (TYPE_KEY, VALUE_KEY)

_FENCED_BLOCK = re.compile(r"```[\w-]*[ \t]*\n?(.*?)```", re.DOTALL)
_OPENING_FENCE = re.compile(r"^```[\w-]*")
_CLOSING_FENCE = re.compile(r"\s*```$")


class DecodeStatus(Enum):
    """Outcome kind of a decode."""

    RESOLVED = "resolved"
    NO_SUGGESTION = "no_suggestion"
    FAILED = "failed"


@dataclass(frozen=True)
class DecodeResult:
    """Result of decoding a model answer.

    Exactly one of these holds:
    - RESOLVED: ``descriptor`` and ``suggestion`` are set.
    - NO_SUGGESTION: ``suggestion`` is set, without a locator.
    - FAILED: ``error`` is set.
    """

    status: DecodeStatus
    descriptor: LocatorDescriptor | None = None
    suggestion: HealingSuggestion | None = None
    error: LocatorDecodeError | None = None

    @property
    def resolved(self) -> bool:
        return self.status is DecodeStatus.RESOLVED


def extract_payload(text: str) -> str:
    """Strip a surrounding code fence from a model answer.

    Args:
        text: Raw model text.

    Returns:
        The JSON payload text, trimmed.
    """
    trimmed = text.strip()
    if len(trimmed) > 3 and trimmed.startswith("```") and trimmed.endswith("```"):
        # Fence markers may share a line with the payload
        body = _OPENING_FENCE.sub("", trimmed, count=1)
        return _CLOSING_FENCE.sub("", body).strip()

    match = _FENCED_BLOCK.search(trimmed)
    if match:
        return match.group(1).strip()
    if trimmed.startswith("```"):
        return _OPENING_FENCE.sub("", trimmed, count=1).strip()
    return trimmed


class LocatorCodec:
    """Turns raw model text into a LocatorDescriptor."""

    def decode(self, raw_text: str | None) -> DecodeResult:
        """Decode a model answer.

        Args:
            raw_text: Raw text returned by the model.

        Returns:
            DecodeResult. Malformed input never raises; it is reported as a
            FAILED result carrying a DecodeError, SchemaError or
            UnsupportedStrategy.
        """
        try:
            payload = self._parse_payload(raw_text or "")
            suggestion = self._to_suggestion(payload)
            if not suggestion.has_locator:
                return DecodeResult(DecodeStatus.NO_SUGGESTION, suggestion=suggestion)

            assert suggestion.suggested_type is not None
            assert suggestion.suggested_value is not None
            descriptor = LocatorDescriptor(
                resolve_strategy(suggestion.suggested_type),
                suggestion.suggested_value,
            )
            return DecodeResult(DecodeStatus.RESOLVED, descriptor=descriptor, suggestion=suggestion)
        except LocatorDecodeError as e:
            return DecodeResult(DecodeStatus.FAILED, error=e)

    def _parse_payload(self, raw_text: str) -> dict[str, Any]:
        body = extract_payload(raw_text)
        if not body:
            raise DecodeError("Empty model response")

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Model response is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise SchemaError(
                f"Model response must be a JSON object, got {type(payload).__name__}"
            )

        missing = [key for key in REQUIRED_KEYS if key not in payload]
        if missing:
            raise SchemaError(
                f"Model response is missing required keys: {', '.join(missing)}",
                missing_keys=missing,
            )
        return payload

    def _to_suggestion(self, payload: dict[str, Any]) -> HealingSuggestion:
        locator_type = payload[TYPE_KEY]
        locator_value = payload[VALUE_KEY]
        for key, value in ((TYPE_KEY, locator_type), (VALUE_KEY, locator_value)):
            if value is not None and not isinstance(value, str):
                raise SchemaError(f"{key} must be a string or null, got {type(value).__name__}")

        # Blank counts as absent; a lone half of a locator is no locator
        if not locator_type or not locator_type.strip() or not locator_value or not locator_value.strip():
            locator_type = None
            locator_value = None
        else:
            locator_type = locator_type.strip()

        improvement = payload.get("suggestion", payload.get("improvementSuggestion"))
        return HealingSuggestion(
            failed_element=_as_text(payload.get("failedElement")),
            suggested_type=locator_type,
            suggested_value=locator_value,
            reason=_as_text(payload.get("reason")),
            improvement_suggestion=_as_text(improvement),
            payload=payload,
        )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value)


_default_codec = LocatorCodec()


def decode(raw_text: str | None) -> DecodeResult:
    """Decode with a shared stateless codec."""
    return _default_codec.decode(raw_text)
