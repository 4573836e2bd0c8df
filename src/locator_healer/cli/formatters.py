"""Output formatters for CLI commands.

Provides text (human readable) and JSON (machine readable) output for
decoded model answers and audit records.
"""

import json
from typing import Any

from ..healing.codec import DecodeResult


def format_decode_result(result: DecodeResult, format_type: str) -> str:
    """Format a decode result.

    Args:
        result: Decoded model answer
        format_type: Output format ("text" or "json")

    Returns:
        Formatted string output

    Raises:
        ValueError: If format_type is not recognized
    """
    if format_type == "json":
        return json.dumps(_decode_result_to_dict(result), indent=2)
    elif format_type == "text":
        return _decode_result_to_text(result)
    else:
        raise ValueError(f"Unknown format type: {format_type}")


def _decode_result_to_dict(result: DecodeResult) -> dict[str, Any]:
    output: dict[str, Any] = {"status": result.status.value}
    if result.descriptor is not None:
        strategy, value = result.descriptor.as_tuple()
        output["locator"] = {"strategy": strategy, "value": value}
    if result.suggestion is not None:
        output["reason"] = result.suggestion.reason
        output["suggestion"] = result.suggestion.improvement_suggestion
    if result.error is not None:
        output["error"] = {"type": type(result.error).__name__, "message": result.error.message}
    return output


def _decode_result_to_text(result: DecodeResult) -> str:
    if result.descriptor is not None:
        lines = [f"Resolved locator: {result.descriptor}"]
    elif result.error is not None:
        return f"Decode failed ({type(result.error).__name__}): {result.error.message}"
    else:
        lines = ["No suggestion: the model did not propose a locator"]

    if result.suggestion is not None:
        if result.suggestion.reason:
            lines.append(f"Reason: {result.suggestion.reason}")
        if result.suggestion.improvement_suggestion:
            lines.append(f"Suggestion: {result.suggestion.improvement_suggestion}")
    return "\n".join(lines)


def format_audit_records(records: list[dict[str, Any]], format_type: str) -> str:
    """Format persisted audit records.

    Args:
        records: Records as stored in the results file
        format_type: Output format ("text" or "json")

    Returns:
        Formatted string output

    Raises:
        ValueError: If format_type is not recognized
    """
    if format_type == "json":
        return json.dumps(records, indent=2)
    elif format_type != "text":
        raise ValueError(f"Unknown format type: {format_type}")

    if not records:
        return "No healed locators recorded"

    lines = [f"{len(records)} healed locator(s):"]
    for record in records:
        lines.append(
            f"  {record.get('executedAt', '?')}  "
            f"{record.get('errorElementLocator', '?')} -> "
            f"{record.get('resolvedElementLocator', '?')}"
        )
    return "\n".join(lines)
