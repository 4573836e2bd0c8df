"""Audit record written for each resolved locator."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string with microseconds.

    Raises:
        OSError, OverflowError: If the system clock cannot be read.
    """
    return datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class AuditRecord:
    """One resolved locator, as persisted by a ResultsSink."""

    executed_at: str
    error_element_locator: str
    resolved_element_locator: str
    detail_model_response: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted JSON shape."""
        return {
            "executedAt": self.executed_at,
            "errorElementLocator": self.error_element_locator,
            "resolvedElementLocator": self.resolved_element_locator,
            "detailAIResponse": self.detail_model_response,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuditRecord":
        """Create from the persisted JSON shape."""
        return cls(
            executed_at=data["executedAt"],
            error_element_locator=data["errorElementLocator"],
            resolved_element_locator=data["resolvedElementLocator"],
            detail_model_response=data["detailAIResponse"],
        )
