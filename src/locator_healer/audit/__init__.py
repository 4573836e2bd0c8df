"""Audit trail of resolved locators.

Example:
    >>> from locator_healer.audit import JsonFileResultsSink
    >>>
    >>> sink = JsonFileResultsSink("logs/resolved-elements.json")
    >>> for record in sink.read_records():
    ...     print(record["errorElementLocator"], "->", record["resolvedElementLocator"])
"""

from .audit_types import AuditRecord, utc_timestamp
from .results_sink import DEFAULT_RESULTS_FILE, JsonFileResultsSink, ResultsSink

__all__ = [
    "AuditRecord",
    "DEFAULT_RESULTS_FILE",
    "JsonFileResultsSink",
    "ResultsSink",
    "utc_timestamp",
]
