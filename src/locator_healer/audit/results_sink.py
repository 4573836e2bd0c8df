"""Append-only storage for audit records.

Records are kept as a single JSON array. Each append rewrites the file
through a temp file in the same directory followed by an atomic rename, so
readers never see a half-written array.
"""

import json
import os
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..healing_exceptions import AuditWriteError
from ..logging import get_logger
from .audit_types import AuditRecord

logger = get_logger(__name__)

DEFAULT_RESULTS_FILE = Path("logs") / "resolved-elements.json"


class ResultsSink(ABC):
    """Destination for audit records.

    Implementations must be safe to call from several threads at once.
    """

    @abstractmethod
    def append(self, record: AuditRecord) -> None:
        """Append one record after all existing ones.

        Raises:
            AuditWriteError: If the record could not be persisted.
        """
        pass


# One lock per target file, shared by every sink instance in the process
_path_locks: dict[Path, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    with _path_locks_guard:
        lock = _path_locks.get(path)
        if lock is None:
            lock = _path_locks[path] = threading.Lock()
        return lock


class JsonFileResultsSink(ResultsSink):
    """Appends audit records to a JSON array file.

    Missing parent directories are created. If the existing file cannot be
    parsed as a JSON array it is moved aside to ``<name>.broken.<millis>``
    and a fresh array is started.

    Attributes:
        path: Target JSON file.
    """

    def __init__(self, path: Path | str = DEFAULT_RESULTS_FILE) -> None:
        """Initialize the sink.

        Args:
            path: JSON file to append to. Defaults to logs/resolved-elements.json
        """
        self.path = Path(path)

    def append(self, record: AuditRecord) -> None:
        """Append a record to the file.

        Args:
            record: Audit record to store.

        Raises:
            AuditWriteError: If the file could not be written.
        """
        with _lock_for(self.path.resolve()):
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                records = self._read_existing_or_empty()
                records.append(record.to_dict())
                self._write_atomically(records)
            except OSError as e:
                raise AuditWriteError(
                    f"Failed to save healing result to {self.path}: {e}", path=str(self.path)
                ) from e

        logger.debug("audit_record_saved", path=str(self.path), total=len(records))

    def read_records(self) -> list[dict[str, Any]]:
        """Return the persisted records (empty if the file is missing)."""
        if not self.path.exists() or self.path.stat().st_size == 0:
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, list) else []

    def _read_existing_or_empty(self) -> list[dict[str, Any]]:
        if not self.path.exists() or self.path.stat().st_size == 0:
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, list):
                return data
            reason = f"expected a JSON array, got {type(data).__name__}"
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            reason = str(e)

        backup = self.path.with_name(f"{self.path.name}.broken.{int(time.time() * 1000)}")
        try:
            self.path.replace(backup)
            logger.warning(
                "audit_file_corrupt", path=str(self.path), backup=str(backup), reason=reason
            )
        except OSError as e:
            logger.warning("audit_backup_failed", path=str(self.path), error=str(e))
        return []

    def _write_atomically(self, records: list[dict[str, Any]]) -> None:
        fd, temp_name = tempfile.mkstemp(
            prefix="resolved-element", suffix=".tmp", dir=self.path.parent
        )
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2)
            temp_path.replace(self.path)
        finally:
            temp_path.unlink(missing_ok=True)
