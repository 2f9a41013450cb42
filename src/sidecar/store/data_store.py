"""Session result store — append-only, in-memory, session-scoped.

Records are created only by ``add`` and changed only by
``update_processed``; nothing is deleted individually. Ids take the form
``record-<epoch-ms>-<counter>`` so two results added within the same
millisecond still get distinct ids.

Usage::

    store = DataStore()
    record_id = store.add(result)
    store.update_processed(record_id, "summarize", "Summarize", output)
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from collections.abc import Iterator
from typing import Any

from sidecar.models.results import DataRecord, ExecutionResult, ProcessedAnnotation

logger = logging.getLogger(__name__)


class DataStore:
    """In-memory store of execution results for the current session."""

    def __init__(self) -> None:
        self._records: dict[str, DataRecord] = {}
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def add(self, result: ExecutionResult) -> str:
        """Append *result* as a new record and return its generated id."""
        with self._lock:
            record_id = f"record-{int(time.time() * 1000)}-{next(self._counter)}"
            self._records[record_id] = DataRecord(id=record_id, result=result.model_copy(deep=True))
        logger.debug("Stored %s (%s, success=%s)", record_id, result.action_id, result.success)
        return record_id

    def get(self, record_id: str) -> DataRecord | None:
        """Return a copy of the record, or ``None`` if unknown."""
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record is not None else None

    def get_all(self) -> Iterator[DataRecord]:
        """Iterate over copies of all records in insertion order."""
        with self._lock:
            snapshot = list(self._records.values())
        return (record.model_copy(deep=True) for record in snapshot)

    def update_processed(
        self,
        record_id: str,
        processor_id: str,
        processor_name: str,
        output: Any,
    ) -> bool:
        """Attach a processor's output to a record.

        Returns:
            ``True`` if the record existed, ``False`` otherwise (store unchanged).
        """
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                return False
            record.processed = ProcessedAnnotation(
                processor_id=processor_id,
                processor_name=processor_name,
                output=output,
            )
        logger.debug("Annotated %s with %s", record_id, processor_id)
        return True

    def clear(self) -> None:
        """Remove every record and reset the id counter."""
        with self._lock:
            self._records.clear()
            self._counter = itertools.count()
        logger.info("Data store cleared")

    @property
    def count(self) -> int:
        """Return the number of stored records."""
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)
