"""Processor pipeline — registry and dispatcher for processors."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from sidecar.catalog.models import DataType
from sidecar.exceptions import DuplicateIdError
from sidecar.models.results import ProcessorOutcome
from sidecar.processors.base import Processor

logger = logging.getLogger(__name__)


class ProcessorPipeline:
    """Holds processors by id and runs them on record data."""

    def __init__(self, processors: Iterable[Processor] | None = None) -> None:
        self._processors: dict[str, Processor] = {}
        for processor in processors or ():
            self.register(processor)

    def register(self, processor: Processor) -> None:
        """Add *processor*.

        Raises:
            DuplicateIdError: If a processor with the same id is registered.
        """
        if processor.id in self._processors:
            raise DuplicateIdError("processor", processor.id, "pipeline")
        self._processors[processor.id] = processor

    def get(self, processor_id: str) -> Processor | None:
        return self._processors.get(processor_id)

    def all(self) -> Iterator[Processor]:
        return iter(list(self._processors.values()))

    def compatible_with(self, data_type: DataType | None) -> list[Processor]:
        """Return the processors that declare support for *data_type*."""
        return [p for p in self._processors.values() if p.accepts(data_type)]

    async def execute(self, processor_id: str, data: Any) -> ProcessorOutcome:
        """Run processor *processor_id* on a copy of *data*.

        Compatibility is the caller's concern; an unknown id yields an
        unsuccessful outcome rather than an exception.
        """
        processor = self._processors.get(processor_id)
        if processor is None:
            return ProcessorOutcome(success=False, error="Processor not found")
        logger.info("Running processor %s", processor_id)
        return await processor.execute(copy.deepcopy(data))

    def __len__(self) -> int:
        return len(self._processors)
