"""Processor base class.

A processor is a post-hoc transform over the data of a stored record. It
declares which ``DataType`` values it accepts so hosts can filter the menu;
the pipeline does not enforce that filter at run time.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, ClassVar

from sidecar.catalog.models import DataType
from sidecar.models.results import ProcessorOutcome

logger = logging.getLogger(__name__)


class Processor(ABC):
    """Base class for processors.

    Subclasses set the class attributes and implement ``transform``, raising
    on failure. ``execute`` turns the outcome into a ``ProcessorOutcome``.
    """

    id: ClassVar[str]
    name: ClassVar[str]
    description: ClassVar[str] = ""
    compatible_data_types: ClassVar[frozenset[DataType]] = frozenset()

    def accepts(self, data_type: DataType | None) -> bool:
        """Return ``True`` if the processor declares support for *data_type*."""
        return data_type is not None and data_type in self.compatible_data_types

    @abstractmethod
    async def transform(self, data: Any) -> Any:
        """Return the processed output for *data*. Must not mutate *data*."""

    async def execute(self, data: Any) -> ProcessorOutcome:
        """Run ``transform`` and capture failures as an unsuccessful outcome."""
        try:
            output = await self.transform(data)
        except Exception as exc:
            logger.warning("Processor %s failed: %s", self.id, exc)
            return ProcessorOutcome(success=False, error=str(exc) or type(exc).__name__)
        return ProcessorOutcome(success=True, output=output)

    def describe(self) -> dict[str, Any]:
        """Return the host-facing description of this processor."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "compatibleDataTypes": sorted(t.value for t in self.compatible_data_types),
        }


def iso_millis(now: datetime | None = None) -> str:
    """Return a UTC timestamp like ``2026-01-31T09:15:02.345Z``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S") + f".{now.microsecond // 1000:03d}Z"
