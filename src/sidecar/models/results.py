"""Result models — execution envelopes, stored records, processor outcomes.

``ExecutionResult`` is the normalized outcome of any reader or writer run.
``DataRecord`` wraps one in the session store together with an optional
processing annotation. ``to_dict`` methods produce the camelCase shape that
hosts receive in notifications.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from sidecar.catalog.models import DataType


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class ImageData(BaseModel):
    """A captured PNG image."""

    format: str = "png"
    base64: str
    width: int
    height: int

    @property
    def data_url(self) -> str:
        """Return the image as a ``data:`` URL."""
        return f"data:image/{self.format};base64,{self.base64}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "base64": self.base64,
            "width": self.width,
            "height": self.height,
            "dataUrl": self.data_url,
        }


class ExecutionResult(BaseModel):
    """Outcome of running a reader or writer against a surface."""

    success: bool
    data: Any = None
    error: str | None = None
    timestamp: str = Field(default_factory=utc_timestamp)
    action_id: str
    action_name: str
    data_type: DataType | None = None
    scenario_id: str
    source_id: str
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase wire shape."""
        payload: dict[str, Any] = {
            "success": self.success,
            "timestamp": self.timestamp,
            "actionId": self.action_id,
            "actionName": self.action_name,
            "scenarioId": self.scenario_id,
            "sourceId": self.source_id,
            "url": self.url,
        }
        if self.success:
            payload["data"] = self.data
        else:
            payload["error"] = self.error
        if self.data_type is not None:
            payload["dataType"] = self.data_type.value
        return payload


class ProcessedAnnotation(BaseModel):
    """Output of a processor applied to a stored record."""

    processor_id: str
    processor_name: str
    output: Any = None
    timestamp: str = Field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "processorId": self.processor_id,
            "processorName": self.processor_name,
            "output": self.output,
            "timestamp": self.timestamp,
        }


class DataRecord(BaseModel):
    """A stored execution result plus its optional processing annotation."""

    id: str
    result: ExecutionResult
    processed: ProcessedAnnotation | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"id": self.id, "result": self.result.to_dict()}
        if self.processed is not None:
            payload["processed"] = self.processed.to_dict()
        return payload


class ProcessorOutcome(BaseModel):
    """Result of a processor's transform."""

    success: bool
    output: Any = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "output": self.output}
        return {"success": False, "error": self.error}
