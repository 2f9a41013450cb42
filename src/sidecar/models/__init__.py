"""Sidecar result models."""

from sidecar.models.results import (
    DataRecord,
    ExecutionResult,
    ImageData,
    ProcessedAnnotation,
    ProcessorOutcome,
    utc_timestamp,
)

__all__ = [
    "DataRecord",
    "ExecutionResult",
    "ImageData",
    "ProcessedAnnotation",
    "ProcessorOutcome",
    "utc_timestamp",
]
