"""Catalog — declarative sources, scenarios, readers, and writers.

Modules:

* ``models`` — ``Source``, ``Scenario``, ``Reader``, ``Writer`` data models.
* ``registry`` — ``SourceRegistry`` for hostname → source resolution.
* ``detector`` — ``ScenarioDetector`` for URL → scenario resolution.
* ``sources`` — the built-in source definitions.
"""

from sidecar.catalog.detector import ScenarioDetector, find_reader, find_writer
from sidecar.catalog.models import DataType, Reader, ReaderKind, Scenario, Source, Writer
from sidecar.catalog.registry import SourceRegistry
from sidecar.catalog.sources import build_registry, builtin_sources

__all__ = [
    "DataType",
    "Reader",
    "ReaderKind",
    "Scenario",
    "ScenarioDetector",
    "Source",
    "SourceRegistry",
    "Writer",
    "build_registry",
    "builtin_sources",
    "find_reader",
    "find_writer",
]
