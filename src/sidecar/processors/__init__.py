"""Processors — post-hoc transforms over stored results.

Modules:

* ``base`` — the ``Processor`` base class.
* ``pipeline`` — ``ProcessorPipeline`` registry and dispatcher.
* ``summarize`` / ``export_json`` / ``download_file`` — built-in processors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sidecar.processors.base import Processor
from sidecar.processors.download_file import DownloadFileProcessor
from sidecar.processors.export_json import ExportJsonProcessor
from sidecar.processors.pipeline import ProcessorPipeline
from sidecar.processors.summarize import SummarizeProcessor

if TYPE_CHECKING:
    from sidecar.settings.config import Settings


def build_default_pipeline(settings: "Settings") -> ProcessorPipeline:
    """Return a pipeline with the built-in processors, configured from *settings*."""
    return ProcessorPipeline(
        [
            SummarizeProcessor(),
            ExportJsonProcessor(settings.export.exports_dir),
            DownloadFileProcessor(settings.export.downloads_dir),
        ]
    )


__all__ = [
    "DownloadFileProcessor",
    "ExportJsonProcessor",
    "Processor",
    "ProcessorPipeline",
    "SummarizeProcessor",
    "build_default_pipeline",
]
