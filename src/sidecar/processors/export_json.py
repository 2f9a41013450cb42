"""Export JSON processor — write extracted data to a pretty-printed file."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from sidecar.catalog.models import DataType
from sidecar.processors.base import Processor, iso_millis

logger = logging.getLogger(__name__)


def export_filename(now: datetime | None = None) -> str:
    """Return ``export-<timestamp>.json`` with ``:`` and ``.`` replaced by ``-``."""
    return f"export-{iso_millis(now).replace(':', '-').replace('.', '-')}.json"


class ExportJsonProcessor(Processor):
    """Write the record data as JSON under ``exports_dir``.

    Args:
        exports_dir: Directory for export files; created on demand.
    """

    id = "export-json"
    name = "Export JSON"
    description = "Exports the extracted data as a formatted JSON file"
    compatible_data_types = frozenset({DataType.TEXT, DataType.JSON})

    def __init__(self, exports_dir: Path | str) -> None:
        self._exports_dir = Path(exports_dir)

    async def transform(self, data: Any) -> dict[str, Any]:
        self._exports_dir.mkdir(parents=True, exist_ok=True)
        filename = export_filename()
        filepath = self._exports_dir / filename
        filepath.write_text(json.dumps(data, indent=2, ensure_ascii=False, default=str), encoding="utf-8")
        logger.info("Exported record data to %s", filepath)
        return {
            "success": True,
            "message": "Data exported successfully",
            "filepath": str(filepath),
            "filename": filename,
            "size": filepath.stat().st_size,
        }
