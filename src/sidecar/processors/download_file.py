"""Download File processor — save a captured screenshot as a PNG file."""

from __future__ import annotations

import binascii
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from sidecar.browser.imaging import decode_base64_png
from sidecar.catalog.models import DataType
from sidecar.processors.base import Processor, iso_millis

logger = logging.getLogger(__name__)


def screenshot_filename(now: datetime | None = None) -> str:
    """Return ``screenshot-<timestamp>.png`` with ``:`` replaced by ``-``, to the second."""
    return f"screenshot-{iso_millis(now).replace(':', '-').split('.')[0]}.png"


class DownloadFileProcessor(Processor):
    """Write image data to ``downloads_dir``.

    Args:
        downloads_dir: Target directory; created on demand.
    """

    id = "download-file"
    name = "Download File"
    description = "Downloads the image to your Downloads folder"
    compatible_data_types = frozenset({DataType.IMAGE})

    def __init__(self, downloads_dir: Path | str) -> None:
        self._downloads_dir = Path(downloads_dir)

    async def transform(self, data: Any) -> dict[str, Any]:
        if not isinstance(data, dict) or not data.get("base64"):
            raise ValueError("Invalid image data: missing base64 content")
        try:
            png = decode_base64_png(data["base64"])
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Invalid image data: {exc}") from exc

        self._downloads_dir.mkdir(parents=True, exist_ok=True)
        file_name = screenshot_filename()
        file_path = self._downloads_dir / file_name
        file_path.write_bytes(png)
        logger.info("Saved screenshot to %s", file_path)
        return {
            "success": True,
            "message": "Image downloaded successfully",
            "filePath": str(file_path),
            "fileName": file_name,
            "size": file_path.stat().st_size,
            "width": data.get("width"),
            "height": data.get("height"),
        }
