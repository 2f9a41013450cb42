"""PNG helpers for captured screenshots.

The DevTools ``Page.captureScreenshot`` response carries only the encoded
bytes, so dimensions are read straight from the IHDR chunk.
"""

from __future__ import annotations

import base64
import struct

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Signature (8) + chunk length (4) + "IHDR" (4) puts width at 16, height at 20.
_IHDR_WIDTH_OFFSET = 16
_IHDR_MIN_LENGTH = 24


def png_dimensions(data: bytes) -> tuple[int, int]:
    """Return ``(width, height)`` decoded from PNG bytes.

    Args:
        data: Raw PNG bytes.

    Returns:
        The image width and height in pixels.

    Raises:
        ValueError: If the buffer is too short to contain an IHDR chunk.
    """
    if len(data) < _IHDR_MIN_LENGTH:
        raise ValueError(f"PNG buffer too short ({len(data)} bytes) to read dimensions")
    width, height = struct.unpack_from(">II", data, _IHDR_WIDTH_OFFSET)
    return width, height


def is_png(data: bytes) -> bool:
    """Return ``True`` if *data* starts with the PNG signature."""
    return data.startswith(PNG_SIGNATURE)


def decode_base64_png(b64: str) -> bytes:
    """Decode base64 text to bytes, validating the alphabet."""
    return base64.b64decode(b64, validate=True)
