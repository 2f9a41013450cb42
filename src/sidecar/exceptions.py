"""Sidecar-specific exception hierarchy.

Public operations report failures as ``{"success": False, "error": ...}``
results. These exceptions are raised for programmer errors at construction
time, or internally before being converted to such a result.
"""

from __future__ import annotations


class SidecarError(Exception):
    """Base exception for all Sidecar-specific errors."""


class DuplicateIdError(SidecarError):
    """Raised when an id is registered twice inside the same scope.

    Attributes:
        kind: What was being registered (``"reader"``, ``"processor"``, …).
        item_id: The offending identifier.
        scope: The enclosing scope (scenario id, source id, or pipeline).
    """

    def __init__(self, kind: str, item_id: str, scope: str = "") -> None:
        self.kind = kind
        self.item_id = item_id
        self.scope = scope
        where = f" in {scope}" if scope else ""
        super().__init__(f"Duplicate {kind} id {item_id!r}{where}")


class SurfaceUnavailableError(SidecarError):
    """Raised when a browser surface is closed or was never attached."""


class CaptureError(SidecarError):
    """Raised when both the full-page and the viewport capture fail."""
