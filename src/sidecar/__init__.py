"""Sidecar — scripted readers and writers for a live browser session."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("sidecar")
except Exception:
    __version__ = "0.0.0"
