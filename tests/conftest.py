"""Shared fixtures for the Sidecar unit tests."""

from __future__ import annotations

import base64
import struct
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture()
def anyio_backend() -> str:
    """Run async tests on asyncio only; the code under test is asyncio-based."""
    return "asyncio"


@pytest.fixture()
def fixtures_dir() -> Path:
    """Directory holding the HTML fixtures named by catalog actions."""
    return FIXTURES_DIR


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from sidecar.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# PNG bytes
# ---------------------------------------------------------------------------


def make_png(width: int, height: int) -> bytes:
    """Return a minimal PNG header whose IHDR chunk declares *width* x *height*."""
    from sidecar.browser.imaging import PNG_SIGNATURE

    ihdr = struct.pack(">II", width, height) + b"\x08\x06\x00\x00\x00"
    return PNG_SIGNATURE + struct.pack(">I", 13) + b"IHDR" + ihdr + b"\x00\x00\x00\x00"


@pytest.fixture()
def png_factory() -> Callable[[int, int], bytes]:
    """Return the ``make_png`` helper."""
    return make_png


# ---------------------------------------------------------------------------
# Fake browser surface
# ---------------------------------------------------------------------------


class FakeDebugger:
    """In-memory ``DebuggerTarget`` that answers the capture commands.

    ``fail_on`` names a protocol method that should raise when sent.
    """

    def __init__(
        self,
        *,
        attached: bool = False,
        content_size: tuple[float, float] = (800, 2000),
        png: bytes | None = None,
        fail_on: str | None = None,
    ) -> None:
        self.attached = attached
        self.content_size = content_size
        self.png = png if png is not None else make_png(800, 2000)
        self.fail_on = fail_on
        self.attach_calls = 0
        self.detach_calls = 0
        self.protocol_version: str | None = None
        self.commands: list[tuple[str, dict[str, Any] | None]] = []

    def is_attached(self) -> bool:
        return self.attached

    async def attach(self, protocol_version: str) -> None:
        self.attach_calls += 1
        self.attached = True
        self.protocol_version = protocol_version

    async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        self.commands.append((method, params))
        if method == self.fail_on:
            raise RuntimeError(f"{method} failed")
        if method == "Page.getLayoutMetrics":
            width, height = self.content_size
            return {"contentSize": {"x": 0, "y": 0, "width": width, "height": height}}
        if method == "Page.captureScreenshot":
            return {"data": base64.b64encode(self.png).decode("ascii")}
        return {}

    async def detach(self) -> None:
        self.detach_calls += 1
        self.attached = False


class FakeSurface:
    """``BrowserSurface`` stand-in with ``AsyncMock`` script evaluation."""

    def __init__(
        self,
        url: str = "https://example.com/inbox",
        *,
        debugger: FakeDebugger | None = None,
        viewport_png: bytes | None = None,
    ) -> None:
        self.url = url
        self.debugger = debugger or FakeDebugger()
        self.evaluate = AsyncMock(return_value=None)
        self.capture_viewport = AsyncMock(
            return_value=viewport_png if viewport_png is not None else make_png(1200, 800)
        )
        self.load_file = AsyncMock(return_value=None)


@pytest.fixture()
def make_surface() -> Callable[..., FakeSurface]:
    """Return a factory for ``FakeSurface`` objects."""
    return FakeSurface


@pytest.fixture()
def make_debugger() -> Callable[..., FakeDebugger]:
    """Return a factory for ``FakeDebugger`` objects."""
    return FakeDebugger


@pytest.fixture()
def fake_surface() -> FakeSurface:
    """A surface on ``https://example.com/inbox`` with a detached debugger."""
    return FakeSurface()


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that require a real browser")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")
