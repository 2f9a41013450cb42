"""Browser surface contract.

The executor never talks to a browser library directly. It drives any
object that satisfies ``BrowserSurface``: something that can evaluate a
script expression in page context, report its URL, grab the visible
viewport, and expose a DevTools debugger target.

``PlaywrightSurface`` in ``sidecar.browser.playwright_surface`` is the
production implementation; tests use ``AsyncMock`` stand-ins.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class DebuggerTarget(Protocol):
    """A DevTools protocol endpoint bound to one surface.

    Only one attach may be outstanding at a time. ``is_attached`` reports
    whether some caller (not necessarily this one) currently holds it.
    """

    def is_attached(self) -> bool:
        """Return ``True`` while a debugging session is attached."""
        ...

    async def attach(self, protocol_version: str) -> None:
        """Attach a debugging session speaking *protocol_version*."""
        ...

    async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a protocol command and return its response."""
        ...

    async def detach(self) -> None:
        """Detach the current debugging session."""
        ...


@runtime_checkable
class BrowserSurface(Protocol):
    """A live page that scripts can be executed against."""

    @property
    def url(self) -> str:
        """The URL currently loaded in the surface."""
        ...

    @property
    def debugger(self) -> DebuggerTarget:
        """The surface's DevTools debugger target."""
        ...

    async def evaluate(self, script: str) -> Any:
        """Evaluate a script expression in page context and await its value.

        The returned value must be JSON-serializable.
        """
        ...

    async def capture_viewport(self) -> bytes:
        """Capture the visible viewport as PNG bytes."""
        ...

    async def load_file(self, path: Path) -> None:
        """Load a local HTML file into the surface."""
        ...
