"""Browser layer — surface contract, Playwright adapter, and action executor.

Modules:

* ``surface`` — ``BrowserSurface`` / ``DebuggerTarget`` protocols.
* ``playwright_surface`` — ``PlaywrightSurface`` and ``launch_surface``.
* ``executor`` — ``ActionExecutor`` with the full-page capture path.
* ``imaging`` — PNG dimension decoding.
"""

from sidecar.browser.executor import ActionExecutor, build_writer_script, debugger_session
from sidecar.browser.imaging import png_dimensions
from sidecar.browser.surface import BrowserSurface, DebuggerTarget

__all__ = [
    "ActionExecutor",
    "BrowserSurface",
    "DebuggerTarget",
    "build_writer_script",
    "debugger_session",
    "png_dimensions",
]
