"""Action executor — run readers and writers against a live browser surface.

Both entry points return an ``ExecutionResult`` and never raise: every
failure (script error, protocol error, closed surface) is converted to
``success=False`` with the standard envelope fields filled in.

Screenshot readers take a dedicated capture path:

1. Scroll to the top and let the page settle.
2. Lease the surface's DevTools debugger (attaching only if nobody else holds
   it) and ask for the full content size via ``Page.getLayoutMetrics``.
3. ``Page.captureScreenshot`` clipped to that size with
   ``captureBeyondViewport`` so the whole page is rendered.
4. On any failure in 2–3, release the lease and fall back to a plain
   viewport capture.
5. Read width/height from the PNG bytes themselves.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sidecar.browser.imaging import png_dimensions
from sidecar.browser.surface import BrowserSurface, DebuggerTarget
from sidecar.catalog.models import Reader, ReaderKind, Writer
from sidecar.exceptions import CaptureError
from sidecar.models.results import ExecutionResult, ImageData

if TYPE_CHECKING:
    from sidecar.settings.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_PROTOCOL_VERSION = "1.3"
DEFAULT_SCROLL_SETTLE_SEC = 0.3

# Markers a reader script may return to request a screenshot instead of data.
SCREENSHOT_SENTINEL_KEYS = ("screenshot", "__screenshot__")

INPUT_DATA_NAME = "__INPUT_DATA__"


def is_screenshot_sentinel(value: Any) -> bool:
    """Return ``True`` if a script result asks for a screenshot capture."""
    return isinstance(value, dict) and any(value.get(key) is True for key in SCREENSHOT_SENTINEL_KEYS)


def serialize_input(input_data: Any) -> str:
    """Serialize writer input as a JS literal that is safe to splice into a script.

    ``json.dumps`` already escapes quotes and non-ASCII characters (including
    U+2028/U+2029). Backticks and ``</`` are escaped as well so the literal
    survives template-literal and ``<script>`` embedding.
    """
    literal = json.dumps(input_data)
    return literal.replace("`", "\\u0060").replace("</", "<\\/")


def build_writer_script(script: str, input_data: Any) -> str:
    """Wrap *script* so it can read *input_data* as ``__INPUT_DATA__``.

    The script runs through a direct ``eval`` inside the wrapper's closure,
    so both a single expression (typically an async IIFE) and a run of
    statements work. The completion value of the script is awaited and
    returned.
    """
    body = script.strip()
    return (
        "(async () => {\n"
        f"  const {INPUT_DATA_NAME} = {serialize_input(input_data)};\n"
        f"  return await eval({serialize_input(body)});\n"
        "})()"
    )


# ---------------------------------------------------------------------------
# Debugger lease
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DebuggerLease:
    """A debugger session held for the duration of one capture.

    ``owned`` is ``True`` only when this lease performed the attach and is
    therefore responsible for detaching.
    """

    target: DebuggerTarget
    owned: bool

    async def send(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        return await self.target.send_command(method, params)


@asynccontextmanager
async def debugger_session(
    target: DebuggerTarget,
    protocol_version: str = DEFAULT_PROTOCOL_VERSION,
) -> AsyncIterator[DebuggerLease]:
    """Acquire *target*, attaching if needed, and release it on every exit path.

    A session already attached by another caller is used as-is and left
    attached. A failed detach is logged and never masks the body's outcome.
    """
    owned = False
    if not target.is_attached():
        await target.attach(protocol_version)
        owned = True
    try:
        yield DebuggerLease(target=target, owned=owned)
    finally:
        if owned:
            try:
                await target.detach()
            except Exception as exc:
                logger.warning("Debugger detach failed (ignored): %s", exc)


# ---------------------------------------------------------------------------
# Executor
# ---------------------------------------------------------------------------


class ActionExecutor:
    """Executes catalog readers and writers against browser surfaces.

    Args:
        protocol_version: DevTools protocol version requested on attach.
        scroll_settle_sec: Pause after scrolling to the top before capturing.
    """

    def __init__(
        self,
        protocol_version: str = DEFAULT_PROTOCOL_VERSION,
        scroll_settle_sec: float = DEFAULT_SCROLL_SETTLE_SEC,
    ) -> None:
        self._protocol_version = protocol_version
        self._scroll_settle_sec = scroll_settle_sec

    @classmethod
    def from_settings(cls, settings: "Settings") -> "ActionExecutor":
        return cls(
            protocol_version=settings.capture.protocol_version,
            scroll_settle_sec=settings.capture.scroll_settle_sec,
        )

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def execute_reader(
        self,
        surface: BrowserSurface,
        reader: Reader,
        source_id: str,
        scenario_id: str,
    ) -> ExecutionResult:
        """Run *reader* on *surface* and wrap the outcome."""
        url = ""
        try:
            url = surface.url
            if reader.kind == ReaderKind.SCREENSHOT_CAPTURE:
                data: Any = (await self.capture_full_page(surface)).to_dict()
            else:
                data = await surface.evaluate(reader.script)
                if is_screenshot_sentinel(data):
                    data = (await self.capture_full_page(surface)).to_dict()

            logger.info("Reader %s/%s/%s succeeded on %s", source_id, scenario_id, reader.id, url)
            return ExecutionResult(
                success=True,
                data=data,
                action_id=reader.id,
                action_name=reader.name,
                data_type=reader.data_type,
                scenario_id=scenario_id,
                source_id=source_id,
                url=url,
            )
        except Exception as exc:
            logger.warning("Reader %s failed on %s: %s", reader.id, url, exc)
            return ExecutionResult(
                success=False,
                error=_error_message(exc),
                action_id=reader.id,
                action_name=reader.name,
                data_type=reader.data_type,
                scenario_id=scenario_id,
                source_id=source_id,
                url=current_url(surface, url),
            )

    async def execute_writer(
        self,
        surface: BrowserSurface,
        writer: Writer,
        source_id: str,
        scenario_id: str,
        input_data: Any = None,
    ) -> ExecutionResult:
        """Run *writer* on *surface*, injecting *input_data* when given."""
        url = ""
        try:
            url = surface.url
            script = writer.script
            if input_data is not None:
                script = build_writer_script(writer.script, input_data)
            data = await surface.evaluate(script)

            logger.info("Writer %s/%s/%s succeeded on %s", source_id, scenario_id, writer.id, url)
            return ExecutionResult(
                success=True,
                data=data,
                action_id=writer.id,
                action_name=writer.name,
                scenario_id=scenario_id,
                source_id=source_id,
                url=url,
            )
        except Exception as exc:
            logger.warning("Writer %s failed on %s: %s", writer.id, url, exc)
            return ExecutionResult(
                success=False,
                error=_error_message(exc),
                action_id=writer.id,
                action_name=writer.name,
                scenario_id=scenario_id,
                source_id=source_id,
                url=current_url(surface, url),
            )

    async def test_script(self, surface: BrowserSurface, script: str, fixture_path: Path) -> Any:
        """Load a local HTML fixture into *surface* and evaluate *script* on it.

        Unlike the entry points this propagates errors, since it is an
        authoring aid rather than an operator action.
        """
        await surface.load_file(fixture_path)
        return await surface.evaluate(script)

    # ------------------------------------------------------------------
    # Screenshot capture
    # ------------------------------------------------------------------

    async def capture_full_page(self, surface: BrowserSurface) -> ImageData:
        """Capture the whole page, falling back to the visible viewport.

        Raises:
            CaptureError: If the viewport fallback fails as well.
        """
        await surface.evaluate("window.scrollTo(0, 0)")
        await asyncio.sleep(self._scroll_settle_sec)

        try:
            png = await self._capture_via_debugger(surface.debugger)
        except Exception as exc:
            logger.warning("Full-page capture failed, falling back to viewport: %s", exc)
            try:
                png = await surface.capture_viewport()
            except Exception as fallback_exc:
                raise CaptureError(f"Screenshot capture failed: {fallback_exc}") from fallback_exc

        width, height = png_dimensions(png)
        return ImageData(
            base64=base64.b64encode(png).decode("ascii"),
            width=width,
            height=height,
        )

    async def _capture_via_debugger(self, target: DebuggerTarget) -> bytes:
        async with debugger_session(target, self._protocol_version) as lease:
            metrics = await lease.send("Page.getLayoutMetrics")
            content = metrics["contentSize"]
            width = math.ceil(content["width"])
            height = math.ceil(content["height"])
            logger.debug("Capturing %dx%d (session owned=%s)", width, height, lease.owned)

            shot = await lease.send(
                "Page.captureScreenshot",
                {
                    "format": "png",
                    "captureBeyondViewport": True,
                    "clip": {"x": 0, "y": 0, "width": width, "height": height, "scale": 1},
                },
            )
            return base64.b64decode(shot["data"])


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def current_url(surface: BrowserSurface, fallback: str = "") -> str:
    """Return the surface URL, or *fallback* if the surface cannot report one."""
    try:
        return surface.url
    except Exception:
        return fallback
