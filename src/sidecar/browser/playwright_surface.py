"""Playwright-backed browser surface.

Wraps an async Playwright ``Page`` so the executor can drive it, and
provides ``launch_surface`` for hosts (the CLI) that need a browser of
their own. The DevTools debugger is a CDP session opened from the page's
context, which requires Chromium.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sidecar.exceptions import SurfaceUnavailableError

if TYPE_CHECKING:
    from playwright.async_api import CDPSession, Page

    from sidecar.settings.config import BrowserSettings

logger = logging.getLogger(__name__)


class PlaywrightDebugger:
    """``DebuggerTarget`` over a Playwright CDP session."""

    def __init__(self, page: "Page") -> None:
        self._page = page
        self._session: CDPSession | None = None
        self.protocol_version: str = ""

    def is_attached(self) -> bool:
        return self._session is not None

    async def attach(self, protocol_version: str) -> None:
        if self._session is not None:
            raise RuntimeError("Debugger is already attached")
        # Playwright negotiates the wire version itself; keep the requested one for diagnostics.
        self._session = await self._page.context.new_cdp_session(self._page)
        self.protocol_version = protocol_version
        logger.debug("CDP session attached (protocol %s)", protocol_version)

    async def send_command(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        if self._session is None:
            raise SurfaceUnavailableError("Debugger is not attached")
        return await self._session.send(method, params or {})

    async def detach(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            await session.detach()
            logger.debug("CDP session detached")


class PlaywrightSurface:
    """``BrowserSurface`` over an async Playwright page.

    Args:
        page: The Playwright page to drive.
    """

    def __init__(self, page: "Page") -> None:
        self._page = page
        self._debugger = PlaywrightDebugger(page)

    @property
    def page(self) -> "Page":
        return self._page

    @property
    def url(self) -> str:
        if self._page.is_closed():
            raise SurfaceUnavailableError("Page is closed")
        return self._page.url

    @property
    def debugger(self) -> PlaywrightDebugger:
        return self._debugger

    async def evaluate(self, script: str) -> Any:
        """Evaluate *script* as an expression; promises are awaited."""
        return await self._page.evaluate(script)

    async def capture_viewport(self) -> bytes:
        return await self._page.screenshot(type="png")

    async def load_file(self, path: Path) -> None:
        await self._page.goto(Path(path).resolve().as_uri())

    async def navigate(self, url: str, timeout_ms: int = 30_000) -> None:
        """Load *url* and wait for the DOM to be ready."""
        await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        logger.info("Navigated to: %s", url)

    async def title(self) -> str:
        return await self._page.title()


@asynccontextmanager
async def launch_surface(browser_settings: "BrowserSettings") -> AsyncIterator[PlaywrightSurface]:
    """Launch Chromium and yield a surface over a fresh page.

    Requires ``playwright install chromium`` to have been run at least once.
    """
    from playwright.async_api import async_playwright

    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=browser_settings.headless)
        context = await browser.new_context(
            viewport={
                "width": browser_settings.viewport_width,
                "height": browser_settings.viewport_height,
            },
        )
        page = await context.new_page()
        page.set_default_timeout(browser_settings.timeout_ms)
        logger.info("Browser started (headless=%s)", browser_settings.headless)
        try:
            yield PlaywrightSurface(page)
        finally:
            await context.close()
            await browser.close()
            logger.info("Browser stopped")
