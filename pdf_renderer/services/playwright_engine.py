"""
Playwright-backed browser engine.

Runs a single headless Chromium through Playwright and translates
Playwright failures into the service's error taxonomy.
"""

import logging
from typing import Any, Dict, List, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from ..errors import ExportError, FontLoadError, NavigationError, NavigationTimeoutError
from .engine import BrowserEngine, BrowsingContext

logger = logging.getLogger("pdf_renderer.playwright_engine")

FONTS_READY_SCRIPT = "async () => { await document.fonts.ready; return document.fonts.status; }"


class PlaywrightBrowsingContext(BrowsingContext):
    """A Playwright BrowserContext holding exactly one page."""

    def __init__(self, context: BrowserContext, page: Page):
        self._context = context
        self._page = page

    async def navigate(self, url: str, timeout_ms: int) -> Optional[int]:
        try:
            response = await self._page.goto(
                url,
                timeout=timeout_ms,
                wait_until="networkidle",
            )
        except PlaywrightTimeout as e:
            raise NavigationTimeoutError(
                f"Page load timeout after {timeout_ms}ms: {url}",
                cause=e.message,
            )
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e.message}", cause=e.message)

        return response.status if response is not None else None

    async def wait_for_fonts(self) -> str:
        try:
            return await self._page.evaluate(FONTS_READY_SCRIPT)
        except PlaywrightError as e:
            raise FontLoadError(f"Font readiness check failed: {e.message}", cause=e.message)

    async def export_pdf(self, options: Dict[str, Any]) -> bytes:
        try:
            return await self._page.pdf(**options)
        except PlaywrightError as e:
            raise ExportError(f"PDF export failed: {e.message}", cause=e.message)

    async def close(self) -> None:
        await self._context.close()


class PlaywrightEngine(BrowserEngine):
    """Chromium launched through Playwright."""

    def __init__(self, headless: bool = True, args: Optional[List[str]] = None):
        self.headless = headless
        self.args = list(args or [])
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def launch(self) -> None:
        logger.info(f"Launching Chromium (headless={self.headless}, args={self.args})")

        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.args,
            )
        except Exception:
            await self._playwright.stop()
            self._playwright = None
            raise

        logger.info(f"Chromium {self._browser.version} launched")

    async def new_context(self, viewport_width: int, viewport_height: int) -> BrowsingContext:
        if self._browser is None:
            raise RuntimeError("Browser has not been launched")

        context = await self._browser.new_context(
            viewport={"width": viewport_width, "height": viewport_height},
        )
        try:
            page = await context.new_page()
        except Exception:
            await context.close()
            raise

        return PlaywrightBrowsingContext(context, page)

    async def shutdown(self) -> None:
        try:
            if self._browser:
                await self._browser.close()
        finally:
            self._browser = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None

    @property
    def is_alive(self) -> bool:
        return self._browser is not None and self._browser.is_connected()
