"""
Browser engine and per-request render sessions (Playwright, Chromium).

One Chromium instance is launched per process and shared. Each request gets
its own browser context, which isolates cookies, storage and scripts, and
that context is always closed when the request finishes.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pagefit.shared.errors import LoadTimeoutError, RenderingEngineError
from pagefit.shared.logging import get_logger

from .models import ContentBox

logger = get_logger(__name__)

# Viewport the PNG context starts with; resized to the fitted size before capture.
DEFAULT_IMAGE_VIEWPORT = {"width": 1280, "height": 800}

MEASURE_CONTENT_JS = """
() => {
    const b = document.body || {};
    const h = document.documentElement;
    const width = Math.max(
        b.scrollWidth || 0, b.offsetWidth || 0,
        h.clientWidth, h.scrollWidth, h.offsetWidth
    );
    const height = Math.max(
        b.scrollHeight || 0, b.offsetHeight || 0,
        h.clientHeight, h.scrollHeight, h.offsetHeight
    );
    return { width, height };
}
"""

Launcher = Callable[[], Awaitable[Browser]]


class SessionState(str, Enum):
    IDLE = "idle"
    ACQUIRED = "acquired"
    LOADED = "loaded"
    MEASURED = "measured"
    EMITTED = "emitted"
    CLOSED = "closed"


# =============================================================================
# SESSION
# =============================================================================

class RenderSession:
    """A single isolated browser context and page, owned by one request."""

    def __init__(
        self,
        context: BrowserContext,
        page: Page,
        load_timeout_ms: int = 60_000,
        settle_delay_ms: int = 100,
    ):
        self.context = context
        self.page = page
        self.load_timeout_ms = load_timeout_ms
        self.settle_delay_ms = settle_delay_ms
        self.state = SessionState.ACQUIRED

    async def load(self, html: str) -> None:
        """Load markup and wait for the network to go idle, then settle."""
        try:
            await self.page.set_content(
                html, wait_until="networkidle", timeout=self.load_timeout_ms
            )
        except PlaywrightTimeoutError as e:
            raise LoadTimeoutError(self.load_timeout_ms) from e
        except PlaywrightError as e:
            raise RenderingEngineError(f"Failed to load content: {e}") from e

        # Script-driven layout may still be reflowing after networkidle.
        if self.settle_delay_ms > 0:
            await asyncio.sleep(self.settle_delay_ms / 1000)
        self.state = SessionState.LOADED

    async def measure(self) -> ContentBox:
        """Largest of the scroll/offset/client extents along each axis."""
        try:
            size = await self.page.evaluate(MEASURE_CONTENT_JS)
        except PlaywrightError as e:
            raise RenderingEngineError(f"Failed to measure content: {e}") from e

        box = ContentBox(width=float(size["width"]), height=float(size["height"]))
        self.state = SessionState.MEASURED
        return box

    async def emit_pdf(
        self,
        paper_format: str,
        landscape: bool,
        margin: str,
        scale: float,
    ) -> bytes:
        try:
            data = await self.page.pdf(
                print_background=True,
                format=paper_format,
                landscape=landscape,
                margin={"top": margin, "right": margin, "bottom": margin, "left": margin},
                scale=scale,
            )
        except PlaywrightError as e:
            raise RenderingEngineError(f"PDF generation failed: {e}") from e
        return self._emitted(data)

    async def emit_png(self, width: int, height: int, full_page: bool) -> bytes:
        try:
            await self.page.set_viewport_size({"width": width, "height": height})
        except PlaywrightError as e:
            logger.warning(
                f"Viewport resize to {width}x{height} rejected, capturing at current viewport: {e}"
            )

        try:
            data = await self.page.screenshot(type="png", full_page=full_page)
        except PlaywrightError as e:
            raise RenderingEngineError(f"Screenshot failed: {e}") from e
        return self._emitted(data)

    def _emitted(self, data: bytes | None) -> bytes:
        if not data:
            raise RenderingEngineError("Browser produced no output")
        self.state = SessionState.EMITTED
        return data

    async def close(self) -> None:
        """Close page and context. Failures are logged, never raised."""
        if self.state == SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED

        for name, resource in (("page", self.page), ("context", self.context)):
            try:
                await resource.close()
            except Exception:
                logger.exception(f"Failed to close render {name}")


# =============================================================================
# ENGINE
# =============================================================================

class BrowserEngine:
    """
    Owner of the shared Chromium instance.

    ``start`` is single-flight: concurrent callers during the first launch
    all wait on the same lock and reuse the one browser it produced.
    """

    def __init__(
        self,
        launch_args: list[str] | None = None,
        load_timeout_ms: int = 60_000,
        settle_delay_ms: int = 100,
        launcher: Launcher | None = None,
    ):
        self.launch_args = list(launch_args or [])
        self.load_timeout_ms = load_timeout_ms
        self.settle_delay_ms = settle_delay_ms
        self._launcher = launcher or self._launch_chromium
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()
        self.launch_count = 0

    @property
    def started(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def _launch_chromium(self) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(headless=True, args=self.launch_args)

    async def start(self) -> Browser:
        """Return the shared browser, launching (or relaunching) it if needed."""
        if self.started:
            return self._browser

        async with self._lock:
            if self.started:
                return self._browser

            if self._browser is not None:
                logger.warning("Browser disconnected, relaunching")
                self._browser = None

            logger.info("Launching Playwright browser...")
            try:
                self._browser = await self._launcher()
            except PlaywrightError as e:
                raise RenderingEngineError(f"Browser launch failed: {e}") from e
            self.launch_count += 1
            logger.info("Browser launched")
            return self._browser

    async def close(self) -> None:
        """Close the shared browser and stop the Playwright driver."""
        async with self._lock:
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None

            if browser is not None:
                logger.info("Closing Playwright browser...")
                try:
                    await browser.close()
                except Exception:
                    logger.exception("Failed to close browser")
            if playwright is not None:
                try:
                    await playwright.stop()
                except Exception:
                    logger.exception("Failed to stop Playwright")
            logger.info("Browser closed")

    @asynccontextmanager
    async def session(self, image: bool = False, dpi: float = 96.0) -> AsyncIterator[RenderSession]:
        """
        Acquire an isolated session for one render.

        Args:
            image: Configure the context for PNG capture
            dpi: Target image density; sets the device scale factor

        Yields:
            RenderSession, closed on exit whatever happens inside
        """
        browser = await self.start()

        context_options: dict[str, Any]
        if image:
            context_options = {
                "viewport": dict(DEFAULT_IMAGE_VIEWPORT),
                "device_scale_factor": dpi / 96,
            }
        else:
            context_options = {"no_viewport": True}

        try:
            context = await browser.new_context(**context_options)
        except PlaywrightError as e:
            raise RenderingEngineError(f"Failed to open browser context: {e}") from e

        try:
            page = await context.new_page()
        except PlaywrightError as e:
            try:
                await context.close()
            except Exception:
                logger.exception("Failed to close render context")
            raise RenderingEngineError(f"Failed to open page: {e}") from e

        session = RenderSession(
            context,
            page,
            load_timeout_ms=self.load_timeout_ms,
            settle_delay_ms=self.settle_delay_ms,
        )
        try:
            yield session
        finally:
            await session.close()
