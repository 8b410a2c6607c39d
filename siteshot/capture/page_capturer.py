"""
Page Capturer
=============
Drives headless Chromium (Playwright) to rasterize a web page.

Every call launches its own browser process and closes it as soon as the
screenshot bytes are in hand. No pooling: the browser is the largest
memory consumer in the pipeline and must be gone before compositing or
encoding starts.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from ..config import Settings, get_settings
from ..errors import CaptureFailed, CaptureTimeout, CaptureUnavailable
from .models import CaptureMode, CaptureRequest, CapturedImage

SCROLL_HEIGHT_JS = """
() => Math.max(
    document.body ? document.body.scrollHeight : 0,
    document.documentElement ? document.documentElement.scrollHeight : 0
)
"""

SCROLL_TO_JS = "(y) => window.scrollTo(0, y)"


class PageCapturer:
    """
    Headless-browser page capture.

    Usage:
        capturer = PageCapturer()
        image = await capturer.capture(CaptureRequest(url="https://example.com"))
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        playwright_factory: Callable = async_playwright,
    ):
        self.settings = settings or get_settings()
        self._playwright_factory = playwright_factory
        self.launch_count = 0

    async def capture(self, request: CaptureRequest) -> CapturedImage:
        """
        Navigate to ``request.url`` and return a PNG of the viewport or full page.

        Raises:
            CaptureTimeout: navigation exceeded the configured timeout
            CaptureUnavailable: the browser could not be launched
            CaptureFailed: any other navigation/screenshot error
        """
        start_time = time.time()
        logger.info(f"[Capture] {request.url} ({request.mode.value})")

        async with self._browser_page(request) as page:
            await self._navigate(page, request.url)
            try:
                data = await page.screenshot(
                    full_page=request.mode == CaptureMode.FULL_PAGE,
                    type="png",
                )
            except PlaywrightError as e:
                raise CaptureFailed(f"Screenshot failed for {request.url}: {e}") from e

        image = CapturedImage.from_bytes(data)
        logger.info(
            f"[Capture] Done: {image.width}x{image.height}, "
            f"{len(data)} bytes ({time.time() - start_time:.2f}s)"
        )
        return image

    async def capture_scroll_frames(
        self,
        request: CaptureRequest,
        frame_count: int,
        frames_dir: Path,
    ) -> List[Path]:
        """
        Scroll the page top to bottom in ``frame_count`` equal steps, writing
        one viewport PNG per step into ``frames_dir``.

        The browser stays open for the whole loop and is closed before this
        returns, so the encoder never runs alongside it.
        """
        if frame_count < 1:
            raise ValueError("frame_count must be at least 1")

        frames_dir.mkdir(parents=True, exist_ok=True)
        frame_paths: List[Path] = []

        async with self._browser_page(request) as page:
            await self._navigate(page, request.url)
            try:
                scroll_height = int(await page.evaluate(SCROLL_HEIGHT_JS))
                max_scroll = max(0, scroll_height - request.viewport.height)
                step = max_scroll / (frame_count - 1) if frame_count > 1 else 0.0

                logger.info(
                    f"[Capture] Scroll capture: {frame_count} frames over {max_scroll}px"
                )

                for index in range(frame_count):
                    await page.evaluate(SCROLL_TO_JS, round(index * step))
                    frame_path = frames_dir / f"frame_{index:04d}.png"
                    await page.screenshot(path=str(frame_path), type="png")
                    frame_paths.append(frame_path)
            except PlaywrightError as e:
                raise CaptureFailed(f"Scroll capture failed for {request.url}: {e}") from e

        return frame_paths

    async def _navigate(self, page, url: str) -> None:
        timeout_ms = self.settings.navigation_timeout_ms
        try:
            # domcontentloaded, not networkidle: long-polling pages never go idle
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise CaptureTimeout(
                f"Navigation to {url} timed out after {timeout_ms / 1000:.0f}s"
            ) from e
        except PlaywrightError as e:
            raise CaptureFailed(f"Navigation to {url} failed: {e}") from e

        if self.settings.settle_delay_ms:
            await page.wait_for_timeout(self.settings.settle_delay_ms)

    @asynccontextmanager
    async def _browser_page(self, request: CaptureRequest) -> AsyncIterator:
        """Launch a browser for one request; always closes it on exit."""
        try:
            playwright = await self._playwright_factory().start()
        except Exception as e:
            raise CaptureUnavailable(f"Playwright driver failed to start: {e}") from e

        browser = None
        try:
            try:
                browser = await playwright.chromium.launch(
                    headless=True,
                    args=list(self.settings.browser_args),
                )
            except PlaywrightError as e:
                raise CaptureUnavailable(f"Browser launch failed: {e}") from e
            self.launch_count += 1

            try:
                page = await browser.new_page(
                    viewport=request.viewport.as_playwright(),
                    device_scale_factor=request.viewport.device_scale_factor,
                )
            except PlaywrightError as e:
                raise CaptureFailed(f"Could not open a page: {e}") from e

            yield page
        finally:
            if browser is not None:
                await self._close_browser(browser)
            await self._stop_playwright(playwright)

    async def _close_browser(self, browser) -> None:
        try:
            # Shielded so a cancelled job still reaps its browser
            await asyncio.shield(browser.close())
            logger.debug("[Capture] Browser closed")
        except PlaywrightError as e:
            logger.error(f"[Capture] Browser close failed: {e}")

    async def _stop_playwright(self, playwright) -> None:
        try:
            await asyncio.shield(playwright.stop())
        except PlaywrightError as e:
            logger.error(f"[Capture] Playwright stop failed: {e}")
