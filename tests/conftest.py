"""
Shared fixtures: PNG factory, settings, in-memory Playwright fake and a
recording ffmpeg encoder.
"""
import asyncio
import struct
import zlib
from io import BytesIO
from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest
from PIL import Image

from siteshot.config import Settings
from siteshot.capture import PageCapturer
from siteshot.pipeline import MemoryGate, PipelineOrchestrator
from siteshot.video_renderer import FFmpegEncoder


def make_png(width: int, height: int, color=(200, 40, 40)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_broken_png(width: int = 64, height: int = 64) -> bytes:
    """
    PNG whose header opens cleanly but whose second IDAT chunk has a
    corrupt type, so decoding the pixels fails partway through.
    """
    rng = np.random.default_rng(7)
    rows = rng.integers(0, 256, size=(height, width * 3), dtype=np.uint8)
    raw = b"".join(b"\x00" + row.tobytes() for row in rows)
    compressed = zlib.compress(raw)
    half = len(compressed) // 2

    def chunk(kind: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(kind + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + chunk(b"IHDR", header)
        + chunk(b"IDAT", compressed[:half])
        + chunk(b"IDA\x14", compressed[half:])
        + chunk(b"IEND", b"")
    )


class FakePage:
    def __init__(self, world: "FakeBrowserWorld", viewport: dict, device_scale_factor: float):
        self.world = world
        self.viewport = viewport
        self.device_scale_factor = device_scale_factor

    async def goto(self, url, wait_until=None, timeout=None):
        self.world.navigations.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        if self.world.goto_gate is not None:
            await self.world.goto_gate.wait()
        if self.world.hang_until_timeout:
            await asyncio.sleep(timeout / 1000)
            from playwright.async_api import TimeoutError as PlaywrightTimeoutError
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        if self.world.goto_error is not None:
            raise self.world.goto_error

    async def wait_for_timeout(self, ms):
        self.world.settle_waits.append(ms)

    async def evaluate(self, script, arg=None):
        if "scrollHeight" in script:
            return self.world.page_height
        self.world.scroll_positions.append(arg)

    async def screenshot(self, full_page=False, type="png", path=None):
        height = self.world.page_height if full_page else self.viewport["height"]
        data = self.world.screenshot_data or make_png(
            self.viewport["width"], height, self.world.page_color
        )
        self.world.screenshots += 1
        if path:
            Path(path).write_bytes(data)
        return data


class FakeBrowser:
    def __init__(self, world: "FakeBrowserWorld"):
        self.world = world
        self.closed = False

    async def new_page(self, viewport=None, device_scale_factor=1.0):
        return FakePage(self.world, viewport, device_scale_factor)

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, world: "FakeBrowserWorld"):
        self.world = world

    async def launch(self, headless=True, args=None):
        if self.world.launch_error is not None:
            raise self.world.launch_error
        self.world.launch_args.append(list(args or []))
        browser = FakeBrowser(self.world)
        self.world.browsers.append(browser)
        return browser


class FakePlaywright:
    def __init__(self, world: "FakeBrowserWorld"):
        self.chromium = FakeChromium(world)
        self.world = world

    async def stop(self):
        self.world.stopped += 1


class FakeBrowserWorld:
    """
    Stands in for ``async_playwright``: calling it returns an object whose
    ``start()`` yields a fake Playwright driver. Records everything.
    """

    def __init__(self, page_height: int = 2400, page_color=(30, 90, 200)):
        self.page_height = page_height
        self.page_color = page_color
        self.goto_error: Optional[Exception] = None
        self.launch_error: Optional[Exception] = None
        self.goto_gate: Optional[asyncio.Event] = None
        self.hang_until_timeout = False
        self.screenshot_data: Optional[bytes] = None
        self.browsers: List[FakeBrowser] = []
        self.launch_args: List[list] = []
        self.navigations: List[dict] = []
        self.settle_waits: List[int] = []
        self.scroll_positions: List[int] = []
        self.screenshots = 0
        self.stopped = 0

    def __call__(self):
        return self

    async def start(self):
        return FakePlaywright(self)

    @property
    def open_browsers(self) -> int:
        return sum(1 for b in self.browsers if not b.closed)


class RecordingEncoder(FFmpegEncoder):
    """Records ffmpeg invocations and writes a placeholder MP4 instead of encoding."""

    def __init__(self, settings: Settings, error: Optional[Exception] = None):
        super().__init__(settings=settings)
        self.calls: List[List[str]] = []
        self.error = error

    async def run(self, args, output_path, duration_seconds=None, on_progress=None):
        self.calls.append(list(args))
        if self.error is not None:
            raise self.error
        output_path.write_bytes(b"\x00\x00\x00\x18ftypmp42fake")
        if on_progress:
            on_progress(1.0)
        return output_path


@pytest.fixture
def settings(tmp_path):
    return Settings(
        temp_dir=tmp_path / "jobs",
        settle_delay_ms=1500,
        navigation_timeout_ms=60000,
        video_width=640,
        video_height=360,
        video_fps=10,
        video_duration_seconds=2,
        cleanup_grace_seconds=0,
        memory_limit_mb=1024,
    )


@pytest.fixture
def browser():
    return FakeBrowserWorld()


@pytest.fixture
def capturer(settings, browser):
    return PageCapturer(settings=settings, playwright_factory=browser)


@pytest.fixture
def encoder(settings):
    return RecordingEncoder(settings)


@pytest.fixture
def make_orchestrator(settings, capturer, encoder):
    def _make(memory_used: int = 100 * 2**20, **kwargs):
        gate = MemoryGate(threshold=0.8, limit_bytes=1024 * 2**20, reader=lambda: memory_used)
        return PipelineOrchestrator(
            settings=kwargs.pop("settings", settings),
            capturer=kwargs.pop("capturer", capturer),
            encoder=kwargs.pop("encoder", encoder),
            memory_gate=gate,
            **kwargs,
        )

    return _make
