"""
Shared fixtures and a Playwright-shaped fake browser.

The fakes implement just the async surface the render session touches, so
the suite runs without Chromium installed.
"""

import asyncio
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from pagefit.app import build_app
from pagefit.config import Settings, init_settings, reset_settings

FAKE_PDF = b"%PDF-1.7\n% fake pdf\n%%EOF"
FAKE_PNG = b"\x89PNG\r\n\x1a\n fake png"


class FakePage:
    def __init__(self, backend: "FakeBackend"):
        self.backend = backend
        self.close_calls = 0
        self.content: str | None = None
        self.load_kwargs: dict[str, Any] = {}
        self.pdf_kwargs: dict[str, Any] | None = None
        self.screenshot_kwargs: dict[str, Any] | None = None
        self.viewport: dict[str, int] | None = None

    async def set_content(self, html: str, **kwargs: Any) -> None:
        self.content = html
        self.load_kwargs = kwargs
        if self.backend.fail_at == "load_timeout":
            raise PlaywrightTimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded.")
        if self.backend.fail_at == "load":
            raise PlaywrightError("net::ERR_ABORTED")

    async def evaluate(self, script: str) -> dict[str, float]:
        if self.backend.fail_at == "measure":
            raise PlaywrightError("Execution context was destroyed")
        width, height = self.backend.content_size
        return {"width": width, "height": height}

    async def pdf(self, **kwargs: Any) -> bytes:
        self.pdf_kwargs = kwargs
        if self.backend.fail_at == "emit":
            raise PlaywrightError("Target page, context or browser has been closed")
        return self.backend.pdf_bytes

    async def set_viewport_size(self, size: dict[str, int]) -> None:
        if self.backend.fail_at == "viewport":
            raise PlaywrightError("Viewport resize not supported")
        self.viewport = dict(size)

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.screenshot_kwargs = kwargs
        if self.backend.fail_at == "emit":
            raise PlaywrightError("Target crashed")
        return self.backend.png_bytes

    async def close(self) -> None:
        self.close_calls += 1
        if self.backend.fail_at == "close":
            raise PlaywrightError("Page already closed")


class FakeContext:
    def __init__(self, backend: "FakeBackend", options: dict[str, Any]):
        self.backend = backend
        self.options = options
        self.pages: list[FakePage] = []
        self.close_calls = 0

    async def new_page(self) -> FakePage:
        if self.backend.fail_at == "new_page":
            raise PlaywrightError("Browser has been closed")
        page = FakePage(self.backend)
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_calls += 1
        if self.backend.fail_at == "close":
            raise PlaywrightError("Context already closed")


class FakeBrowser:
    def __init__(self, backend: "FakeBackend"):
        self.backend = backend
        self.contexts: list[FakeContext] = []
        self.connected = True
        self.close_calls = 0

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **options: Any) -> FakeContext:
        context = FakeContext(self.backend, options)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_calls += 1
        self.connected = False


class FakeBackend:
    """Launcher plus knobs: measured content size, output bytes, fault stage."""

    def __init__(self) -> None:
        self.content_size: tuple[float, float] = (800, 600)
        self.pdf_bytes = FAKE_PDF
        self.png_bytes = FAKE_PNG
        self.fail_at: str | None = None
        self.browsers: list[FakeBrowser] = []

    async def launch(self) -> FakeBrowser:
        # Yield once so concurrent callers overlap with the launch.
        await asyncio.sleep(0)
        browser = FakeBrowser(self)
        self.browsers.append(browser)
        return browser

    @property
    def browser(self) -> FakeBrowser:
        return self.browsers[-1]

    @property
    def last_context(self) -> FakeContext:
        return self.browser.contexts[-1]

    @property
    def last_page(self) -> FakePage:
        return self.last_context.pages[-1]


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    out = tmp_path / "output"
    out.mkdir()
    return out


@pytest.fixture
def settings(tmp_path: Path, temp_dir: Path) -> Settings:
    reset_settings()
    s = Settings(
        output_dir=temp_dir,
        api_key=None,
        api_keys_file=tmp_path / "apikeys.txt",
        settle_delay_ms=0,
        rate_limit_max=1000,
    )
    init_settings(s)
    yield s
    reset_settings()


@pytest.fixture
def client(settings: Settings, backend: FakeBackend) -> TestClient:
    app = build_app(settings, launcher=backend.launch)
    with TestClient(app) as c:
        yield c
