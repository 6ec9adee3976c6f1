"""Async Playwright browser session used by playbook actions."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

from playwright.async_api import (
    Browser,
    BrowserContext,
    Dialog,
    Locator,
    Page,
    async_playwright,
)

# Submits the form owning the element.
_SUBMIT_JS = """
el => {
    const form = el.form || el.closest('form');
    if (!form) throw new Error('element is not inside a form');
    if (form.requestSubmit) form.requestSubmit(); else form.submit();
}
"""

# Sets the value property directly, then fires input and change.
_SET_VALUE_JS = """
(el, value) => {
    el.value = value;
    el.dispatchEvent(new Event('input', { bubbles: true }));
    el.dispatchEvent(new Event('change', { bubbles: true }));
}
"""


@dataclass
class BrowserSession:
    """Manages one Chromium browser page via Playwright.

    All element methods take a CSS selector and a timeout in milliseconds.
    """

    headless: bool = True
    proxy: str = ""
    viewport: dict[str, int] = field(
        default_factory=lambda: {"width": 1280, "height": 720}
    )
    _playwright: Any = field(default=None, repr=False)
    _browser: Browser | None = field(default=None, repr=False)
    _context: BrowserContext | None = field(default=None, repr=False)
    _page: Page | None = field(default=None, repr=False)

    async def __aenter__(self) -> "BrowserSession":
        self._playwright = await async_playwright().start()
        launch: dict[str, Any] = {"headless": self.headless}
        if self.proxy:
            launch["proxy"] = {"server": self.proxy}
        self._browser = await self._playwright.chromium.launch(**launch)
        self._context = await self._browser.new_context(viewport=self.viewport)
        self._page = await self._context.new_page()
        self._page.on("dialog", self._handle_dialog)
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()

    @staticmethod
    async def _handle_dialog(dialog: Dialog) -> None:
        print(f"[session] Dismissing {dialog.type} dialog: {dialog.message}", file=sys.stderr)
        await dialog.dismiss()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser not started, use async with")
        return self._page

    def _locate(self, selector: str) -> Locator:
        return self.page.locator(selector).first

    async def navigate(self, url: str, timeout: float = 60_000) -> None:
        await self.page.goto(url, wait_until="load", timeout=timeout)

    async def click(self, selector: str, timeout: float = 60_000) -> None:
        await self._locate(selector).click(timeout=timeout)

    async def send_keys(self, selector: str, text: str, timeout: float = 60_000) -> None:
        await self._locate(selector).press_sequentially(text, timeout=timeout)

    async def submit(self, selector: str, timeout: float = 60_000) -> None:
        await self._locate(selector).evaluate(_SUBMIT_JS, timeout=timeout)

    async def set_value(self, selector: str, value: str, timeout: float = 60_000) -> None:
        await self._locate(selector).evaluate(_SET_VALUE_JS, value, timeout=timeout)

    async def wait_visible(self, selector: str, timeout: float = 60_000) -> None:
        await self._locate(selector).wait_for(state="visible", timeout=timeout)

    async def wait_ready(self, selector: str, timeout: float = 60_000) -> None:
        await self._locate(selector).wait_for(state="attached", timeout=timeout)

    async def scroll_into_view(self, selector: str, timeout: float = 60_000) -> None:
        await self._locate(selector).scroll_into_view_if_needed(timeout=timeout)

    async def get_text(self, selector: str, timeout: float = 60_000) -> str:
        text = await self._locate(selector).text_content(timeout=timeout)
        return text or ""

    async def capture_screenshot(self, timeout: float = 60_000) -> bytes:
        return await self.page.screenshot(timeout=timeout)
