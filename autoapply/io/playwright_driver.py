"""
Playwright-based BrowserDriver implementation.

Conforms to io/driver.py's BrowserDriver Protocol:
- start() / stop()
- new_context() / close_context(ctx)
- goto(ctx, url, wait_until=?) / current_url(ctx)
- wait_for_element(ctx, matcher) / wait_for_url(ctx, pattern) / sleep(ctx, ms)
- query(ctx, matcher, scope=?) -> [ElementHandle]
- is_visible / is_enabled / text_content on handles
- click(handle, force=?) / invoke(handle) / fill(handle, text) / press_key(ctx, key)
- screenshot(ctx, path)

Fingerprint normalization is limited to a fixed desktop user agent, a
maximized window (viewport follows window size) and an optional browser
channel (e.g. "chrome" to use the installed Chrome).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Page,
    Playwright,
    async_playwright,
)

from ..core.action import Matcher
from ..core.settings import DEFAULT_USER_AGENT

# pointer-events/z-index are forced so the native click lands even when the
# element is styled as inert by an animation or overlay
_PROGRAMMATIC_CLICK = """
el => {
  el.style.pointerEvents = "auto";
  el.style.zIndex = "9999";
  el.click();
}
"""


class PlaywrightDriver:
    """
    A concrete BrowserDriver based on Playwright Chromium.
    - `ctx` in this implementation is a Playwright `Page`.
    - Each `new_context()` creates an incognito BrowserContext + a new Page.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        slow_mo_ms: int = 0,
        default_timeout_ms: int = 30_000,
        channel: str | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.headless = headless
        self.slow_mo_ms = slow_mo_ms
        self.default_timeout_ms = default_timeout_ms
        self.channel = channel
        self.user_agent = user_agent

        self._pw: Optional[Playwright] = None  # playwright instance
        self._browser: Optional[Browser] = None
        self._page_to_context: Dict[Page, BrowserContext] = {}

    # ---------------- lifecycle ----------------

    async def start(self) -> None:
        """Launch Playwright and a Chromium browser once."""
        if self._browser is not None:
            return
        pw = await async_playwright().start()
        self._pw = pw
        launch_args: Dict[str, Any] = {
            "headless": self.headless,
            "slow_mo": self.slow_mo_ms,
            "args": ["--start-maximized"],
        }
        if self.channel:
            launch_args["channel"] = self.channel
        self._browser = await pw.chromium.launch(**launch_args)

    async def stop(self) -> None:
        """Close all contexts and stop Playwright."""
        try:
            for page, ctx in list(self._page_to_context.items()):
                try:
                    await page.close()
                except Exception:
                    pass
                try:
                    await ctx.close()
                except Exception:
                    pass
            self._page_to_context.clear()
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._pw is not None:
                await self._pw.stop()
            self._pw = None
            self._browser = None

    async def new_context(self) -> Page:
        """
        Create a fresh incognito context + page.
        Returns the Page object to be used as `ctx`.
        """
        self._ensure_started()
        assert self._browser is not None
        # viewport=None: the page follows the (maximized) window size
        ctx = await self._browser.new_context(no_viewport=True, user_agent=self.user_agent)
        ctx.set_default_timeout(self.default_timeout_ms)
        page = await ctx.new_page()
        self._page_to_context[page] = ctx
        return page

    async def close_context(self, ctx: Any) -> None:
        """Close the page and its owning context."""
        page = self._as_page(ctx)
        context = self._page_to_context.pop(page, None)
        try:
            await page.close()
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception:
                    pass

    # ---------------- navigation & waits ----------------

    async def goto(
        self,
        ctx: Any,
        url: str,
        *,
        timeout_ms: Optional[int] = None,
        wait_until: str = "load",
    ) -> None:
        page = self._as_page(ctx)
        await page.goto(url, timeout=timeout_ms or self.default_timeout_ms, wait_until=wait_until)

    async def current_url(self, ctx: Any) -> str:
        return self._as_page(ctx).url

    async def wait_for_element(
        self, ctx: Any, matcher: Matcher, *, timeout_ms: Optional[int] = None
    ) -> None:
        page = self._as_page(ctx)
        await page.wait_for_selector(
            matcher.to_selector(), state="visible", timeout=timeout_ms or self.default_timeout_ms
        )

    async def wait_for_url(self, ctx: Any, pattern: str, *, timeout_ms: Optional[int] = None) -> None:
        page = self._as_page(ctx)
        await page.wait_for_url(pattern, timeout=timeout_ms or self.default_timeout_ms)

    async def sleep(self, ctx: Any, ms: int) -> None:
        if ms > 0:
            await self._as_page(ctx).wait_for_timeout(ms)

    # ---------------- element queries ----------------

    async def query(self, ctx: Any, matcher: Matcher, *, scope: Any = None) -> list[ElementHandle]:
        root = self._as_page(ctx) if scope is None else scope
        return await root.query_selector_all(matcher.to_selector())

    async def is_visible(self, handle: Any) -> bool:
        return await handle.is_visible()

    async def is_enabled(self, handle: Any) -> bool:
        return await handle.is_enabled()

    async def text_content(self, handle: Any) -> Optional[str]:
        text = await handle.text_content()
        return text.strip() if text is not None else None

    # ---------------- interactions ----------------

    async def scroll_into_view(self, handle: Any) -> None:
        await handle.scroll_into_view_if_needed()

    async def click(
        self, handle: Any, *, timeout_ms: Optional[int] = None, force: bool = False
    ) -> None:
        await handle.click(timeout=timeout_ms or self.default_timeout_ms, force=force)

    async def invoke(self, handle: Any) -> None:
        """Native element.click() through the page's JS, bypassing actionability checks."""
        await handle.evaluate(_PROGRAMMATIC_CLICK)

    async def fill(self, handle: Any, text: str, *, timeout_ms: Optional[int] = None) -> None:
        await handle.fill(text, timeout=timeout_ms or self.default_timeout_ms)

    async def press_key(self, ctx: Any, key: str) -> None:
        await self._as_page(ctx).keyboard.press(key)

    # ---------------- utilities ----------------

    async def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None:
        page = self._as_page(ctx)
        # ensure parent dir exists
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=path, full_page=full_page)

    # ---------------- internals ----------------

    def _ensure_started(self) -> None:
        if self._browser is None:
            raise RuntimeError("Browser not started. Call start() first.")

    @staticmethod
    def _as_page(ctx: Any) -> Page:
        if not isinstance(ctx, Page):
            raise TypeError("ctx must be a Playwright Page (returned by new_context()).")
        return ctx
