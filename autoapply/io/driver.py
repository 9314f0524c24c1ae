"""
Browser driver protocol (abstraction).

This Protocol defines the minimal browser control surface the engine relies
on. Locators, the actuator and the runner only ever talk to it, so a
Playwright backend and the in-memory test backend are interchangeable.

Notes:
- `ctx` is the execution context for one session. In the Playwright
  implementation it is a `Page` created via `new_context()`.
- `handle` is an opaque element handle returned by `query()`. It is valid only
  until the next navigation or DOM mutation.
- `scope=None` means the whole document; otherwise the search is restricted to
  the sub-tree of the given handle.

Also provides two driver-agnostic helpers:
- race(): first-of-N await-able conditions with a timeout
- browser_session(): scoped acquisition / guaranteed release of a session
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Mapping, Protocol

from ..core.action import Matcher
from ..core.errors import BrowserStartError

logger = logging.getLogger(__name__)


class BrowserDriver(Protocol):
    # -------- lifecycle --------
    async def start(self) -> None: ...
    async def stop(self) -> None: ...
    async def new_context(self) -> Any: ...
    async def close_context(self, ctx: Any) -> None: ...

    # -------- navigation & waits --------
    async def goto(
        self, ctx: Any, url: str, *, timeout_ms: int | None = None, wait_until: str = "load"
    ) -> None: ...
    async def current_url(self, ctx: Any) -> str: ...
    async def wait_for_element(
        self, ctx: Any, matcher: Matcher, *, timeout_ms: int | None = None
    ) -> None: ...
    async def wait_for_url(self, ctx: Any, pattern: str, *, timeout_ms: int | None = None) -> None: ...
    async def sleep(self, ctx: Any, ms: int) -> None: ...

    # -------- element queries --------
    async def query(self, ctx: Any, matcher: Matcher, *, scope: Any = None) -> list[Any]: ...
    async def is_visible(self, handle: Any) -> bool: ...
    async def is_enabled(self, handle: Any) -> bool: ...
    async def text_content(self, handle: Any) -> str | None: ...

    # -------- interactions --------
    async def scroll_into_view(self, handle: Any) -> None: ...
    async def click(
        self, handle: Any, *, timeout_ms: int | None = None, force: bool = False
    ) -> None: ...
    async def invoke(self, handle: Any) -> None: ...
    async def fill(self, handle: Any, text: str, *, timeout_ms: int | None = None) -> None: ...
    async def press_key(self, ctx: Any, key: str) -> None: ...

    # -------- utilities --------
    async def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None: ...


async def race(conditions: Mapping[str, Awaitable[Any]], *, timeout_ms: int) -> str | None:
    """
    Wait for the first condition that completes without raising.

    Returns the winning condition's name, or None when none completed in time.
    A condition that raises (e.g. its own timeout) simply drops out of the
    race. Losers are cancelled on return; they carry no side effects.
    """
    loop = asyncio.get_running_loop()
    tasks = {asyncio.ensure_future(aw): name for name, aw in conditions.items()}
    pending = set(tasks)
    deadline = loop.time() + timeout_ms / 1000
    try:
        while pending:
            remaining = deadline - loop.time()
            if remaining <= 0:
                break
            done, pending = await asyncio.wait(
                pending, timeout=remaining, return_when=asyncio.FIRST_COMPLETED
            )
            winner = None
            for task in done:
                # retrieve every exception, even after a winner is known
                if not task.cancelled() and task.exception() is None and winner is None:
                    winner = tasks[task]
            if winner is not None:
                return winner
        return None
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


@asynccontextmanager
async def browser_session(driver: BrowserDriver) -> AsyncIterator[Any]:
    """
    Start the driver, open one context and yield it. Teardown always runs;
    teardown errors are logged and never re-raised.
    """
    try:
        await driver.start()
    except Exception as e:  # noqa: BLE001
        await _quietly("stop browser", driver.stop())
        raise BrowserStartError(f"browser failed to start: {e}") from e

    ctx = None
    try:
        try:
            ctx = await driver.new_context()
        except Exception as e:  # noqa: BLE001
            raise BrowserStartError(f"browser context failed to open: {e}") from e
        yield ctx
    finally:
        if ctx is not None:
            await _quietly("close context", driver.close_context(ctx))
        await _quietly("stop browser", driver.stop())
        logger.info("Browser closed")


async def _quietly(what: str, aw: Awaitable[Any]) -> None:
    try:
        await aw
    except Exception as e:  # noqa: BLE001
        logger.warning("Teardown step failed (%s): %s", what, e)
