"""
In-memory DOM + driver used by the engine tests.

FakeDriver implements the BrowserDriver protocol by walking FakeElement trees
and evaluating Matcher.matches(), so locator policy is exercised without a
browser. FakeBoard renders a small paginated job board on top of it.
"""
# @file purpose: Test doubles for the browser-control surface.

from __future__ import annotations

import asyncio
import fnmatch
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

import pytest

import autoapply.actions.impl  # noqa: F401  (registers locator chains)
from autoapply.actions.sites.instahyre import INSTAHYRE
from autoapply.core.config import RunConfig, parse_config
from autoapply.core.settings import Settings


class FakeElement:
    def __init__(
        self,
        tag: str,
        text: str = "",
        *,
        cls: str = "",
        children: tuple["FakeElement", ...] = (),
        visible: bool = True,
        enabled: bool = True,
        on_click: Callable[[], None] | None = None,
        fail: tuple[str, ...] = (),
        reveal_on_scroll: bool = False,
        **attrs: str,
    ) -> None:
        self.tag = tag
        self.text = text
        self.attrs = {k.replace("_", "-"): v for k, v in attrs.items()}
        if cls:
            self.attrs["class"] = cls
        self.visible = visible
        self.enabled = enabled
        self.on_click = on_click
        self.fail = set(fail)
        self.reveal_on_scroll = reveal_on_scroll
        self.is_root = False
        self.parent: FakeElement | None = None
        self.children: list[FakeElement] = []
        self.value: str | None = None
        for c in children:
            self.append(c)

    def append(self, child: "FakeElement") -> "FakeElement":
        child.parent = self
        self.children.append(child)
        return child

    def remove(self) -> None:
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def clear(self) -> None:
        for c in list(self.children):
            c.remove()

    def walk(self) -> Iterator["FakeElement"]:
        for c in self.children:
            yield c
            yield from c.walk()

    @property
    def attached(self) -> bool:
        node: FakeElement | None = self
        while node is not None:
            if node.is_root:
                return True
            node = node.parent
        return False

    @property
    def full_text(self) -> str:
        return " ".join(t for t in [self.text, *(c.full_text for c in self.children)] if t)

    def __repr__(self) -> str:
        return f"<{self.tag} {self.attrs} {self.text!r}>"


class FakePage:
    def __init__(self, url: str = "about:blank") -> None:
        self.root = FakeElement("html")
        self.root.is_root = True
        self.url = url
        self.keys: list[str] = []
        self.navigations: list[str] = []
        self.on_goto: Callable[[str], None] | None = None
        self.on_key: Callable[[str], None] | None = None


class FakeDriver:
    """BrowserDriver over FakePage. Records every activation as (element, technique)."""

    def __init__(self, page: FakePage | None = None) -> None:
        self.page = page or FakePage()
        self.activations: list[tuple[FakeElement, str]] = []
        self.slept: list[int] = []
        self.screenshots: list[str] = []
        self.started = False
        self.stopped = False
        self.fail_start = False
        self.fail_stop = False
        self.fail_query = False

    # lifecycle
    async def start(self) -> None:
        if self.fail_start:
            raise RuntimeError("no browser")
        self.started = True

    async def stop(self) -> None:
        self.stopped = True
        if self.fail_stop:
            raise RuntimeError("stop failed")

    async def new_context(self) -> FakePage:
        return self.page

    async def close_context(self, ctx: Any) -> None:
        pass

    # navigation & waits
    async def goto(self, ctx: FakePage, url: str, *, timeout_ms=None, wait_until="load") -> None:
        ctx.navigations.append(url)
        ctx.url = url
        if ctx.on_goto:
            ctx.on_goto(url)

    async def current_url(self, ctx: FakePage) -> str:
        return ctx.url

    async def wait_for_element(self, ctx: FakePage, matcher, *, timeout_ms=None) -> None:
        async def visible() -> bool:
            return any(e.visible for e in await self.query(ctx, matcher))

        await self._poll(visible, timeout_ms)

    async def wait_for_url(self, ctx: FakePage, pattern: str, *, timeout_ms=None) -> None:
        async def matched() -> bool:
            return fnmatch.fnmatch(ctx.url, pattern)

        await self._poll(matched, timeout_ms)

    async def sleep(self, ctx: Any, ms: int) -> None:
        self.slept.append(ms)
        await asyncio.sleep(0)

    async def _poll(self, check, timeout_ms) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + (timeout_ms or 1_000) / 1000
        while not await check():
            if loop.time() >= deadline:
                raise asyncio.TimeoutError("condition not met")
            await asyncio.sleep(0.002)

    # queries
    async def query(self, ctx: FakePage, matcher, *, scope: FakeElement | None = None) -> list:
        if self.fail_query:
            raise RuntimeError("query exploded")
        root = ctx.root if scope is None else scope
        if not root.attached:
            return []
        return [e for e in root.walk() if matcher.matches(e.tag, e.attrs, e.full_text)]

    async def is_visible(self, handle: FakeElement) -> bool:
        return handle.attached and handle.visible

    async def is_enabled(self, handle: FakeElement) -> bool:
        return handle.enabled

    async def text_content(self, handle: FakeElement) -> str | None:
        return handle.full_text.strip()

    # interactions
    async def scroll_into_view(self, handle: FakeElement) -> None:
        if handle.reveal_on_scroll:
            handle.visible = True

    async def click(self, handle: FakeElement, *, timeout_ms=None, force=False) -> None:
        self._activate(handle, "forced" if force else "standard")

    async def invoke(self, handle: FakeElement) -> None:
        self._activate(handle, "programmatic")

    async def fill(self, handle: FakeElement, text: str, *, timeout_ms=None) -> None:
        handle.value = text

    async def press_key(self, ctx: FakePage, key: str) -> None:
        ctx.keys.append(key)
        if ctx.on_key:
            ctx.on_key(key)

    async def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None:
        self.screenshots.append(path)

    def _activate(self, handle: FakeElement, technique: str) -> None:
        self.activations.append((handle, technique))
        if technique in handle.fail:
            raise RuntimeError(f"{technique} click intercepted")
        if handle.on_click:
            handle.on_click()


# ---------------------------------------------------------------------------
# A paginated job board
# ---------------------------------------------------------------------------


@dataclass
class Job:
    title: str
    company: str = "Acme"
    has_apply: bool = True
    with_dialog: bool = False


@dataclass
class FakeBoard:
    """
    Cards carry a "View" button; viewing a card fills a detail panel that
    lives outside the cards with that job's Apply button (if it has one).
    """

    pages: list[list[Job]]
    driver: FakeDriver = field(default_factory=FakeDriver)
    logged_in: bool = True
    accepts_login: bool = True
    welcome_dialog: bool = False
    current_page: int = 0
    applied: list[str] = field(default_factory=list)
    bulk_applied: list[str] = field(default_factory=list)
    views: int = 0
    dialogs: list[FakeElement] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.page.on_goto = self._on_goto

    @property
    def page(self) -> FakePage:
        return self.driver.page

    def _on_goto(self, url: str) -> None:
        if not self.logged_in:
            self.page.url = "https://www.instahyre.com/login/"
            self._render_login()
        else:
            self.current_page = 0
            self._render()
        if self.welcome_dialog:
            dialog = FakeElement("div", role="dialog")
            dialog.append(FakeElement("p", "Welcome back! Complete your profile."))
            dialog.append(FakeElement("button", "×", cls="close", on_click=dialog.remove))
            self.page.root.append(dialog)
            self.dialogs.append(dialog)

    def _render_login(self) -> None:
        self.page.root.clear()
        self.page.root.append(
            FakeElement(
                "form",
                children=(
                    FakeElement("input", type="email", name="email"),
                    FakeElement("input", type="password", name="password"),
                    FakeElement("button", "Login", type="submit", on_click=self._submit_login),
                ),
            )
        )

    def _submit_login(self) -> None:
        if self.accepts_login:
            self.logged_in = True
            self.page.url = INSTAHYRE.listing_url
            self.current_page = 0
            self._render()

    def _render(self) -> None:
        root = self.page.root
        root.clear()
        jobs = self.pages[self.current_page] if self.pages else []
        self.panel = FakeElement("div", cls="detail-panel")
        results = FakeElement("div", cls="results")
        for job in jobs:
            results.append(
                FakeElement(
                    "div",
                    cls="opportunity-card",
                    children=(
                        FakeElement("h3", job.title),
                        FakeElement("div", job.company, cls="company"),
                        FakeElement(
                            "button",
                            "View",
                            cls="button-interested btn btn-success",
                            on_click=lambda job=job: self._view(job),
                        ),
                    ),
                )
            )
        root.append(results)
        root.append(self.panel)
        if self.current_page + 1 < len(self.pages):
            root.append(FakeElement("button", "Next", cls="pagination-next", on_click=self._next))

    def _view(self, job: Job) -> None:
        self.views += 1
        self.panel.clear()
        if job.has_apply:
            self.panel.append(
                FakeElement(
                    "button",
                    "Apply",
                    cls="btn btn-lg btn-primary new-btn",
                    on_click=lambda: self._apply(job),
                )
            )

    def _apply(self, job: Job) -> None:
        self.applied.append(job.title)
        self.panel.clear()
        if job.with_dialog:
            modal = FakeElement("div", cls="modal")
            modal.append(
                FakeElement(
                    "button",
                    "Apply to similar",
                    cls="btn btn-lg btn-success",
                    ng_click="applyBulk()",
                    on_click=lambda: self.bulk_applied.append(job.title),
                )
            )
            modal.append(FakeElement("button", "×", cls="close", on_click=modal.remove))
            self.page.root.append(modal)

    def _next(self) -> None:
        self.current_page += 1
        self._render()


# ---------------------------------------------------------------------------
# fixtures
# ---------------------------------------------------------------------------


def make_config(max_pages: int = 5, **settings: Any) -> RunConfig:
    data = {
        "credentials": {"identifier": "me@example.com", "secret": "hunter2"},
        "settings": {
            "headless": True,
            "interactionDelayMs": 0,
            "maxPages": max_pages,
            "perItemDelayMs": 0,
            **settings,
        },
    }
    return parse_config(data)


@pytest.fixture
def fast_settings() -> Settings:
    return Settings(
        settle_ms=0,
        apply_settle_ms=0,
        page_settle_ms=0,
        secondary_apply_timeout_ms=30,
        landing_probe_timeout_ms=10,
        auth_timeout_ms=50,
        auth_ceiling_ms=100,
        artifacts_dir=None,
    )


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver()
